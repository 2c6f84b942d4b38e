"""스크래치 엔진 어댑터.

DDL 실행과 구조 조회에만 쓰이는 MySQL 호환 임시 엔진에 접속한다.
SQL은 pymysql로, 메타데이터 일괄 적재는 엔진의 상태 HTTP 엔드포인트로 보낸다.
"""

import threading
import time
from typing import Any, Optional, Protocol, Sequence

import httpx
import pymysql
from pymysql.constants import CLIENT

from pitr.core.config import Settings
from pitr.core.errors import EngineConnectionError, EngineError, EngineExecutionError
from pitr.core.logging import get_logger
from pitr.core.quoting import quote_identifier

logger = get_logger(__name__)

CATALOG_LOAD_PATH = "/catalog/meta"
CATALOG_RELOAD_PATH = "/catalog/reload"


class ScratchEngine(Protocol):
    """스크래치 엔진이 제공해야 하는 기능."""

    def execute(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> None: ...

    def query(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[tuple[Any, ...]]: ...

    def list_databases(self) -> list[str]: ...

    def list_tables(self, schema: str) -> list[str]: ...

    def bulk_load_catalog(self, databases: list[dict[str, Any]]) -> None: ...

    def reload_catalog(self) -> None: ...

    def close(self) -> None: ...


class MySQLScratchEngine:
    """MySQL 프로토콜로 접속하는 스크래치 엔진 어댑터.

    하나의 세션(연결)을 공유한다. 문장 실행 순서는 호출자가 책임지며,
    락은 한 번의 왕복이 다른 스레드의 패킷과 섞이지 않도록만 보장한다.
    """

    def __init__(self, settings: Settings) -> None:
        """어댑터 초기화.

        Args:
            settings: 애플리케이션 설정
        """
        self._settings = settings
        self._connection: Any = None
        self._lock = threading.Lock()

    def connect(self) -> Any:
        """스크래치 엔진에 연결. 설정된 횟수만큼 재시도한다.

        Returns:
            데이터베이스 연결 객체

        Raises:
            EngineConnectionError: 모든 재시도가 실패한 경우
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self._settings.connect_retries + 1):
            try:
                self._connection = pymysql.connect(
                    host=self._settings.engine_host,
                    port=self._settings.engine_port,
                    user=self._settings.engine_user,
                    password=self._settings.engine_password,
                    charset="utf8mb4",
                    autocommit=True,
                    client_flag=CLIENT.MULTI_STATEMENTS,
                )
                return self._connection
            except pymysql.MySQLError as e:
                last_error = e
                logger.debug("engine.connect.retry", attempt=attempt, error=str(e))
                time.sleep(self._settings.connect_retry_interval)

        raise EngineConnectionError(
            f"스크래치 엔진 접속 실패 "
            f"({self._settings.engine_host}:{self._settings.engine_port}): {last_error}"
        ) from last_error

    def _require_connection(self) -> Any:
        if self._connection is None:
            raise RuntimeError("연결이 설정되지 않았습니다. connect()를 먼저 호출하세요.")
        return self._connection

    def execute(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> None:
        """결과 집합이 없는 문장(DDL, INSERT 등)을 실행.

        ``use db; ...`` 처럼 여러 문장이 올 수 있으므로 남은 결과 집합을 모두 소비한다.
        params가 없으면 문장 안의 ``%`` 를 그대로 전달한다.

        Raises:
            EngineExecutionError: 엔진이 에러를 반환한 경우
        """
        connection = self._require_connection()
        with self._lock:
            try:
                with connection.cursor() as cursor:
                    cursor.execute(statement, params)
                    while cursor.nextset():
                        pass
            except pymysql.MySQLError as e:
                raise _execution_error(e, statement) from e

    def query(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[tuple[Any, ...]]:
        """조회 문장을 실행하고 모든 행을 반환.

        Args:
            statement: 실행할 SQL (``%s`` 자리표시자 사용)
            params: 바인딩할 값

        Returns:
            튜플 리스트 형태의 결과
        """
        connection = self._require_connection()
        with self._lock:
            try:
                with connection.cursor() as cursor:
                    cursor.execute(statement, params)
                    return [tuple(row) for row in cursor.fetchall()]
            except pymysql.MySQLError as e:
                raise _execution_error(e, statement) from e

    def list_databases(self) -> list[str]:
        """엔진의 모든 데이터베이스 이름."""
        return [row[0] for row in self.query("SHOW DATABASES")]

    def list_tables(self, schema: str) -> list[str]:
        """데이터베이스에 속한 모든 테이블 이름."""
        return [
            row[0] for row in self.query(f"SHOW TABLES FROM {quote_identifier(schema)}")
        ]

    def bulk_load_catalog(self, databases: list[dict[str, Any]]) -> None:
        """문장 실행을 거치지 않고 데이터베이스 정의를 엔진 메타 저장소에 적재.

        Args:
            databases: 직렬화된 데이터베이스 정의 리스트
        """
        self._post(CATALOG_LOAD_PATH, {"databases": databases})

    def reload_catalog(self) -> None:
        """엔진이 메타 저장소를 다시 읽도록 알림."""
        self._post(CATALOG_RELOAD_PATH, None)

    def _post(self, path: str, payload: Optional[dict[str, Any]]) -> None:
        url = f"{self._settings.status_base_url}{path}"
        try:
            response = httpx.post(
                url,
                json=payload,
                timeout=self._settings.engine_status_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise EngineError(f"상태 엔드포인트 요청 실패 ({url}): {e}") from e

    def close(self) -> None:
        """연결을 닫는다."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        except pymysql.MySQLError as e:
            logger.warning("engine.close.failed", error=str(e))
        finally:
            self._connection = None


def _execution_error(error: pymysql.MySQLError, statement: str) -> EngineExecutionError:
    """pymysql 에러를 코드와 문장을 포함한 EngineExecutionError로 변환."""
    code: Optional[int] = None
    message = str(error)
    if len(error.args) >= 2 and isinstance(error.args[0], int):
        code = error.args[0]
        message = str(error.args[1])
    return EngineExecutionError(message, code=code, statement=statement)


class DetachedScratchEngine:
    """접속한 엔진이 없을 때 쓰는 자리표시 엔진.

    가속 경로만으로 재생할 때 DDLHandle에 넘긴다. 엔진 왕복이 필요한 호출은 모두
    EngineConnectionError를 발생시킨다.
    """

    def _unavailable(self) -> EngineConnectionError:
        return EngineConnectionError("스크래치 엔진 없이 실행 중입니다.")

    def execute(self, statement: str, params: Optional[Sequence[Any]] = None) -> None:
        raise self._unavailable()

    def query(
        self, statement: str, params: Optional[Sequence[Any]] = None
    ) -> list[tuple[Any, ...]]:
        raise self._unavailable()

    def list_databases(self) -> list[str]:
        raise self._unavailable()

    def list_tables(self, schema: str) -> list[str]:
        raise self._unavailable()

    def bulk_load_catalog(self, databases: list[dict[str, Any]]) -> None:
        raise self._unavailable()

    def reload_catalog(self) -> None:
        raise self._unavailable()

    def close(self) -> None:
        pass
