"""스키마 오라클 어댑터 - DDL을 스크래치 엔진에서 실행하고 구조를 다시 조회."""

from enum import Enum
from typing import Optional

from pitr.adapters.engine.scratch_engine import ScratchEngine
from pitr.core.errors import EngineExecutionError, TableNotExistError
from pitr.core.logging import get_logger
from pitr.core.models import TableInfo
from pitr.core.quoting import quote_identifier
from pitr.ddl.statement_parser import parse_schema_table_from_ddl
from pitr.ddl.table_info import get_table_info
from pitr.ddl.table_info_cache import TableInfoCache

logger = get_logger(__name__)


class Recovery(Enum):
    """실행 실패 시 복구 방법."""

    CREATE_DATABASE = "create_database"
    USE_DATABASE = "use_database"
    ALREADY_EXISTS = "already_exists"


# MySQL 에러 코드
ER_DB_CREATE_EXISTS = 1007
ER_NO_DB_ERROR = 1046
ER_BAD_DB_ERROR = 1049
ER_TABLE_EXISTS_ERROR = 1050


def classify_error(error: EngineExecutionError) -> Optional[Recovery]:
    """엔진 에러에 적용할 복구 방법. 복구할 수 없으면 None."""
    message = str(error)
    if error.code == ER_BAD_DB_ERROR or "Unknown database" in message:
        return Recovery.CREATE_DATABASE
    if error.code == ER_NO_DB_ERROR or "No database selected" in message:
        return Recovery.USE_DATABASE
    if error.code in (ER_DB_CREATE_EXISTS, ER_TABLE_EXISTS_ERROR) or "already exists" in message:
        return Recovery.ALREADY_EXISTS
    return None


class SchemaOracle:
    """DDL 문장을 실행하고 결과 테이블 구조를 캐시에 기록하는 느린 경로."""

    def __init__(self, engine: ScratchEngine, cache: TableInfoCache) -> None:
        """어댑터 초기화.

        Args:
            engine: 스크래치 엔진
            cache: 실행 결과를 기록할 테이블 정보 캐시
        """
        self._engine = engine
        self._cache = cache

    def execute_ddl(self, schema: str, ddl: str) -> None:
        """DDL을 실행한 뒤 대상 테이블 정보를 갱신한다.

        Args:
            schema: 문장에 스키마가 없을 때 사용할 스키마
            ddl: 실행할 DDL (use 문 하나를 앞에 붙일 수 있음)

        Raises:
            InvalidDDLError: 인식할 수 없는 문장인 경우
            EngineExecutionError: 복구할 수 없는 실행 에러인 경우
        """
        logger.info("ddl.execute.started", schema=schema, ddl=ddl)

        if not ddl:
            return

        schema_in_ddl, table = parse_schema_table_from_ddl(ddl)
        if schema_in_ddl:
            schema = schema_in_ddl

        if not self._execute_with_recovery(schema, ddl):
            return

        if not table:
            return

        try:
            info = self.introspect(schema, table)
        except TableNotExistError:
            # drop table
            return
        self._cache.store(info)

    def introspect(self, schema: str, table: str) -> TableInfo:
        """엔진에서 테이블 구조를 직접 조회한다."""
        return get_table_info(self._engine, schema, table)

    def _execute_with_recovery(self, schema: str, ddl: str) -> bool:
        """복구 정책을 적용하며 실행. 이미 존재해서 건너뛰었으면 False.

        각 복구는 한 번만 시도한다.
        """
        statement = ddl
        attempted: set[Recovery] = set()

        while True:
            try:
                self._engine.execute(statement)
                return True
            except EngineExecutionError as e:
                recovery = classify_error(e)
                if recovery == Recovery.ALREADY_EXISTS:
                    logger.info("ddl.execute.already_exists", schema=schema, ddl=ddl)
                    return False
                if recovery is None or recovery in attempted or not schema:
                    raise
                attempted.add(recovery)

                if recovery == Recovery.CREATE_DATABASE:
                    logger.info("ddl.execute.create_database", schema=schema)
                    self._engine.execute(
                        f"create database if not exists {quote_identifier(schema)}"
                    )
                else:
                    statement = f"use {quote_identifier(schema)}; {ddl}"
