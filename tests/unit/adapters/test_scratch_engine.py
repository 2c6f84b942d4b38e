"""스크래치 엔진 어댑터 테스트."""

import importlib
import typing
from unittest.mock import MagicMock, patch

import httpx
import pymysql
import pytest

from pitr.adapters.engine.scratch_engine import (
    CATALOG_LOAD_PATH,
    CATALOG_RELOAD_PATH,
    DetachedScratchEngine,
    MySQLScratchEngine,
    ScratchEngine,
)
from pitr.core.config import Settings
from pitr.core.errors import EngineConnectionError, EngineError, EngineExecutionError

ENGINE_MODULE = "pitr.adapters.engine.scratch_engine"


@pytest.fixture
def engine_settings() -> Settings:
    """엔진 설정 fixture."""
    return Settings(
        engine_host="testhost",
        engine_port=4000,
        engine_user="testuser",
        engine_password="testpass",
        engine_status_port=10080,
        connect_retries=3,
        connect_retry_interval=0,
    )


def _connected_engine(mock_pymysql: MagicMock, settings: Settings) -> tuple[MySQLScratchEngine, MagicMock]:
    """연결된 엔진과 커서 mock을 만든다."""
    mock_pymysql.MySQLError = pymysql.MySQLError
    mock_cursor = MagicMock()
    mock_cursor.nextset.return_value = None
    mock_connection = MagicMock()
    mock_connection.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_connection.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_pymysql.connect.return_value = mock_connection

    engine = MySQLScratchEngine(settings)
    engine.connect()
    return engine, mock_cursor


class TestScratchEngineConnection:
    """엔진 연결 테스트."""

    def test_should_create_connection_with_settings(self, engine_settings: Settings) -> None:
        """설정을 사용하여 연결을 생성해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            mock_pymysql.MySQLError = pymysql.MySQLError
            mock_connection = MagicMock()
            mock_pymysql.connect.return_value = mock_connection

            # When
            engine = MySQLScratchEngine(engine_settings)
            connection = engine.connect()

            # Then
            mock_pymysql.connect.assert_called_once()
            call_kwargs = mock_pymysql.connect.call_args[1]
            assert call_kwargs["host"] == "testhost"
            assert call_kwargs["port"] == 4000
            assert call_kwargs["user"] == "testuser"
            assert call_kwargs["password"] == "testpass"
            assert call_kwargs["autocommit"] is True
            assert connection == mock_connection

    def test_should_retry_until_engine_accepts(self, engine_settings: Settings) -> None:
        """엔진이 아직 접속을 받지 않으면 재시도해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            # Given
            mock_pymysql.MySQLError = pymysql.MySQLError
            mock_connection = MagicMock()
            mock_pymysql.connect.side_effect = [
                pymysql.err.OperationalError(2003, "Can't connect"),
                mock_connection,
            ]

            # When
            connection = MySQLScratchEngine(engine_settings).connect()

            # Then
            assert mock_pymysql.connect.call_count == 2
            assert connection == mock_connection

    def test_should_raise_after_all_retries_fail(self, engine_settings: Settings) -> None:
        """모든 재시도가 실패하면 EngineConnectionError를 발생시켜야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            # Given
            mock_pymysql.MySQLError = pymysql.MySQLError
            mock_pymysql.connect.side_effect = pymysql.err.OperationalError(2003, "Can't connect")

            # When / Then
            with pytest.raises(EngineConnectionError):
                MySQLScratchEngine(engine_settings).connect()
            assert mock_pymysql.connect.call_count == 3

    def test_should_require_connection(self, engine_settings: Settings) -> None:
        """연결 전에 실행하면 RuntimeError를 발생시켜야 함."""
        engine = MySQLScratchEngine(engine_settings)

        with pytest.raises(RuntimeError):
            engine.execute("create database db")


class TestScratchEngineExecution:
    """문장 실행 테스트."""

    def test_should_execute_statement(self, engine_settings: Settings) -> None:
        """문장을 그대로 실행해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            engine, mock_cursor = _connected_engine(mock_pymysql, engine_settings)

            # When
            engine.execute("use db; create table t (a int)")

            # Then
            mock_cursor.execute.assert_called_once_with("use db; create table t (a int)", None)

    def test_should_wrap_engine_error_with_code_and_statement(
        self, engine_settings: Settings
    ) -> None:
        """엔진 에러는 코드와 문장을 담은 EngineExecutionError로 변환해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            # Given
            engine, mock_cursor = _connected_engine(mock_pymysql, engine_settings)
            mock_cursor.execute.side_effect = pymysql.err.OperationalError(
                1049, "Unknown database 'db'"
            )

            # When / Then
            with pytest.raises(EngineExecutionError) as exc_info:
                engine.execute("create table db.t (a int)")

            assert exc_info.value.code == 1049
            assert "Unknown database" in str(exc_info.value)
            assert exc_info.value.statement == "create table db.t (a int)"

    def test_should_return_query_rows_as_tuples(self, engine_settings: Settings) -> None:
        """조회 결과를 튜플 리스트로 반환해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            # Given
            engine, mock_cursor = _connected_engine(mock_pymysql, engine_settings)
            mock_cursor.fetchall.return_value = [["id", ""], ["name", ""]]

            # When
            rows = engine.query("SELECT column_name, extra FROM t WHERE a = %s", ("x",))

            # Then
            assert rows == [("id", ""), ("name", "")]
            mock_cursor.execute.assert_called_once_with(
                "SELECT column_name, extra FROM t WHERE a = %s", ("x",)
            )

    def test_should_list_databases_and_tables(self, engine_settings: Settings) -> None:
        """데이터베이스와 테이블 이름을 나열해야 함."""
        with patch(f"{ENGINE_MODULE}.pymysql") as mock_pymysql:
            # Given
            engine, mock_cursor = _connected_engine(mock_pymysql, engine_settings)
            mock_cursor.fetchall.side_effect = [[("mysql",), ("db",)], [("t1",), ("t2",)]]

            # When
            databases = engine.list_databases()
            tables = engine.list_tables("db")

            # Then
            assert databases == ["mysql", "db"]
            assert tables == ["t1", "t2"]
            assert mock_cursor.execute.call_args_list[1][0][0] == "SHOW TABLES FROM `db`"


class TestScratchEngineCatalogLoad:
    """메타데이터 일괄 적재 테스트."""

    def test_should_post_catalog_to_status_endpoint(self, engine_settings: Settings) -> None:
        """카탈로그를 상태 엔드포인트로 전송해야 함."""
        with patch(f"{ENGINE_MODULE}.httpx") as mock_httpx:
            # Given
            mock_httpx.HTTPError = httpx.HTTPError
            databases = [{"id": 1, "name": "db", "tables": []}]

            # When
            engine = MySQLScratchEngine(engine_settings)
            engine.bulk_load_catalog(databases)
            engine.reload_catalog()

            # Then
            first, second = mock_httpx.post.call_args_list
            assert first[0][0] == f"http://testhost:10080{CATALOG_LOAD_PATH}"
            assert first[1]["json"] == {"databases": databases}
            assert second[0][0] == f"http://testhost:10080{CATALOG_RELOAD_PATH}"

    def test_should_wrap_http_error(self, engine_settings: Settings) -> None:
        """HTTP 에러는 EngineError로 변환해야 함."""
        with patch(f"{ENGINE_MODULE}.httpx") as mock_httpx:
            # Given
            mock_httpx.HTTPError = httpx.HTTPError
            mock_httpx.post.side_effect = httpx.ConnectError("connection refused")

            # When / Then
            with pytest.raises(EngineError):
                MySQLScratchEngine(engine_settings).reload_catalog()


class TestDetachedScratchEngine:
    """접속 없는 자리표시 엔진 테스트."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda engine: engine.execute("create table t (a int)"),
            lambda engine: engine.query("SHOW DATABASES"),
            lambda engine: engine.list_databases(),
            lambda engine: engine.list_tables("db"),
            lambda engine: engine.bulk_load_catalog([]),
            lambda engine: engine.reload_catalog(),
        ],
    )
    def test_round_trips_are_unavailable(self, call) -> None:
        """엔진 왕복이 필요한 호출은 접속 에러여야 함."""
        with pytest.raises(EngineConnectionError):
            call(DetachedScratchEngine())

    def test_close_is_noop(self) -> None:
        DetachedScratchEngine().close()


class TestScratchEngineInterface:
    """엔진 인터페이스 사용처 테스트."""

    @pytest.mark.parametrize(
        "target",
        [
            "pitr.ddl.oracle:SchemaOracle.__init__",
            "pitr.ddl.key_mapper:KeyIntervalMapper.__init__",
            "pitr.ddl.snapshot:CatalogSnapshotPublisher.__init__",
            "pitr.ddl.handle:DDLHandle.__init__",
            "pitr.ddl.table_info:get_table_info",
        ],
    )
    def test_engine_parameters_use_interface(self, target: str) -> None:
        """엔진을 받는 구성 요소는 ScratchEngine 인터페이스로 선언되어야 함."""
        module_name, qualname = target.split(":")
        obj = importlib.import_module(module_name)
        for part in qualname.split("."):
            obj = getattr(obj, part)

        assert typing.get_type_hints(obj)["engine"] is ScratchEngine
