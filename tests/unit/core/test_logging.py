"""로깅 설정 테스트."""

import importlib
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from pitr.core.config import Settings
from pitr.core.logging import (
    LogMode,
    _get_log_level,
    _get_processors,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """configure_logging 테스트."""

    def test_prod_mode_renders_json(self):
        configure_logging(Settings(log_mode="prod"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_unknown_mode_falls_back_to_dev(self):
        """알 수 없는 모드는 개발 모드로 처리해야 한다."""
        configure_logging(Settings(log_mode="verbose"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_dev_processors_include_log_level(self):
        processors = _get_processors(LogMode.DEV)

        assert structlog.processors.add_log_level in processors

    @pytest.mark.parametrize(
        "level, expected",
        [("debug", logging.DEBUG), ("WARN", logging.WARNING), ("nonsense", logging.INFO)],
    )
    def test_log_level_parsing(self, level, expected):
        assert _get_log_level(level) == expected


class TestGetLogger:
    """get_logger 테스트."""

    def test_named_logger_emits_events(self):
        """이름을 붙인 로거로 이벤트를 남길 수 있어야 한다."""
        log = get_logger("pitr.test")

        with capture_logs() as logs:
            log.info("ddl.execute.started", ddl="create table t (a int)")

        assert logs[0]["event"] == "ddl.execute.started"
        assert logs[0]["ddl"] == "create table t (a int)"

    def test_logging_modules_import(self):
        """모듈 수준 로거를 만드는 모듈들을 임포트할 수 있어야 한다."""
        handle = importlib.import_module("pitr.ddl.handle")
        engine = importlib.import_module("pitr.adapters.engine.scratch_engine")

        assert handle.logger is not None
        assert engine.logger is not None
