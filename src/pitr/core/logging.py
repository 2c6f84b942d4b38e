"""구조화 로깅 설정.

structlog를 사용하며 이벤트 이름은 dot.notation(예: ``ddl.execute.started``)을 따른다.
개발 모드에서는 사람이 읽기 쉬운 콘솔 출력을, 운영 모드에서는 JSON 출력을 사용한다.

Usage:
    from pitr.core.logging import configure_logging, get_logger

    configure_logging(settings)
    log = get_logger(__name__)
    log.info("ddl.execute.started", ddl="create table t (a int)")
"""

import logging
import sys
from enum import Enum
from typing import Any

import structlog

from pitr.core.config import Settings


class LogMode(str, Enum):
    """로그 출력 모드."""

    DEV = "dev"
    PROD = "prod"


_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_log_level(level_str: str) -> int:
    """로그 레벨 문자열을 logging 상수로 변환. 알 수 없으면 INFO."""
    return _LEVELS.get(level_str.upper(), logging.INFO)


def _get_processors(mode: LogMode) -> list[Any]:
    """모드에 맞는 structlog 프로세서 체인을 반환."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if mode == LogMode.DEV:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(settings: Settings) -> None:
    """애플리케이션 시작 시 한 번 호출하여 structlog를 설정.

    Args:
        settings: 애플리케이션 설정 (log_mode, log_level 사용)
    """
    try:
        mode = LogMode(settings.log_mode.lower())
    except ValueError:
        mode = LogMode.DEV

    structlog.configure(
        processors=_get_processors(mode),
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level(settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """structlog 로거를 반환.

    Args:
        name: 로거 이름 (보통 ``__name__``)
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
