"""스크래치 엔진 어댑터 모듈."""

from pitr.adapters.engine.scratch_engine import (
    DetachedScratchEngine,
    MySQLScratchEngine,
    ScratchEngine,
)

__all__ = ["DetachedScratchEngine", "MySQLScratchEngine", "ScratchEngine"]
