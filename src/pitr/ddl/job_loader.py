"""DDL 잡 로더."""

import json
from pathlib import Path
from typing import Any, Optional

from pitr.core.logging import get_logger
from pitr.core.models import (
    ActionType,
    DatabaseDefinition,
    DDLJob,
    JobState,
    SchemaState,
    TableDefinition,
)

logger = get_logger(__name__)

# 소스 엔진은 삭제된 객체의 상태를 "none"으로 기록한다
_STATE_ALIASES = {"none": SchemaState.ABSENT}

_TABLE_KEYS = ("id", "name", "state")


class JsonJobLoader:
    """JSON 파일에서 DDL 잡을 읽어오는 서비스."""

    def __init__(self, json_path: str | Path) -> None:
        """로더 초기화.

        Args:
            json_path: JSON 파일 경로 (잡 객체 배열)
        """
        self._json_path = Path(json_path)

    def load(self) -> list[DDLJob]:
        """파일에 기록된 순서 그대로 잡을 읽는다.

        Returns:
            DDLJob 리스트
        """
        with open(self._json_path, encoding="utf-8") as f:
            data = json.load(f)
        return [parse_job(item) for item in data]


def parse_job(item: dict[str, Any]) -> DDLJob:
    """JSON 객체 하나를 DDLJob으로 변환.

    알 수 없는 액션 문자열은 type을 NONE으로 두고 원본을 action_name에 남긴다.
    에러는 가속 경로가 잡을 처리할 때 발생한다.
    """
    action_name = item["type"]
    try:
        action = ActionType(action_name)
    except ValueError:
        logger.debug("ddl.job.unknown_action", job_id=item["id"], action=action_name)
        action = ActionType.NONE

    return DDLJob(
        id=item["id"],
        type=action,
        action_name=action_name,
        state=JobState(item["state"]),
        schema_name=item.get("schema_name") or "",
        query=item.get("query") or "",
        db_info=_parse_database(item.get("db_info")),
        table_info=_parse_table(item.get("table_info")),
    )


def parse_schema_state(value: str) -> SchemaState:
    """상태 문자열을 SchemaState로 변환. "none"은 absent로 취급."""
    if value in _STATE_ALIASES:
        return _STATE_ALIASES[value]
    return SchemaState(value)


def _parse_database(data: Optional[dict[str, Any]]) -> Optional[DatabaseDefinition]:
    if not data:
        return None
    return DatabaseDefinition(
        id=data["id"],
        name=data["name"],
        state=parse_schema_state(data["state"]),
        charset=data.get("charset"),
        collate=data.get("collate"),
        tables=[_build_table(table) for table in data.get("tables") or []],
    )


def _parse_table(data: Optional[dict[str, Any]]) -> Optional[TableDefinition]:
    if not data:
        return None
    return _build_table(data)


def _build_table(data: dict[str, Any]) -> TableDefinition:
    return TableDefinition(
        id=data["id"],
        name=data["name"],
        state=parse_schema_state(data["state"]),
        payload={k: v for k, v in data.items() if k not in _TABLE_KEYS},
    )
