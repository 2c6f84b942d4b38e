"""DDL 테스트 공용 fixture."""

from typing import Callable, Optional

import pytest

from pitr.core.models import (
    ActionType,
    DatabaseDefinition,
    DDLJob,
    JobState,
    SchemaState,
    TableDefinition,
)

JobFactory = Callable[..., DDLJob]


@pytest.fixture
def schema_job() -> JobFactory:
    """스키마 수준 잡을 만드는 factory."""

    def _make(
        name: str,
        state: SchemaState = SchemaState.PUBLIC,
        action: ActionType = ActionType.CREATE_SCHEMA,
        job_id: int = 1,
        db_id: int = 1,
        charset: Optional[str] = None,
    ) -> DDLJob:
        return DDLJob(
            id=job_id,
            type=action,
            state=JobState.SYNCED,
            schema_name=name,
            query=f"create database {name}",
            db_info=DatabaseDefinition(id=db_id, name=name, state=state, charset=charset),
        )

    return _make


@pytest.fixture
def table_job() -> JobFactory:
    """테이블 수준 잡을 만드는 factory."""

    def _make(
        schema: str,
        table_id: int,
        name: str,
        columns: Optional[list[str]] = None,
        state: SchemaState = SchemaState.PUBLIC,
        action: ActionType = ActionType.CREATE_TABLE,
        job_id: int = 1,
        job_state: JobState = JobState.SYNCED,
        query: str = "",
    ) -> DDLJob:
        return DDLJob(
            id=job_id,
            type=action,
            state=job_state,
            schema_name=schema,
            query=query,
            db_info=DatabaseDefinition(id=1, name=schema, state=SchemaState.PUBLIC),
            table_info=TableDefinition(
                id=table_id,
                name=name,
                state=state,
                payload={"columns": columns or []},
            ),
        )

    return _make
