"""스키마 변경 가속기 - 문장 실행 없이 잡 메타데이터만으로 카탈로그를 갱신.

잡마다 실행 후의 최종 상태와 정의가 기록되어 있으므로 그것을 그대로 반영한다.

    create table A  -> public  A:(a int, b int)
    create table B  -> public  B:(a char(1))
    A add column c  -> public  A:(a int, b int, c char(10))
    A drop column a -> public  A:(b int, c char(10))
    drop table B    -> absent  B:(a char(1))
"""

from dataclasses import replace

from pitr.core.errors import (
    MissingJobPayloadError,
    SchemaNotFoundError,
    UnknownDDLActionError,
    UnknownTableStateError,
)
from pitr.core.logging import get_logger
from pitr.core.models import ActionType, DDLJob, SchemaState
from pitr.ddl.catalog import SchemaCatalog

logger = get_logger(__name__)

SCHEMA_ACTIONS = frozenset(
    {
        ActionType.CREATE_SCHEMA,
        ActionType.MODIFY_SCHEMA_CHARSET_AND_COLLATE,
        ActionType.DROP_SCHEMA,
    }
)

TABLE_ACTIONS = frozenset(
    {
        ActionType.CREATE_TABLE,
        ActionType.CREATE_VIEW,
        ActionType.DROP_TABLE,
        ActionType.DROP_VIEW,
        ActionType.DROP_TABLE_PARTITION,
        ActionType.TRUNCATE_TABLE_PARTITION,
        ActionType.ADD_COLUMN,
        ActionType.DROP_COLUMN,
        ActionType.MODIFY_COLUMN,
        ActionType.SET_DEFAULT_VALUE,
        ActionType.ADD_INDEX,
        ActionType.DROP_INDEX,
        ActionType.RENAME_INDEX,
        ActionType.ADD_FOREIGN_KEY,
        ActionType.DROP_FOREIGN_KEY,
        ActionType.TRUNCATE_TABLE,
        ActionType.REBASE_AUTO_ID,
        ActionType.RENAME_TABLE,
        ActionType.SHARD_ROW_ID,
        ActionType.MODIFY_TABLE_COMMENT,
        ActionType.ADD_TABLE_PARTITION,
        ActionType.MODIFY_TABLE_CHARSET_AND_COLLATE,
        ActionType.RECOVER_TABLE,
    }
)


class SchemaAccelerator:
    """잡 메타데이터로 카탈로그를 증분 갱신하는 가속 경로."""

    def __init__(self, catalog: SchemaCatalog) -> None:
        """가속기 초기화.

        Args:
            catalog: 갱신할 카탈로그
        """
        self._catalog = catalog

    @property
    def catalog(self) -> SchemaCatalog:
        return self._catalog

    def apply(self, job: DDLJob) -> None:
        """잡 하나를 카탈로그에 반영한다.

        에러가 나면 카탈로그는 변경되지 않는다.

        Raises:
            UnknownDDLActionError: 스키마/테이블 액션 어느 쪽에도 속하지 않는 경우
            SchemaNotFoundError: 테이블 액션이 카탈로그에 없는 스키마를 참조하는 경우
            UnknownTableStateError: 테이블 상태가 public/absent가 아닌 경우
        """
        if job.type in SCHEMA_ACTIONS:
            self._apply_schema_job(job)
        elif job.type in TABLE_ACTIONS:
            self._apply_table_job(job)
        else:
            raise UnknownDDLActionError(f"unknown ddl action type {job.action_name}")

    def _apply_schema_job(self, job: DDLJob) -> None:
        database = job.db_info
        if database is None:
            raise MissingJobPayloadError(
                f"job {job.id} ({job.action_name}) has no database definition"
            )

        # create database if not exists 도 고려해 항상 덮어쓴다.
        # 스키마 잡은 테이블 목록을 싣지 않으므로 기존 테이블은 유지한다
        if database.state == SchemaState.PUBLIC:
            existing = self._catalog.get(database.name)
            if existing is not None:
                database = replace(database, tables=existing.tables)
            self._catalog.put(database)
        elif database.state == SchemaState.ABSENT:
            self._catalog.remove(database.name)

    def _apply_table_job(self, job: DDLJob) -> None:
        table = job.table_info
        if table is None:
            raise MissingJobPayloadError(
                f"job {job.id} ({job.action_name}) has no table definition"
            )

        database = self._catalog.get(job.schema_name)
        if database is None:
            raise SchemaNotFoundError(
                f"database {job.schema_name} haven't exist in ddl history before use it"
            )

        if table.state == SchemaState.PUBLIC:
            for i, existing in enumerate(database.tables):
                if existing.id == table.id:
                    database.tables[i] = table
                    return
            database.tables.append(table)
        elif table.state == SchemaState.ABSENT:
            for i, existing in enumerate(database.tables):
                if existing.id == table.id:
                    del database.tables[i]
                    return
            logger.warning(
                "ddl.accelerate.table_missing",
                schema=job.schema_name,
                table=table.name.lower(),
                table_id=table.id,
            )
        else:
            raise UnknownTableStateError(f"unknown table state {table.state.value}")
