"""Core 데이터 모델 정의."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class JobState(Enum):
    """DDL 잡 상태."""

    NONE = "none"
    QUEUEING = "queueing"
    RUNNING = "running"
    ROLLINGBACK = "rollingback"
    ROLLBACK_DONE = "rollback done"
    DONE = "done"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    SYNCED = "synced"


class SchemaState(Enum):
    """스키마 객체(데이터베이스/테이블)의 생명주기 상태."""

    ABSENT = "absent"
    DELETE_ONLY = "delete only"
    WRITE_ONLY = "write only"
    WRITE_REORGANIZATION = "write reorganization"
    DELETE_REORGANIZATION = "delete reorganization"
    REPLICA_ONLY = "replica only"
    PUBLIC = "public"


class ActionType(Enum):
    """DDL 액션 종류."""

    NONE = "none"
    CREATE_SCHEMA = "create schema"
    DROP_SCHEMA = "drop schema"
    CREATE_TABLE = "create table"
    DROP_TABLE = "drop table"
    ADD_COLUMN = "add column"
    DROP_COLUMN = "drop column"
    ADD_INDEX = "add index"
    DROP_INDEX = "drop index"
    ADD_FOREIGN_KEY = "add foreign key"
    DROP_FOREIGN_KEY = "drop foreign key"
    TRUNCATE_TABLE = "truncate table"
    MODIFY_COLUMN = "modify column"
    REBASE_AUTO_ID = "rebase auto_id"
    RENAME_TABLE = "rename table"
    SET_DEFAULT_VALUE = "set default value"
    SHARD_ROW_ID = "shard row ID"
    MODIFY_TABLE_COMMENT = "modify table comment"
    RENAME_INDEX = "rename index"
    ADD_TABLE_PARTITION = "add partition"
    DROP_TABLE_PARTITION = "drop partition"
    CREATE_VIEW = "create view"
    MODIFY_TABLE_CHARSET_AND_COLLATE = "modify table charset and collate"
    TRUNCATE_TABLE_PARTITION = "truncate partition"
    DROP_VIEW = "drop view"
    RECOVER_TABLE = "recover table"
    MODIFY_SCHEMA_CHARSET_AND_COLLATE = "modify schema charset and collate"
    LOCK_TABLE = "lock table"
    UNLOCK_TABLE = "unlock table"
    REPAIR_TABLE = "repair table"
    SET_TIFLASH_REPLICA = "set tiflash replica"
    ADD_PRIMARY_KEY = "add primary key"
    DROP_PRIMARY_KEY = "drop primary key"
    CREATE_SEQUENCE = "create sequence"
    ALTER_SEQUENCE = "alter sequence"
    DROP_SEQUENCE = "drop sequence"


@dataclass
class TableDefinition:
    """테이블 정의 - 이름과 무관한 고정 ID로 식별."""

    id: int
    name: str
    state: SchemaState
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """직렬화용 딕셔너리로 변환."""
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            **self.payload,
        }


@dataclass
class DatabaseDefinition:
    """데이터베이스 정의."""

    id: int
    name: str
    state: SchemaState
    charset: Optional[str] = None
    collate: Optional[str] = None
    tables: list[TableDefinition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """직렬화용 딕셔너리로 변환."""
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "charset": self.charset,
            "collate": self.collate,
            "tables": [table.to_dict() for table in self.tables],
        }


@dataclass
class DDLJob:
    """소스 데이터베이스 변경 로그에서 읽은 DDL 잡."""

    id: int
    type: ActionType
    state: JobState
    schema_name: str = ""
    query: str = ""
    db_info: Optional[DatabaseDefinition] = None
    table_info: Optional[TableDefinition] = None
    # 원본 액션 문자열. 알 수 없는 액션은 type이 NONE이고 여기에만 남는다
    action_name: str = ""

    def __post_init__(self) -> None:
        if not self.action_name:
            self.action_name = self.type.value

    def is_synced(self) -> bool:
        """잡이 synced 상태인지 확인."""
        return self.state == JobState.SYNCED

    def is_done(self) -> bool:
        """잡이 done 상태인지 확인."""
        return self.state == JobState.DONE


@dataclass
class IndexInfo:
    """유니크 인덱스 정보."""

    name: str
    columns: list[str] = field(default_factory=list)


@dataclass
class TableInfo:
    """행 변경 재생에 필요한 테이블 구조 정보."""

    schema: str
    table: str
    columns: list[str] = field(default_factory=list)
    primary_key: Optional[IndexInfo] = None
    # primary key가 있으면 첫 번째 원소
    unique_keys: list[IndexInfo] = field(default_factory=list)


class LookupStatus(Enum):
    """키 매핑 조회 결과 상태."""

    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class KeyLookup:
    """키 매핑 조회 결과. 조회 실패는 KeyMapReadError로 전달된다."""

    status: LookupStatus
    value: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @classmethod
    def hit(cls, value: str) -> "KeyLookup":
        return cls(LookupStatus.FOUND, value)

    @classmethod
    def miss(cls) -> "KeyLookup":
        return cls(LookupStatus.NOT_FOUND)
