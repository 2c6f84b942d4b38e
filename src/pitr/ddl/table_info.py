"""테이블 구조 조회 - 스크래치 엔진의 information_schema에서 TableInfo를 만든다."""

from pitr.adapters.engine.scratch_engine import ScratchEngine
from pitr.core.errors import TableNotExistError
from pitr.core.models import IndexInfo, TableInfo

PRIMARY_KEY_NAME = "PRIMARY"

# https://dev.mysql.com/doc/mysql-infoschema-excerpt/5.7/en/columns-table.html
COLUMNS_SQL = """
    SELECT column_name, extra FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""

# https://dev.mysql.com/doc/mysql-infoschema-excerpt/5.7/en/statistics-table.html
UNIQUE_KEYS_SQL = """
    SELECT non_unique, index_name, seq_in_index, column_name
    FROM information_schema.statistics
    WHERE table_schema = %s AND table_name = %s
    ORDER BY seq_in_index ASC
"""

_GENERATED_MARKERS = ("VIRTUAL GENERATED", "STORED GENERATED")


def get_table_info(engine: ScratchEngine, schema: str, table: str) -> TableInfo:
    """생성 컬럼을 제외한 컬럼 목록과 유니크 키를 조회한다.

    Args:
        engine: 스크래치 엔진
        schema: 스키마 이름
        table: 테이블 이름

    Returns:
        TableInfo. primary key가 있으면 unique_keys의 첫 번째 원소다.

    Raises:
        TableNotExistError: 컬럼이 하나도 없는 경우
    """
    columns = get_columns(engine, schema, table)
    unique_keys = get_unique_keys(engine, schema, table)

    primary_key = None
    for i, index in enumerate(unique_keys):
        if index.name == PRIMARY_KEY_NAME:
            primary_key = unique_keys.pop(i)
            unique_keys.insert(0, primary_key)
            break

    return TableInfo(
        schema=schema,
        table=table,
        columns=columns,
        primary_key=primary_key,
        unique_keys=unique_keys,
    )


def get_columns(engine: ScratchEngine, schema: str, table: str) -> list[str]:
    """생성 컬럼(virtual/stored)을 제외한 컬럼 이름 목록.

    Raises:
        TableNotExistError: 컬럼이 하나도 없는 경우 (테이블이 없음)
    """
    rows = engine.query(COLUMNS_SQL, (schema, table))

    columns = []
    for name, extra in rows:
        extra_upper = (extra or "").upper()
        if any(marker in extra_upper for marker in _GENERATED_MARKERS):
            continue
        columns.append(name)

    if not columns:
        raise TableNotExistError(f"table not exist: {schema}.{table}")

    return columns


def get_unique_keys(engine: ScratchEngine, schema: str, table: str) -> list[IndexInfo]:
    """유니크 인덱스 목록. 각 인덱스의 컬럼은 seq_in_index 오름차순이다."""
    rows = engine.query(UNIQUE_KEYS_SQL, (schema, table))

    indexes: dict[str, IndexInfo] = {}
    for non_unique, index_name, _seq_in_index, column_name in rows:
        if int(non_unique) == 1:
            continue
        if index_name not in indexes:
            indexes[index_name] = IndexInfo(name=index_name)
        indexes[index_name].columns.append(column_name)

    return list(indexes.values())
