"""카탈로그 테스트."""

from pitr.core.models import DatabaseDefinition, SchemaState, TableDefinition
from pitr.ddl.catalog import SchemaCatalog


class TestSchemaCatalog:
    """SchemaCatalog 테스트."""

    def test_key_is_quoted_lower_case_name(self):
        """키는 소문자로 정규화되고 백틱으로 감싸져야 한다."""
        assert SchemaCatalog.key("Shop") == "`shop`"

    def test_put_copies_table_list(self):
        """정의를 넣을 때 테이블 목록을 복사해야 한다."""
        # Given
        tables = [TableDefinition(id=1, name="t", state=SchemaState.PUBLIC)]
        database = DatabaseDefinition(id=1, name="db", state=SchemaState.PUBLIC, tables=tables)
        catalog = SchemaCatalog()

        # When
        catalog.put(database)
        catalog.get("db").tables.clear()

        # Then
        assert len(tables) == 1

    def test_remove_missing_database_is_noop(self):
        """없는 데이터베이스 삭제는 아무 일도 하지 않아야 한다."""
        catalog = SchemaCatalog()

        catalog.remove("missing")

        assert len(catalog) == 0

    def test_snapshot_serializes_all_databases(self):
        """스냅샷은 모든 데이터베이스를 직렬화해야 한다."""
        catalog = SchemaCatalog()
        catalog.put(DatabaseDefinition(id=1, name="a", state=SchemaState.PUBLIC))
        catalog.put(DatabaseDefinition(id=2, name="b", state=SchemaState.PUBLIC))

        snapshot = catalog.snapshot()

        assert [db["name"] for db in snapshot] == ["a", "b"]
