"""데이터베이스 → 테이블 정의 카탈로그."""

from dataclasses import replace
from typing import Any, Iterator, Optional

from pitr.core.models import DatabaseDefinition
from pitr.core.quoting import quote_identifier


class SchemaCatalog:
    """가속 경로가 유지하는 최신 카탈로그.

    이력은 남기지 않고 최신 상태만 보관한다. 단일 처리 경로가 독점적으로 소유하며
    스레드 간에 공유하지 않는다.
    """

    def __init__(self) -> None:
        self._databases: dict[str, DatabaseDefinition] = {}

    @staticmethod
    def key(name: str) -> str:
        """대소문자를 정규화한 데이터베이스 키."""
        return quote_identifier(name.lower())

    def get(self, name: str) -> Optional[DatabaseDefinition]:
        return self._databases.get(self.key(name))

    def put(self, database: DatabaseDefinition) -> None:
        """정의를 삽입하거나 덮어쓴다.

        잡이 들고 온 객체를 변경하지 않도록 테이블 목록은 복사해서 보관한다.
        """
        self._databases[self.key(database.name)] = replace(
            database, tables=list(database.tables)
        )

    def remove(self, name: str) -> None:
        self._databases.pop(self.key(name), None)

    def databases(self) -> list[DatabaseDefinition]:
        return list(self._databases.values())

    def snapshot(self) -> list[dict[str, Any]]:
        """전체 카탈로그를 직렬화한다."""
        return [database.to_dict() for database in self._databases.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.key(name) in self._databases

    def __iter__(self) -> Iterator[DatabaseDefinition]:
        return iter(self.databases())

    def __len__(self) -> int:
        return len(self._databases)
