"""테이블 정보 캐시."""

import threading
from typing import Callable, Optional

from pitr.core.logging import get_logger
from pitr.core.models import TableInfo
from pitr.core.quoting import quote_schema_table

logger = get_logger(__name__)

TableInfoLoader = Callable[[str, str], TableInfo]


class TableInfoCache:
    """(스키마, 테이블) → TableInfo 캐시.

    쓰기는 DDL 처리 경로 하나만 하고, 읽기는 여러 재생 워커가 동시에 한다.
    항목은 실행 성공 시에만 만들어지거나 덮어써지며 무효화하지 않는다.
    """

    def __init__(self, loader: TableInfoLoader) -> None:
        """캐시 초기화.

        Args:
            loader: 캐시에 없을 때 엔진에서 직접 조회하는 함수
        """
        self._loader = loader
        self._entries: dict[str, TableInfo] = {}
        self._lock = threading.Lock()

    def get(self, schema: str, table: str) -> TableInfo:
        """캐시된 테이블 정보를 반환. 없으면 엔진에서 직접 조회한다.

        직접 조회한 결과는 캐시에 넣지 않는다.

        Raises:
            TableNotExistError: 엔진에도 테이블이 없는 경우
        """
        info = self.peek(schema, table)
        if info is not None:
            return info

        logger.warning("table_info.cache_miss", schema=schema, table=table)
        return self._loader(schema, table)

    def peek(self, schema: str, table: str) -> Optional[TableInfo]:
        """캐시에 있는 항목만 반환한다."""
        with self._lock:
            return self._entries.get(quote_schema_table(schema, table))

    def store(self, info: TableInfo) -> None:
        """항목을 만들거나 덮어쓴다."""
        with self._lock:
            self._entries[quote_schema_table(info.schema, info.table)] = info

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
