"""카탈로그 스냅샷 발행 - 가속 경로의 카탈로그를 스크래치 엔진 메타 저장소에 적재."""

from pitr.adapters.engine.scratch_engine import ScratchEngine
from pitr.core.logging import get_logger
from pitr.ddl.catalog import SchemaCatalog

logger = get_logger(__name__)


class CatalogSnapshotPublisher:
    """누적된 데이터베이스 정의 전체를 엔진에 일괄 적재하고 다시 읽게 한다.

    이후 가속 경로가 처리하지 못하는 문장을 엔진에 직접 실행할 때
    엔진의 카탈로그가 가속 경로의 결과와 일치하도록 하기 위해 쓴다.
    """

    def __init__(self, engine: ScratchEngine) -> None:
        self._engine = engine

    def publish(self, catalog: SchemaCatalog) -> int:
        """카탈로그를 적재한다.

        Returns:
            적재한 데이터베이스 수
        """
        databases = catalog.snapshot()
        self._engine.bulk_load_catalog(databases)
        self._engine.reload_catalog()
        logger.info(
            "catalog.snapshot.published",
            databases=len(databases),
            tables=sum(len(db["tables"]) for db in databases),
        )
        return len(databases)
