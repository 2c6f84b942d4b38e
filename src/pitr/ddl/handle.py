"""DDL 핸들 - 잡 필터, 가속 경로, 오라클 어댑터, 캐시를 묶는 진입점."""

import shutil
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional

from pitr.adapters.engine.scratch_engine import MySQLScratchEngine, ScratchEngine
from pitr.core.config import Settings
from pitr.core.errors import PITRError, ReplayError
from pitr.core.logging import get_logger
from pitr.core.models import DDLJob, KeyLookup, TableInfo
from pitr.core.quoting import quote_identifier
from pitr.ddl.accelerator import SchemaAccelerator
from pitr.ddl.catalog import SchemaCatalog
from pitr.ddl.job_filter import JobFilter
from pitr.ddl.key_mapper import KeyIntervalMapper
from pitr.ddl.oracle import SchemaOracle
from pitr.ddl.snapshot import CatalogSnapshotPublisher
from pitr.ddl.table_info import get_table_info
from pitr.ddl.table_info_cache import TableInfoCache

logger = get_logger(__name__)

SYSTEM_DATABASES = frozenset({"mysql", "information_schema", "performance_schema"})
DEFAULT_DATABASE = "test"


@dataclass
class ReplayProgress:
    """재생 진행 상황."""

    current: int
    total: int
    job_id: int
    action: str
    skipped: bool = False


# 진행 상황 콜백 타입
ReplayProgressCallback = Callable[[ReplayProgress], None]


@dataclass
class ReplayResult:
    """DDL 히스토리 재생 결과."""

    total_count: int = 0
    skipped_count: int = 0
    accelerated_count: int = 0
    executed_count: int = 0

    @property
    def admitted_count(self) -> int:
        """필터를 통과한 잡 수."""
        return self.total_count - self.skipped_count

    def to_report(self) -> str:
        """재생 결과를 리포트 문자열로 변환."""
        lines = [
            "=== DDL 히스토리 재생 결과 ===",
            f"전체 잡: {self.total_count}건",
            f"건너뛴 잡: {self.skipped_count}건",
            f"가속 경로 반영: {self.accelerated_count}건",
            f"엔진 실행: {self.executed_count}건",
        ]
        return "\n".join(lines)


class DDLHandle:
    """DDL 히스토리를 처리하고 테이블 정보를 제공한다.

    잡은 반드시 소스 커밋 순서대로 하나의 스레드에서 처리해야 한다.
    get_table_info만 여러 스레드에서 동시에 호출할 수 있다.
    """

    def __init__(
        self,
        engine: ScratchEngine,
        accelerate_enable: bool = True,
        catalog: Optional[SchemaCatalog] = None,
        storage_dir: Optional[Path] = None,
        progress_callback: Optional[ReplayProgressCallback] = None,
    ) -> None:
        """핸들 초기화.

        Args:
            engine: 스크래치 엔진
            accelerate_enable: 히스토리 재생에 가속 경로를 쓸지 여부
            catalog: 이어서 사용할 카탈로그 (없으면 빈 카탈로그)
            storage_dir: 종료 시 삭제할 엔진 저장 디렉터리
            progress_callback: 진행 상황 콜백 함수
        """
        self._engine = engine
        self._storage_dir = storage_dir
        self._progress_callback = progress_callback
        self.accelerate_enable = accelerate_enable

        self._catalog = catalog if catalog is not None else SchemaCatalog()
        self._job_filter = JobFilter()
        self._accelerator = SchemaAccelerator(self._catalog)
        self._cache = TableInfoCache(partial(get_table_info, engine))
        self._oracle = SchemaOracle(engine, self._cache)
        self._key_mapper = KeyIntervalMapper(engine, self._oracle)
        self._publisher = CatalogSnapshotPublisher(engine)

    @classmethod
    def create(cls, settings: Settings, **kwargs: Any) -> "DDLHandle":
        """저장 디렉터리를 만들고 스크래치 엔진에 접속한 핸들을 생성.

        디렉터리가 이미 있으면 FileExistsError가 발생한다. 다른 데이터가 든
        디렉터리를 실수로 가져다 쓰고 지우지 않기 위함이다.
        """
        storage_dir = Path(settings.storage_dir)
        storage_dir.mkdir()

        engine = MySQLScratchEngine(settings)
        try:
            engine.connect()
        except PITRError:
            shutil.rmtree(storage_dir, ignore_errors=True)
            raise

        return cls(
            engine,
            accelerate_enable=settings.accelerate_enable,
            storage_dir=storage_dir,
            **kwargs,
        )

    @property
    def catalog(self) -> SchemaCatalog:
        return self._catalog

    @property
    def cache(self) -> TableInfoCache:
        return self._cache

    @property
    def oracle(self) -> SchemaOracle:
        return self._oracle

    def _notify_progress(self, progress: ReplayProgress) -> None:
        if self._progress_callback:
            self._progress_callback(progress)

    def execute_history_ddls(self, jobs: list[DDLJob]) -> ReplayResult:
        """DDL 잡들을 순서대로 반영한다.

        확정되지 않은 잡은 건너뛴다. 잡 하나라도 실패하면 재생 전체를 중단한다.

        Raises:
            ReplayError: 잡 처리에 실패한 경우 (원인 에러를 체인으로 보존)
        """
        result = ReplayResult(total_count=len(jobs))

        for idx, job in enumerate(jobs):
            admitted = self._job_filter.admit(job)
            self._notify_progress(ReplayProgress(
                current=idx + 1,
                total=len(jobs),
                job_id=job.id,
                action=job.action_name,
                skipped=not admitted,
            ))
            if not admitted:
                result.skipped_count += 1
                continue

            try:
                if self.accelerate_enable:
                    self.accelerate_history_ddl(job)
                    result.accelerated_count += 1
                else:
                    schema = job.db_info.name if job.db_info is not None else job.schema_name
                    self.execute_ddl(schema, job.query)
                    result.executed_count += 1
            except PITRError as e:
                raise ReplayError(
                    f"job {job.id} ({job.action_name}) 처리 실패: {e}", job_id=job.id
                ) from e

        return result

    def accelerate_history_ddl(self, job: DDLJob) -> None:
        """잡 메타데이터만으로 카탈로그를 갱신한다."""
        self._accelerator.apply(job)

    def execute_ddl(self, schema: str, ddl: str) -> None:
        """DDL을 스크래치 엔진에서 실행하고 테이블 정보를 갱신한다."""
        self._oracle.execute_ddl(schema, ddl)

    def get_table_info(self, schema: str, table: str) -> TableInfo:
        """테이블 정보를 반환한다. 여러 스레드에서 호출해도 안전하다."""
        return self._cache.get(schema, table)

    def shift_meta_to_engine(self) -> int:
        """가속 경로의 카탈로그를 엔진 메타 저장소에 적재한다.

        Returns:
            적재한 데이터베이스 수
        """
        return self._publisher.publish(self._catalog)

    def reset_db(self) -> None:
        """시스템 데이터베이스를 제외한 모든 데이터베이스를 지우고 test를 만든다."""
        for name in self._engine.list_databases():
            if name.lower() in SYSTEM_DATABASES:
                continue
            self.execute_ddl(name, f"DROP DATABASE {quote_identifier(name)}")

        self.execute_ddl(
            DEFAULT_DATABASE, f"CREATE DATABASE IF NOT EXISTS {DEFAULT_DATABASE}"
        )

    def list_engine_tables(self) -> dict[str, list[str]]:
        """엔진에 실제로 만들어진 데이터베이스별 테이블 목록. 시스템 데이터베이스는 제외."""
        return {
            name: self._engine.list_tables(name)
            for name in self._engine.list_databases()
            if name.lower() not in SYSTEM_DATABASES
        }

    def create_map_table(self) -> None:
        """키 매핑 테이블을 만든다."""
        self._key_mapper.create_table()

    def fetch_map_key(self, key: str) -> KeyLookup:
        """키에 매핑된 소스 키를 조회한다."""
        return self._key_mapper.fetch(key)

    def insert_map_key(self, new_key: str, old_key: str) -> None:
        """새 키의 매핑을 저장한다."""
        self._key_mapper.insert(new_key, old_key)

    def close(self) -> None:
        """엔진을 닫고 저장 디렉터리를 지운다."""
        self._engine.close()

        if self._storage_dir is None:
            return
        try:
            shutil.rmtree(self._storage_dir)
        except OSError as e:
            logger.warning(
                "engine.storage.remove_failed", dir=str(self._storage_dir), error=str(e)
            )
