"""DDL 잡 필터링 모듈."""

from pitr.core.logging import get_logger
from pitr.core.models import DDLJob

logger = get_logger(__name__)


class JobFilter:
    """확정(synced/done)된 DDL 잡만 통과시키는 필터.

    소스 엔진은 잡마다 DDL 로그를 남기므로 취소되거나 롤백된 잡은 걸러야 한다.
    예전 버전은 잡이 synced로 바뀌는 트랜잭션에서, 최신 버전은 done으로 바뀌는
    트랜잭션에서 로그를 기록한다. done 상태는 항상 synced로만 전이된다.
    """

    def filter(self, jobs: list[DDLJob]) -> list[DDLJob]:
        """잡 목록에서 확정된 잡만 순서를 유지한 채 반환한다.

        Args:
            jobs: 필터링할 DDLJob 목록

        Returns:
            필터링된 DDLJob 목록
        """
        return [job for job in jobs if self.admit(job)]

    def admit(self, job: DDLJob) -> bool:
        """잡이 카탈로그에 반영될 수 있는지 확인한다."""
        if job.is_synced() or job.is_done():
            return True
        logger.debug("ddl.job.skipped", job_id=job.id, state=job.state.value)
        return False
