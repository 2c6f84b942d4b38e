"""애플리케이션 설정 모듈."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 설정."""

    # 스크래치 엔진 SQL 접속 설정
    engine_host: str = "127.0.0.1"
    engine_port: int = 40404
    engine_user: str = "root"
    engine_password: str = ""

    # 스크래치 엔진 상태(HTTP) 엔드포인트 - 메타데이터 일괄 적재용
    engine_status_port: int = 10080
    engine_status_timeout: float = 30.0

    # 스크래치 엔진 전용 저장 디렉터리 (세션 종료 시 삭제됨)
    storage_dir: str = "/tmp/pitr_tidb"

    # 엔진 기동 직후에는 접속이 거부될 수 있으므로 재시도
    connect_retries: int = 5
    connect_retry_interval: float = 0.1

    # DDL 히스토리 재생 시 메타데이터 기반 가속 경로 사용 여부
    accelerate_enable: bool = True

    # 로깅 설정
    log_mode: str = "dev"
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "PITR_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def status_base_url(self) -> str:
        """상태 엔드포인트 기본 URL."""
        return f"http://{self.engine_host}:{self.engine_status_port}"
