"""Core 설정 모듈 테스트."""

from pitr.core.config import Settings


class TestSettingsDefaults:
    """기본값 적용 테스트."""

    def test_engine_defaults(self):
        """스크래치 엔진 설정의 기본값이 올바르게 적용되어야 한다."""
        settings = Settings()

        assert settings.engine_host == "127.0.0.1"
        assert settings.engine_port == 40404
        assert settings.storage_dir == "/tmp/pitr_tidb"

    def test_connect_retry_defaults(self):
        """접속 재시도는 기본 5회, 100ms 간격이어야 한다."""
        settings = Settings()

        assert settings.connect_retries == 5
        assert settings.connect_retry_interval == 0.1

    def test_accelerate_enabled_by_default(self):
        """가속 경로는 기본으로 켜져 있어야 한다."""
        settings = Settings()

        assert settings.accelerate_enable is True

    def test_status_base_url(self):
        """상태 엔드포인트 URL은 호스트와 상태 포트로 구성되어야 한다."""
        settings = Settings(engine_host="engine.local", engine_status_port=10081)

        assert settings.status_base_url == "http://engine.local:10081"


class TestSettingsFromEnv:
    """환경변수에서 설정 로드 테스트."""

    def test_load_engine_endpoint_from_env(self, monkeypatch):
        """환경변수에서 엔진 호스트와 포트를 로드할 수 있어야 한다."""
        monkeypatch.setenv("PITR_ENGINE_HOST", "10.0.0.5")
        monkeypatch.setenv("PITR_ENGINE_PORT", "4000")

        settings = Settings()

        assert settings.engine_host == "10.0.0.5"
        assert settings.engine_port == 4000

    def test_disable_accelerate_from_env(self, monkeypatch):
        """환경변수로 가속 경로를 끌 수 있어야 한다."""
        monkeypatch.setenv("PITR_ACCELERATE_ENABLE", "false")

        settings = Settings()

        assert settings.accelerate_enable is False
