import pytest
from pydantic import ValidationError

from doccompare.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_uses_memory_backend(self) -> None:
        s = Settings()
        assert s.use_database is False

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_storage_provider(self) -> None:
        s = Settings()
        assert s.storage_provider == "local"

    def test_default_max_file_size_is_ten_megabytes(self) -> None:
        s = Settings()
        assert s.max_file_size_bytes == 10 * 1024 * 1024

    def test_default_allowed_extensions(self) -> None:
        s = Settings()
        assert s.allowed_extensions == [".pdf", ".docx", ".txt"]

    def test_default_task_retry_settings(self) -> None:
        s = Settings()
        assert s.max_task_attempts == 3
        assert s.default_task_priority == 5
        assert s.task_retry_delay_seconds == 60.0

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdfplumber"

    def test_default_comparison_settings(self) -> None:
        s = Settings()
        assert s.comparison_openai_model_name == "gpt-4o-mini"
        assert s.comparison_temperature == 0.1
        assert s.comparison_confidence_score == 0.85
        assert s.comparison_max_tokens == 2000
        assert len(s.comparison_recommended_actions) == 3


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_use_database(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USE_DATABASE", "true")
        s = Settings()
        assert s.use_database is True

    def test_loads_storage_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_PROVIDER", "supabase")
        monkeypatch.setenv("STORAGE_URL", "https://project.supabase.co")
        s = Settings()
        assert s.storage_provider == "supabase"
        assert s.storage_url == "https://project.supabase.co"

    def test_loads_allowed_extensions_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOWED_EXTENSIONS", '[".pdf"]')
        s = Settings()
        assert s.allowed_extensions == [".pdf"]

    def test_loads_max_task_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_TASK_ATTEMPTS", "5")
        s = Settings()
        assert s.max_task_attempts == 5


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_attempts_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_TASK_ATTEMPTS", "abc")
        with pytest.raises(ValidationError):
            Settings()
