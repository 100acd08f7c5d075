from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # False selects the process-local in-memory repositories.
    use_database: bool = False

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "doccompare"
    db_username: str = "doccompare"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    storage_provider: str = "local"
    local_storage_path: str = ".storage"
    storage_folder_prefix: str = ""
    storage_url: str = ""
    storage_service_key: str = ""
    storage_bucket: str = "documents"
    storage_timeout_seconds: int = 30
    storage_retry_attempts: int = 3
    storage_retry_base_delay_seconds: float = 0.5
    storage_retry_max_delay_seconds: float = 5.0
    storage_retry_timeout_seconds: float = 60.0
    signed_url_ttl_seconds: int = 3600
    download_path_template: str = "/api/documents/{document_id}/download"

    max_file_size_bytes: int = 10 * 1024 * 1024
    allowed_mime_types: list[str] = [
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    ]
    allowed_extensions: list[str] = [".pdf", ".docx", ".txt"]

    max_task_attempts: int = 3
    default_task_priority: int = 5
    queue_drain_limit: int = 25
    # First retry waits this long; each further retry doubles it.
    task_retry_delay_seconds: float = 60.0

    pdf_engine: str = "pdfplumber"

    comparison_provider: str = "openai"
    comparison_openai_api_key: str = ""
    comparison_openai_model_name: str = "gpt-4o-mini"
    comparison_openai_base_url: str = ""
    comparison_openai_timeout_seconds: int = 60
    comparison_temperature: float = 0.1
    comparison_confidence_score: float = 0.85
    comparison_max_tokens: int = 2000
    comparison_recommended_actions: list[str] = [
        "Review all high-severity differences with legal counsel",
        "Negotiate changes to clauses that deviate from the standard document",
        "Confirm the governing law and jurisdiction clauses",
    ]
