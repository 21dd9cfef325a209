from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fleet"
    db_username: str = "fleet"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5
    max_concurrent_documents: int = 4
    files_root: str = "/app/files"

    pdf_engine: str = "pdfplumber"
    min_text_chars: int = 20
    max_text_chars: int = 50_000
    raw_window_bytes: int = 8192

    direct_page_threshold: int = 10
    min_critical_confidence: float = 0.6

    chunk_token_budget: int = 4000
    sequential_chunk_limit: int = 3
    max_concurrent_chunks: int = 3

    reconciliation_tolerance: float = 0.01

    extraction_provider: str = "openai"
    extraction_structured_output: bool = True
    extraction_timeout_seconds: int = 60
    extraction_max_attempts: int = 3
    extraction_backoff_seconds: float = 1.0
    extraction_backoff_max_seconds: float = 10.0

    extraction_openai_api_key: str = ""
    extraction_openai_model_name: str = "gpt-4o-mini"
    extraction_openai_temperature: float = 0.0

    extraction_openai_compatible_api_key: str = ""
    extraction_openai_compatible_model_name: str = ""
    extraction_openai_compatible_base_url: str = ""

    extraction_openrouter_api_key: str = ""
    extraction_openrouter_model_name: str = ""
    extraction_groq_api_key: str = ""
    extraction_groq_model_name: str = ""
    extraction_together_api_key: str = ""
    extraction_together_model_name: str = ""
    extraction_deepseek_api_key: str = ""
    extraction_deepseek_model_name: str = ""
    extraction_ollama_api_key: str = "ollama"
    extraction_ollama_model_name: str = ""

    blob_engine: str = "local"
    blob_local_root: str = "/app/storage"
    blob_public_base_url: str = "http://localhost:8000/storage"
    blob_http_endpoint: str = ""
    blob_http_bucket: str = "maintenance-attachments"
    blob_http_token: str = ""
    blob_http_timeout_seconds: int = 30
