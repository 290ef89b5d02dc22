from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./content_analysis.db"

    # Cache backend: sql | memory
    cache_backend: str = "sql"
    cache_collection_id: int = 16
    cache_low_water: int = 50
    cache_high_water: int = 100
    # Accept unversioned envelopes and unknown record tags written by older builds
    cache_legacy_decode: bool = False

    # Recognition provider: mock | paddleocr | aws_textract
    recognition_provider: str = "mock"
    min_text_confidence: float = 0.5
    dedupe_concurrent_lookups: bool = False

    paddle_lang: str = "en"
    paddle_use_gpu: bool = False

    # AWS Textract (only needed when recognition_provider=aws_textract)
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None


settings = Settings()
