"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "resume_user"
    postgres_password: str = "password"
    postgres_db: str = "resume_db"
    database_echo: bool = False

    # MongoDB (GridFS holds the uploaded resume bytes)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "resume_files"
    storage_bucket: str = "resumes"

    # OCR.space compatible recognition API
    ocr_space_api_key: str = ""
    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_language: str = "eng"
    ocr_engine: int = 2
    ocr_timeout_seconds: float = 60.0

    # DeepSeek AI (OpenAI-compatible), used for resume scoring
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    scoring_model: str = "deepseek-chat"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Ingestion limits
    max_upload_bytes: int = 10 * 1024 * 1024
    max_extracted_chars: int = 20000

    # App
    debug: bool = False
    log_level: str = "INFO"
    auto_create_schema: bool = True

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def ocr_configured(self) -> bool:
        return bool(self.ocr_space_api_key)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
