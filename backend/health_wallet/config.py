from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./health_wallet.db")

    # File uploads
    upload_dir: str = Field(default="./uploads")
    default_report_category: str = Field(default="General")

    # Auth
    jwt_secret_key: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    token_expire_seconds: int = Field(default=3600)

    # OCR
    ocr_provider: str = Field(default="tesseract")  # "tesseract" | "textract"
    ocr_language: str = Field(default="eng")
    ocr_timeout_seconds: float = Field(default=30.0, gt=0)
    tesseract_cmd: Optional[str] = Field(default=None)

    # AWS Textract
    aws_access_key_id: str = Field(default="")
    aws_secret_access_key: str = Field(default="")
    aws_region: str = Field(default="us-east-1")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
