"""Configuration management for the dualstore upload service."""

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class UploadConfig:
    """Immutable upload parameters handed to the orchestrator."""

    max_file_size: int
    temp_dir: Path
    bucket: str
    key_prefix: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "dualstore"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=8080, gt=0, lt=65536)

    # Storage Configuration
    STORAGE_BACKEND: str = "local"  # "remote" (S3 + IPFS) or "local"
    LOCAL_STORAGE_PATH: str = "data/storage"

    # Object store (S3 or S3-compatible)
    S3_BUCKET: str = "default-bucket"
    S3_KEY_PREFIX: str = "uploads"
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_PUBLIC_BASE_URL: str | None = None

    # Content-addressed store (IPFS HTTP API)
    IPFS_API_URL: str = "http://127.0.0.1:5001"
    IPFS_TIMEOUT: int = Field(default=300, gt=0)  # seconds

    # Upload Constraints
    MAX_FILE_SIZE: int = Field(default=5_242_880, gt=0)  # 5MB
    TEMP_DIR: str = "/tmp"

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        if value not in ("local", "remote"):
            raise ValueError(f"STORAGE_BACKEND must be 'local' or 'remote', got {value!r}")
        return value

    @field_validator("S3_BUCKET")
    @classmethod
    def _check_bucket(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("S3 bucket name cannot be empty")
        return value

    @field_validator("S3_KEY_PREFIX")
    @classmethod
    def _strip_prefix(cls, value: str) -> str:
        return value.strip("/")

    @field_validator("IPFS_API_URL", "S3_ENDPOINT_URL", "S3_PUBLIC_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @property
    def upload_config(self) -> UploadConfig:
        """Snapshot of the values the upload pipeline needs."""
        return UploadConfig(
            max_file_size=self.MAX_FILE_SIZE,
            temp_dir=Path(self.TEMP_DIR),
            bucket=self.S3_BUCKET,
            key_prefix=self.S3_KEY_PREFIX,
        )


# Singleton settings instance
settings = Settings()
