from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # General
    app_name: str = Field("Campus Market API")
    log_level: str = Field("INFO")
    project_id: Optional[str] = Field(default=None, description="GCP / Firebase project ID")

    # Data access backend: "firebase" in production, "memory" for local runs and tests
    datastore_backend: Literal["firebase", "memory"] = Field("firebase")

    # Firebase
    firebase_database_url: Optional[str] = Field(
        default=None,
        description="Realtime Database URL; derived from project_id when unset.",
    )
    firebase_credentials_json: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_APPLICATION_CREDENTIALS",
        description="Path to service-account JSON file or JSON string itself.",
    )

    # Cloud Storage
    bucket_name: str = Field("campus-market-images")
    public_images: bool = Field(False, description="If true, uploaded images are made public instead of using signed URLs.")
    signed_url_days: int = Field(7, ge=1)

    # Image uploads
    max_upload_bytes: int = Field(10 * 1024 * 1024, ge=1)
    default_image_packaging: Literal["data_url", "upload"] = Field("data_url")

    # Admin bootstrap
    admin_email: Optional[str] = Field(default=None)
    admin_password: Optional[str] = Field(default=None)

    # Chat
    chat_history_limit: int = Field(100, ge=1, le=1000)

    # HTTP
    cors_allowed_origins: str = Field("*", description='"*" or a comma-separated origin list.')

    # Contact links
    whatsapp_country_code: str = Field("254")

    @property
    def database_url(self) -> Optional[str]:
        if self.firebase_database_url:
            return self.firebase_database_url
        if self.project_id:
            return f"https://{self.project_id}-default-rtdb.firebaseio.com"
        return None


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
