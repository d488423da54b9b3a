"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # MongoDB (MONGODB_URI is required)
    mongodb_uri: str
    mongodb_db: str = "MTBM"

    # Auth tokens (JWT_SECRET is required)
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7

    # Server
    host: str = "127.0.0.1"
    port: int = 5000

    # CORS - comma-separated origins, or "*" to allow all
    cors_origin: str = "http://localhost:5173"

    # Frontend URL (for email links)
    frontend_url: str = "http://localhost:5173"

    # Uploaded media
    uploads_path: str = "./uploads"
    avatar_max_mb: int = 2
    chat_image_max_mb: int = 5
    chat_voice_max_mb: int = 10

    # One-time codes
    otp_ttl_minutes: int = 10
    reset_code_ttl_minutes: int = 60
    require_verified_email: bool = False

    # Service mailbox for outgoing email (Graph API, ROPC).
    # Leave empty to log codes instead of emailing them.
    mail_tenant_id: str = ""
    mail_client_id: str = ""
    mail_client_secret: str = ""
    service_mailbox_email: str = ""
    service_mailbox_password: str = ""

    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def mail_enabled(self) -> bool:
        """True when every service mailbox credential is present"""
        return all([
            self.mail_tenant_id,
            self.mail_client_id,
            self.mail_client_secret,
            self.service_mailbox_email,
            self.service_mailbox_password,
        ])

    @staticmethod
    def megabytes(value: int) -> int:
        """Convert a megabyte ceiling to bytes"""
        return value * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises pydantic's ValidationError naming MONGODB_URI / JWT_SECRET
    when either is missing, so the process fails at startup.
    """
    return Settings()
