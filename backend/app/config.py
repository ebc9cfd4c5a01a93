from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str

    # Email
    email_mode: str = "dev"  # dev | prod
    sendgrid_api_key: Optional[str] = None
    mail_from_address: str = "noreply@studylink.space"
    mail_from_name: str = "StudyLink"
    mail_dispatch_timeout_seconds: float = 10.0
    notification_max_attempts: int = 5
    # Rows claimed longer ago than this are treated as abandoned and reclaimed
    notification_claim_timeout_seconds: int = 300

    # Auth
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30  # matches the cookie lifetime
    magic_link_ttl_minutes: int = 30
    cookie_secure: bool = False  # True in production behind HTTPS

    # Job requests
    # Off: any enumerated status may be set at any time
    enforce_status_transitions: bool = False

    # App
    app_base_url: str = "http://localhost:3000"
    allowed_origins: str = ""
    debug: bool = False

    def get_frontend_url(self) -> str:
        """Base URL used for links embedded in emails."""
        return self.app_base_url.rstrip("/")


settings = Settings()
