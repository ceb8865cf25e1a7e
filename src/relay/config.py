"""Configuration settings for the anonymous reporter message relay."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay settings loaded from environment variables (``RELAY_`` prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # PII handling
    redaction_marker: str = "[REDACTED]"
    # Require acknowledgments to cover every current warning (off: any non-empty list)
    strict_acknowledgment: bool = False

    # Reporter notification job
    notification_job_name: str = "send-notification"
    notification_template_id: str = "case-message-notification"
    notification_attempts: int = 3
    notification_backoff_delay_ms: int = 1000
    status_check_path: str = "/check-status"

    # Message persistence: "memory" or "sql"
    message_store_backend: str = "memory"
    database_url: str = "sqlite:///relay-messages.db"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    def status_check_url(self, access_code: Optional[str]) -> Optional[str]:
        """Out-of-band retrieval link for the reporter, if they hold a code."""
        if not access_code:
            return None
        return f"{self.status_check_path}?code={access_code}"


# Global settings instance
settings: Optional[Settings] = None


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    global settings
    settings = Settings()
    return settings


def get_settings() -> Settings:
    """Get the global settings instance, loading if necessary."""
    global settings
    if settings is None:
        settings = load_settings()
    return settings
