"""Configuration and environment settings for the Expense Tracker API."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the Expense Tracker API."""

    app_name: str = "Expense Tracker API"
    app_version: str = "1.0.0"
    database_url: str = "sqlite:///transactions.db"
    database_echo: bool = False
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    api_prefix: str = ""
    cors_allow_origins: list[str] = ["*"]
    edit_window_hours: float = 12.0
    default_page_limit: int = 100
    max_description_length: int = 500
    touch_updated_at_on_edit: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/transactions.log"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
