from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./football_datacenter.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # football-data.org
    football_data_api_key: str | None = Field(default=None, repr=False)
    football_data_base_url: str = "https://api.football-data.org/v4"
    supported_plan: str = "TIER_ONE"

    # Provider quota governor
    governor_threshold: int = Field(default=9, ge=1)
    governor_cooldown_seconds: float = Field(default=60.0, gt=0)
    governor_progress_interval_seconds: float = Field(default=10.0, gt=0)
    provider_rate_limit_retries: int = Field(default=3, ge=0)
    provider_rate_limit_retry_seconds: float = Field(default=60.0, ge=0)

    # Scheduling
    ingestion_cron: str = "10 17 * * *"
    notification_cron: str = "10 1 * * *"
    scheduler_timezone: str = "UTC"
    notification_lookahead_days: int = Field(default=7, ge=0)

    # Digest delivery
    mail_api_url: str | None = None
    mail_api_key: str | None = Field(default=None, repr=False)
    mail_from: str = "MatchDay <matchday@localhost>"

    store_ingested_payloads: bool = True

    # Application endpoint used by the polling client
    api_base_url: str = "http://localhost:3000"
    poll_default_retry_seconds: float = Field(default=3.0, ge=0)
    poll_max_retries: int = Field(default=20, ge=0)

    log_level: str = "INFO"

    # -----------------------------
    # Required-key helpers
    # -----------------------------

    def require_football_data_key(self) -> str:
        if not self.football_data_api_key:
            raise RuntimeError(
                "FOOTBALL_DATA_API_KEY is not set. Set it in the environment or .env file."
            )
        return self.football_data_api_key

    def require_mail_api_url(self) -> str:
        if not self.mail_api_url:
            raise RuntimeError("MAIL_API_URL is not set. Set it in the environment or .env file.")
        return self.mail_api_url


settings = Settings()
