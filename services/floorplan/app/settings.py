from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class FloorplanSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str
    log_level: str = "info"
    # Logs every inbound request header when true.
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 8080

    query_timeout_s: float = 10.0
    startup_ping_timeout_s: float = 5.0

    # 0 workers disables the queue entirely; handlers then get a NullNotifier.
    job_workers: int = 1
    job_queue_size: int = 100
    job_timeout_s: float = 10.0

    expose_db_errors: bool = False
    otel_enabled: bool = False


def load_settings() -> FloorplanSettings:
    return FloorplanSettings()
