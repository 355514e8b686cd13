from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "dronelog"
    db_username: str = "dronelog"
    db_password: str = "secret"

    max_event_attempts: int = 3
    event_poll_interval_seconds: int = 5

    storage_backend: str = "local"
    storage_root: Path = Path("/app/buckets")
    tmp_dir: Path = Path("/tmp/dronelog")
    watched_bucket: str = ""
    watched_prefix: str = "logs/"

    provenance_table: str = "file_hashes"

    ledger_mode: str = "mock"
    ledger_rpc_url: str = ""
    ledger_timeout_seconds: int = 30
    ledger_confirm_timeout_seconds: int = 60
    ledger_confirm_poll_seconds: float = 2.0
    validator_private_key: str = ""

    verification_policy: str = "always_pass"

    @field_validator("provenance_table")
    @classmethod
    def _check_table_name(cls, value: str) -> str:
        if not value.replace("_", "").isalnum():
            raise ValueError(f"provenance_table '{value}' is not a plain identifier")
        return value
