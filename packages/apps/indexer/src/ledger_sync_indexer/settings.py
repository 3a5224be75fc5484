"""Indexer settings, read from the environment and an optional ``.env`` file."""

from __future__ import annotations

import enum
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CheckpointBackend(str, enum.Enum):
    FILE = "file"
    REDIS = "redis"
    MEMORY = "memory"


class Settings(BaseSettings):
    """Indexer settings; every field maps to the upper-cased env variable."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger
    rpc_url: str
    ws_rpc_url: str | None = None
    staking_contract_address: str = Field(pattern=r"^0x[0-9a-fA-F]{40}$")
    abi_path: Path | None = None
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Target store
    database_url: str = "sqlite+aiosqlite:///ledger_sync.db"
    create_tables: bool = False

    # Sync
    start_block: int | None = Field(default=None, ge=0)
    batch_size: int = Field(default=500, gt=0)
    poll_interval_ms: int = Field(default=120_000, gt=0)
    use_subscription: bool = False
    live_checkpoint: bool = False
    retry_base_delay_seconds: float = Field(default=5.0, ge=0)
    retry_max_delay_seconds: float = Field(default=300.0, ge=0)
    checkpoint_save_attempts: int = Field(default=5, ge=1)

    # Checkpoint
    checkpoint_backend: CheckpointBackend = CheckpointBackend.FILE
    checkpoint_file: Path = Path("last-block.json")
    checkpoint_key: str = "lastProcessedBlock"
    redis_url: str | None = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @model_validator(mode="after")
    def _check_consistency(self) -> Settings:
        if self.use_subscription and not self.ws_rpc_url:
            raise ValueError("USE_SUBSCRIPTION requires WS_RPC_URL")
        if self.retry_base_delay_seconds > self.retry_max_delay_seconds:
            raise ValueError(
                "RETRY_BASE_DELAY_SECONDS must not exceed RETRY_MAX_DELAY_SECONDS"
            )
        return self

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def redis_url_computed(self) -> str:
        """Compute the Redis URL if not explicitly set."""
        if self.redis_url:
            return self.redis_url
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"
