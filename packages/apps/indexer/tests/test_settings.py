"""Tests for indexer Settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ledger_sync_indexer.settings import CheckpointBackend, Settings

CONTRACT = "0x" + "33" * 20


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("RPC_URL", "http://node:8545")
    monkeypatch.setenv("STAKING_CONTRACT_ADDRESS", CONTRACT)
    return monkeypatch


def test_defaults(env: pytest.MonkeyPatch) -> None:
    settings = Settings(_env_file=None)

    assert settings.batch_size == 500
    assert settings.poll_interval_seconds == 120.0
    assert settings.start_block is None
    assert settings.checkpoint_backend is CheckpointBackend.FILE
    assert settings.checkpoint_file == Path("last-block.json")
    assert settings.checkpoint_key == "lastProcessedBlock"
    assert settings.database_url == "sqlite+aiosqlite:///ledger_sync.db"
    assert settings.redis_url_computed == "redis://localhost:6379/0"
    assert settings.use_subscription is False


def test_reads_environment(env: pytest.MonkeyPatch) -> None:
    env.setenv("START_BLOCK", "1000")
    env.setenv("BATCH_SIZE", "250")
    env.setenv("POLL_INTERVAL_MS", "1500")
    env.setenv("CHECKPOINT_BACKEND", "redis")
    env.setenv("REDIS_HOST", "cache")
    env.setenv("REDIS_PORT", "6380")

    settings = Settings(_env_file=None)

    assert settings.start_block == 1000
    assert settings.batch_size == 250
    assert settings.poll_interval_seconds == 1.5
    assert settings.checkpoint_backend is CheckpointBackend.REDIS
    assert settings.redis_url_computed == "redis://cache:6380/0"


def test_reads_dotenv_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("STAKING_CONTRACT_ADDRESS", raising=False)
    dotenv = tmp_path / ".env"
    dotenv.write_text(f"RPC_URL=http://node:8545\nSTAKING_CONTRACT_ADDRESS={CONTRACT}\n")

    settings = Settings(_env_file=dotenv)

    assert settings.rpc_url == "http://node:8545"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("BATCH_SIZE", "0"),
        ("POLL_INTERVAL_MS", "-1"),
        ("START_BLOCK", "-5"),
        ("STAKING_CONTRACT_ADDRESS", "0x1234"),
        ("CHECKPOINT_BACKEND", "s3"),
    ],
)
def test_rejects_invalid_values(env: pytest.MonkeyPatch, name: str, value: str) -> None:
    env.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_subscription_requires_websocket_url(env: pytest.MonkeyPatch) -> None:
    env.setenv("USE_SUBSCRIPTION", "true")
    with pytest.raises(ValidationError, match="WS_RPC_URL"):
        Settings(_env_file=None)


def test_rpc_url_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.setenv("STAKING_CONTRACT_ADDRESS", CONTRACT)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
