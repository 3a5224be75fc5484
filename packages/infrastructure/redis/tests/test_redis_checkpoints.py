"""Tests for RedisCheckpointStore."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from ledger_sync_core.primitives.exceptions import CheckpointError
from ledger_sync_redis import RedisCheckpointError, RedisCheckpointStore


@pytest.mark.asyncio
class TestRedisCheckpointStore:
    @pytest_asyncio.fixture
    async def redis_client(self):
        client = AsyncMock()
        client.get.return_value = None
        return client

    @pytest_asyncio.fixture
    async def store(self, redis_client):
        return RedisCheckpointStore(redis_client)

    async def test_missing_key_loads_none(self, store, redis_client):
        assert await store.load() is None
        redis_client.get.assert_called_with("lastProcessedBlock")

    async def test_load_parses_bytes(self, store, redis_client):
        redis_client.get.return_value = b"1500"
        assert await store.load() == 1500

    async def test_invalid_value_loads_none(self, store, redis_client):
        redis_client.get.return_value = b"garbage"
        assert await store.load() is None

    async def test_save_writes_decimal_string(self, store, redis_client):
        await store.save(1500)
        redis_client.set.assert_called_with("lastProcessedBlock", "1500")

    async def test_custom_key(self, redis_client):
        store = RedisCheckpointStore(redis_client, key="indexer:mainnet")
        await store.save(7)
        redis_client.set.assert_called_with("indexer:mainnet", "7")

    async def test_write_failure_is_a_checkpoint_error(self, store, redis_client):
        redis_client.set.side_effect = RedisConnectionError("refused")
        with pytest.raises(RedisCheckpointError) as exc_info:
            await store.save(1)
        assert isinstance(exc_info.value, CheckpointError)

    async def test_read_failure_is_a_checkpoint_error(self, store, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(CheckpointError):
            await store.load()
