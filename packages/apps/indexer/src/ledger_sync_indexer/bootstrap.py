"""Wiring: settings in, a ready-to-run sync engine out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from ledger_sync_core.retry import RetryPolicy
from ledger_sync_engine.checkpoint import FileCheckpointStore, InMemoryCheckpointStore
from ledger_sync_engine.engine import SyncEngine
from ledger_sync_observability import install_structured_logging
from ledger_sync_persistence_sqlalchemy import SQLAlchemyRecordStore, create_tables
from ledger_sync_redis import RedisCheckpointStore
from ledger_sync_web3 import Web3EventSource, load_abi

from .settings import CheckpointBackend, Settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from ledger_sync_core.ports.checkpoint import ICheckpointStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    if settings.log_json:
        install_structured_logging()


def build_checkpoint_store(settings: Settings) -> tuple[ICheckpointStore, Redis | None]:
    """Checkpoint store for the configured backend, plus its Redis client if any."""
    if settings.checkpoint_backend is CheckpointBackend.REDIS:
        client = Redis.from_url(settings.redis_url_computed)
        return RedisCheckpointStore(client, key=settings.checkpoint_key), client
    if settings.checkpoint_backend is CheckpointBackend.MEMORY:
        logger.warning("In-memory checkpoint: progress is lost on restart")
        return InMemoryCheckpointStore(), None
    return FileCheckpointStore(settings.checkpoint_file, key=settings.checkpoint_key), None


def build_source(settings: Settings) -> Web3EventSource:
    abi = load_abi(settings.abi_path) if settings.abi_path else None
    return Web3EventSource.from_url(
        settings.rpc_url,
        settings.staking_contract_address,
        abi,
        ws_url=settings.ws_rpc_url,
        request_timeout=settings.request_timeout_seconds,
    )


@dataclass
class Application:
    """The wired engine and the resources it holds open."""

    engine: SyncEngine
    source: Web3EventSource
    db_engine: AsyncEngine
    redis: Redis | None = None

    async def aclose(self) -> None:
        await self.source.aclose()
        await self.db_engine.dispose()
        if self.redis is not None:
            await self.redis.aclose()


async def build_application(settings: Settings) -> Application:
    db_engine = create_async_engine(settings.database_url)
    if settings.create_tables:
        await create_tables(db_engine)
    store = SQLAlchemyRecordStore(async_sessionmaker(db_engine, expire_on_commit=False))
    checkpoints, redis_client = build_checkpoint_store(settings)
    source = build_source(settings)
    engine = SyncEngine(
        source,
        store,
        checkpoints,
        batch_size=settings.batch_size,
        poll_interval_seconds=settings.poll_interval_seconds,
        use_subscription=settings.use_subscription,
        start_position=settings.start_block,
        live_checkpoint=settings.live_checkpoint,
        restart_policy=RetryPolicy(
            max_attempts=None,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
        ),
        checkpoint_policy=RetryPolicy(
            max_attempts=settings.checkpoint_save_attempts,
            base_delay=min(0.5, settings.retry_max_delay_seconds),
            max_delay=settings.retry_max_delay_seconds,
        ),
    )
    logger.info(
        "Indexing %s into %s (checkpoint: %s)",
        source.address,
        db_engine.url.render_as_string(),
        settings.checkpoint_backend.value,
    )
    return Application(engine, source, db_engine, redis_client)
