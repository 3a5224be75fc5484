"""ledger-sync command line."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import create_async_engine

from ledger_sync_core.primitives.exceptions import LedgerSyncError, SyncHaltedError
from ledger_sync_persistence_sqlalchemy import create_tables
from ledger_sync_web3 import FailureDecoder, load_abi

from .bootstrap import build_application, build_checkpoint_store, configure_logging
from .settings import Settings

if TYPE_CHECKING:
    from ledger_sync_engine.engine import SyncEngine

logger = logging.getLogger(__name__)


def _load_settings(ctx: click.Context) -> Settings:
    try:
        return Settings(_env_file=ctx.obj["env_file"])
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}") from exc


def _decoder(abi_path: str | None) -> FailureDecoder:
    if abi_path:
        return FailureDecoder.from_abi(load_abi(abi_path))
    return FailureDecoder.default()


@click.group()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
    show_default=True,
    help="Optional dotenv file with settings.",
)
@click.pass_context
def cli(ctx: click.Context, env_file: str) -> None:
    """Mirror staking contract events into a relational store."""
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Catch up from the checkpoint, then follow the chain until stopped."""
    settings = _load_settings(ctx)
    configure_logging(settings)
    try:
        asyncio.run(_run(settings))
    except SyncHaltedError as exc:
        logger.critical("Indexer halted: %s", exc)
        ctx.exit(1)
    except (LedgerSyncError, ValueError, OSError) as exc:
        logger.critical("Indexer failed to start: %s", exc, exc_info=True)
        ctx.exit(1)


def _on_signal(engine: SyncEngine, signum: int) -> None:
    logger.info(
        "Received %s, shutting down gracefully...", signal.Signals(signum).name
    )
    engine.request_stop()


async def _run(settings: Settings) -> None:
    app = await build_application(settings)
    loop = asyncio.get_running_loop()
    signals = (signal.SIGINT, signal.SIGTERM)
    for signum in signals:
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, _on_signal, app.engine, signum)
    try:
        await app.engine.run()
    finally:
        for signum in signals:
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(signum)
        await app.aclose()


@cli.command("decode-failure")
@click.argument("payload")
@click.option("--abi", "abi_path", envvar="ABI_PATH", help="ABI or compiler artifact.")
def decode_failure(payload: str, abi_path: str | None) -> None:
    """Explain a revert PAYLOAD (0x-prefixed hex)."""
    decoded = _decoder(abi_path).decode(payload)
    if decoded is None:
        raise click.ClickException("Payload has no 4-byte failure selector")
    click.echo(f"Name: {decoded.name}")
    click.echo(f"Message: {decoded.message}")
    click.echo(f"Selector: {decoded.selector}")
    if decoded.args:
        click.echo(f"Args: {', '.join(str(arg) for arg in decoded.args)}")


@cli.command("list-failures")
@click.option("--abi", "abi_path", envvar="ABI_PATH", help="ABI or compiler artifact.")
def list_failures(abi_path: str | None) -> None:
    """Print every known failure selector and signature."""
    for signature in _decoder(abi_path).signatures():
        click.echo(f"{signature.selector}  {signature.signature}")


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the projected-record tables."""
    settings = _load_settings(ctx)

    async def _init() -> None:
        engine = create_async_engine(settings.database_url)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    click.echo("Tables created.")


@cli.command("show-checkpoint")
@click.pass_context
def show_checkpoint(ctx: click.Context) -> None:
    """Print the stored checkpoint, or "none"."""
    settings = _load_settings(ctx)

    async def _load() -> int | None:
        store, client = build_checkpoint_store(settings)
        try:
            return await store.load()
        finally:
            if client is not None:
                await client.aclose()

    try:
        position = asyncio.run(_load())
    except LedgerSyncError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("none" if position is None else str(position))
