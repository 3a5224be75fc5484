"""Translation of web3 transport failures into ledger-sync exceptions."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import aiohttp
from web3.exceptions import Web3Exception

from ledger_sync_core.primitives.exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterator

# JSON-RPC error responses (rate limits included) surface as Web3RPCError,
# a Web3Exception subclass.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    Web3Exception,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)


@contextlib.contextmanager
def translate_transport_errors(operation: str) -> Iterator[None]:
    """Re-raise transport failures inside the block as ``SourceUnavailableError``."""
    try:
        yield
    except TRANSPORT_ERRORS as exc:
        raise SourceUnavailableError(
            f"{operation} failed: {exc}", operation=operation
        ) from exc
