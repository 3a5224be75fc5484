from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from ledger_sync_core.instrumentation import HookRegistry, set_hook_registry
from ledger_sync_core.retry import RetryPolicy

WaitUntil = Callable[..., Awaitable[None]]


@pytest.fixture(autouse=True)
def hook_registry() -> HookRegistry:
    registry = HookRegistry()
    set_hook_registry(registry)
    return registry


@pytest.fixture
def no_backoff() -> RetryPolicy:
    return RetryPolicy(max_attempts=None, base_delay=0.0, max_delay=0.0, jitter=False)


@pytest.fixture
def wait_until() -> WaitUntil:
    async def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return _wait
