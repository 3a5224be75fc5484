"""web3 adapters: event source, live log subscription, revert decoding."""

from __future__ import annotations

from .abi import STAKING_ABI, find_entry, load_abi
from .exceptions import TRANSPORT_ERRORS, translate_transport_errors
from .failures import (
    FAILURE_MESSAGES,
    DecodedFailure,
    FailureDecoder,
    FailureSignature,
)
from .logs import to_raw_log
from .source import Web3EventSource, connect_websocket
from .subscription import Web3LogSubscription

__all__ = [
    "FAILURE_MESSAGES",
    "STAKING_ABI",
    "TRANSPORT_ERRORS",
    "DecodedFailure",
    "FailureDecoder",
    "FailureSignature",
    "Web3EventSource",
    "Web3LogSubscription",
    "connect_websocket",
    "find_entry",
    "load_abi",
    "to_raw_log",
    "translate_transport_errors",
]
