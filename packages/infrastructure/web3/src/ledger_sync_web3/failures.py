"""Decoding of contract revert payloads into named failures.

A revert payload is a 4-byte selector (first bytes of the keccak hash of the
failure's canonical signature) followed by ABI-encoded arguments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from .abi import STAKING_ABI

logger = logging.getLogger(__name__)

UNKNOWN_FAILURE = "UnknownError"

FAILURE_MESSAGES: dict[str, str] = {
    "StakeNotFound": "The stake ID does not exist or is invalid",
    "UnauthorizedWithdrawal": "You are not the owner of this stake",
    "LockupNotCompleted": "The lockup period has not ended yet",
    "RewardAlreadyClaimed": "Rewards for this stake have already been claimed",
    "StakingNotLocked": "The stake has already been withdrawn",
}

_BUILTIN_FAILURES: list[dict[str, Any]] = [
    {"type": "error", "name": "Error", "inputs": [{"name": "reason", "type": "string"}]},
    {"type": "error", "name": "Panic", "inputs": [{"name": "code", "type": "uint256"}]},
]


def canonical_type(param: dict[str, Any]) -> str:
    """ABI type as it appears in a signature; tuples expand to their components."""
    type_ = str(param["type"])
    if type_.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){type_[len('tuple'):]}"
    return type_


@dataclass(frozen=True)
class FailureSignature:
    name: str
    inputs: tuple[dict[str, Any], ...] = ()

    @property
    def types(self) -> list[str]:
        return [canonical_type(param) for param in self.inputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.types)})"

    @property
    def selector(self) -> str:
        return "0x" + keccak(text=self.signature)[:4].hex()


@dataclass(frozen=True)
class DecodedFailure:
    """A revert payload resolved to a failure name and message."""

    name: str
    selector: str
    message: str
    args: tuple[Any, ...] = field(default_factory=tuple)
    known: bool = True


def _to_bytes(payload: bytes | str) -> bytes | None:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if not isinstance(payload, str) or not payload.startswith("0x"):
        return None
    try:
        return bytes.fromhex(payload[2:])
    except ValueError:
        return None


def _format_arg(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class FailureDecoder:
    """Maps revert payloads to the failures an ABI declares.

    Besides the ABI's ``error`` entries, the standard ``Error(string)`` and
    ``Panic(uint256)`` are always known. ``decode`` never raises.
    """

    def __init__(self, signatures: list[FailureSignature]) -> None:
        self._by_selector: dict[str, FailureSignature] = {}
        for signature in signatures:
            self._by_selector.setdefault(signature.selector, signature)

    @classmethod
    def from_abi(cls, abi: list[dict[str, Any]]) -> FailureDecoder:
        entries = [entry for entry in abi if entry.get("type") == "error"]
        signatures = [
            FailureSignature(entry["name"], tuple(entry.get("inputs", [])))
            for entry in [*entries, *_BUILTIN_FAILURES]
        ]
        return cls(signatures)

    @classmethod
    def default(cls) -> FailureDecoder:
        """Decoder for the bundled staking contract ABI."""
        return cls.from_abi(STAKING_ABI)

    def signatures(self) -> list[FailureSignature]:
        return list(self._by_selector.values())

    def decode(self, payload: bytes | str) -> DecodedFailure | None:
        """Resolve *payload*; None when it carries no 4-byte selector."""
        data = _to_bytes(payload)
        if data is None or len(data) < 4:
            return None
        selector = "0x" + data[:4].hex()
        signature = self._by_selector.get(selector)
        if signature is None:
            return DecodedFailure(
                name=UNKNOWN_FAILURE,
                selector=selector,
                message=f"Unknown custom error with selector: {selector}",
                known=False,
            )
        try:
            args = tuple(abi_decode(signature.types, data[4:]))
        except (DecodingError, ValueError, TypeError, OverflowError) as exc:
            logger.debug("Arguments of %s did not decode: %s", signature.signature, exc)
            return DecodedFailure(
                name=signature.name,
                selector=selector,
                message=f"Custom error: {signature.name}",
            )
        return DecodedFailure(
            name=signature.name,
            selector=selector,
            message=self._message(signature.name, args),
            args=args,
        )

    @staticmethod
    def _message(name: str, args: tuple[Any, ...]) -> str:
        if name in FAILURE_MESSAGES:
            return FAILURE_MESSAGES[name]
        if name == "Error" and args:
            return str(args[0])
        if name == "Panic" and args:
            return f"Panic code {hex(args[0])}"
        if args:
            return f"{name}({', '.join(_format_arg(arg) for arg in args)})"
        return f"Custom error: {name}"
