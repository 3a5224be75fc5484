"""Staking contract ABI: events, the ``tiers`` getter and custom errors."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def _input(name: str, type_: str, *, indexed: bool = False) -> dict[str, Any]:
    return {"name": name, "type": type_, "internalType": type_, "indexed": indexed}


def _event(name: str, *inputs: dict[str, Any]) -> dict[str, Any]:
    return {"type": "event", "name": name, "anonymous": False, "inputs": list(inputs)}


def _error(name: str, *inputs: tuple[str, str]) -> dict[str, Any]:
    return {
        "type": "error",
        "name": name,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
    }


_TIER_FIELDS = (
    _input("name", "string"),
    _input("minStake", "uint256"),
    _input("lockupPeriod", "uint256"),
    _input("apy", "uint256"),
)

STAKING_ABI: list[dict[str, Any]] = [
    _event("TierCreated", _input("tierId", "uint256", indexed=True), *_TIER_FIELDS),
    _event(
        "TierUpdated",
        _input("tierId", "uint256", indexed=True),
        *_TIER_FIELDS,
        _input("isActive", "bool"),
    ),
    _event(
        "Staked",
        _input("stakeId", "uint256", indexed=True),
        _input("owner", "address", indexed=True),
        _input("amount", "uint256"),
        _input("tierId", "uint256"),
        _input("startTime", "uint256"),
        _input("endTime", "uint256"),
    ),
    _event(
        "StakeWithdrawn",
        _input("stakeId", "uint256", indexed=True),
        _input("owner", "address", indexed=True),
        _input("amount", "uint256"),
    ),
    _event(
        "RewardClaimed",
        _input("stakeId", "uint256", indexed=True),
        _input("owner", "address", indexed=True),
        _input("token", "address", indexed=True),
        _input("amount", "uint256"),
    ),
    _event(
        "RewardTokenRegistered",
        _input("tokenAddress", "address", indexed=True),
        _input("symbol", "string"),
        _input("rewardRate", "uint256"),
    ),
    _event(
        "RewardTokenUpdated",
        _input("tokenAddress", "address", indexed=True),
        _input("symbol", "string"),
        _input("rewardRate", "uint256"),
    ),
    _event(
        "TierRewardTokenAdded",
        _input("tierId", "uint256", indexed=True),
        _input("tokenAddress", "address", indexed=True),
    ),
    _event(
        "TierRewardTokenRemoved",
        _input("tierId", "uint256", indexed=True),
        _input("tokenAddress", "address", indexed=True),
    ),
    {
        "type": "function",
        "name": "tiers",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "outputs": [
            {"name": "name", "type": "string", "internalType": "string"},
            {"name": "minStake", "type": "uint256", "internalType": "uint256"},
            {"name": "maxStake", "type": "uint256", "internalType": "uint256"},
            {"name": "lockupPeriod", "type": "uint256", "internalType": "uint256"},
            {"name": "apy", "type": "uint256", "internalType": "uint256"},
            {"name": "isActive", "type": "bool", "internalType": "bool"},
        ],
    },
    _error("StakeNotFound"),
    _error("UnauthorizedWithdrawal"),
    _error("LockupNotCompleted", ("unlockTime", "uint256")),
    _error("RewardAlreadyClaimed"),
    _error("StakingNotLocked"),
    _error("InvalidAmount", ("amount", "uint256")),
    _error("InvalidDuration"),
    _error("StakingPaused"),
]


def load_abi(path: str | Path) -> list[dict[str, Any]]:
    """Read an ABI list, or the ``abi`` member of a compiler artifact."""
    document = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(document, dict):
        document = document.get("abi")
    if not isinstance(document, list) or not all(
        isinstance(entry, dict) for entry in document
    ):
        raise ValueError(f"{path} does not contain a contract ABI")
    return document


def find_entry(abi: list[dict[str, Any]], type_: str, name: str) -> dict[str, Any]:
    """Return the ABI entry of *type_* named *name*."""
    for entry in abi:
        if entry.get("type") == type_ and entry.get("name") == name:
            return entry
    raise ValueError(f"ABI has no {type_} named {name!r}")
