"""Projected record collections and their natural keys."""

from __future__ import annotations

import enum
from decimal import Decimal, localcontext

ETHER_DECIMALS = 18
WEI_PER_ETHER = Decimal(10) ** ETHER_DECIMALS

# Wide enough for any uint256 (78 digits) so no conversion rounds.
_WEI_PRECISION = 96


class Collection(str, enum.Enum):
    """Target-store collections (tables) the projectors write to."""

    TIERS = "tiers"
    STAKES = "stakes"
    REWARD_TOKENS = "reward_tokens"
    TIER_REWARD_TOKENS = "tier_reward_tokens"
    REWARD_CLAIMS = "reward_claims"


NATURAL_KEYS: dict[Collection, tuple[str, ...]] = {
    Collection.TIERS: ("id",),
    Collection.STAKES: ("id",),
    Collection.REWARD_TOKENS: ("address",),
    Collection.TIER_REWARD_TOKENS: ("tier_id", "token_address"),
    Collection.REWARD_CLAIMS: ("stake_id", "owner", "token_address"),
}


def from_wei(value: int) -> Decimal:
    """Convert an integer wei amount to ether without float rounding."""
    with localcontext() as ctx:
        ctx.prec = _WEI_PRECISION
        return Decimal(value).scaleb(-ETHER_DECIMALS)
