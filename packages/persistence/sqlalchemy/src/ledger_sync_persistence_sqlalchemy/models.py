"""Tables for the projected staking records.

uint256 values are kept as decimal strings, wei amounts as exact ether
decimals. Relationships are indexed columns only: no foreign keys, since
live delivery order across event kinds is not guaranteed.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .types import EtherAmount

UINT = String(78)
ADDRESS = String(42)


class Base(DeclarativeBase):
    """Declarative base for all projected-record models."""


class TierRecord(Base):
    __tablename__ = "tiers"

    id: Mapped[str] = mapped_column(UINT, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    min_stake: Mapped[Decimal] = mapped_column(EtherAmount)
    max_stake: Mapped[Decimal] = mapped_column(EtherAmount)
    lockup_period: Mapped[str] = mapped_column(UINT)
    apy: Mapped[str] = mapped_column(UINT)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class StakeRecord(Base):
    __tablename__ = "stakes"

    id: Mapped[str] = mapped_column(UINT, primary_key=True)
    owner: Mapped[str] = mapped_column(ADDRESS, index=True)
    amount: Mapped[Decimal] = mapped_column(EtherAmount)
    tier_id: Mapped[str] = mapped_column(UINT, index=True)
    start_time: Mapped[str] = mapped_column(UINT)
    end_time: Mapped[str] = mapped_column(UINT)
    has_withdrawn: Mapped[bool] = mapped_column(Boolean, default=False)
    has_claimed_rewards: Mapped[bool] = mapped_column(Boolean, default=False)


class RewardTokenRecord(Base):
    __tablename__ = "reward_tokens"

    address: Mapped[str] = mapped_column(ADDRESS, primary_key=True)
    symbol: Mapped[str] = mapped_column(String(64))
    reward_rate: Mapped[str] = mapped_column(UINT)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class TierRewardTokenRecord(Base):
    __tablename__ = "tier_reward_tokens"

    tier_id: Mapped[str] = mapped_column(UINT, primary_key=True)
    token_address: Mapped[str] = mapped_column(ADDRESS, primary_key=True)


class RewardClaimRecord(Base):
    __tablename__ = "reward_claims"

    id: Mapped[int] = mapped_column(
        Integer().with_variant(BigInteger, "postgresql"),
        primary_key=True,
        autoincrement=True,
    )
    stake_id: Mapped[str] = mapped_column(UINT, index=True)
    owner: Mapped[str] = mapped_column(ADDRESS, index=True)
    token_address: Mapped[str] = mapped_column(ADDRESS)
    amount: Mapped[str] = mapped_column(UINT)
    block_number: Mapped[int] = mapped_column(
        Integer().with_variant(BigInteger, "postgresql")
    )
    transaction_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "stake_id", "owner", "token_address", name="uq_reward_claims_natural_key"
        ),
    )
