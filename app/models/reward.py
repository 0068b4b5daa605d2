from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base
from app.models.enums import ClaimTokenStatus, RewardStatus, RewardType
from app.utils.dates import utcnow

if TYPE_CHECKING:
    from .referral import Referral


class ReferralReward(Base):
    __tablename__ = "referral_rewards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    referrer_user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    # NULL for aggregate rewards
    referral_id: Mapped[Optional[int]] = mapped_column(ForeignKey("referrals.id"), nullable=True)
    reward_type: Mapped[RewardType] = mapped_column(SQLEnum(RewardType, name="rewardtype"), nullable=False)
    reward_value: Mapped[int] = mapped_column(Integer, nullable=False)
    clicks_required: Mapped[int] = mapped_column(Integer, nullable=False)
    clicks_achieved: Mapped[int] = mapped_column(Integer, nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    applied_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[RewardStatus] = mapped_column(
        SQLEnum(RewardStatus, name="rewardstatus"), default=RewardStatus.EARNED, nullable=False, index=True
    )
    is_aggregate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    referral: Mapped[Optional["Referral"]] = relationship(back_populates="rewards")

    # One reward per referral and type, one aggregate reward per referrer and type.
    # NULL referral_id never collides in a plain unique constraint, hence the partial indexes.
    __table_args__ = (
        Index(
            "uq_referral_rewards_individual", "referral_id", "reward_type", unique=True,
            postgresql_where=text("NOT is_aggregate"), sqlite_where=text("NOT is_aggregate"),
        ),
        Index(
            "uq_referral_rewards_aggregate", "referrer_user_id", "reward_type", unique=True,
            postgresql_where=text("is_aggregate"), sqlite_where=text("is_aggregate"),
        ),
    )

    def __repr__(self):
        return f"<ReferralReward(id={self.id}, type='{self.reward_type}', status='{self.status}', aggregate={self.is_aggregate})>"


class ClaimToken(Base):
    __tablename__ = "reward_claim_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reward_id: Mapped[int] = mapped_column(ForeignKey("referral_rewards.id"), nullable=False, index=True)
    referrer_user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    status: Mapped[ClaimTokenStatus] = mapped_column(
        SQLEnum(ClaimTokenStatus, name="claimtokenstatus"), default=ClaimTokenStatus.PENDING, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    reward: Mapped["ReferralReward"] = relationship()

    def __repr__(self):
        return f"<ClaimToken(id={self.id}, reward_id={self.reward_id}, status='{self.status}')>"
