from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base
from app.utils.dates import utcnow


class SmsCreditGrant(Base):
    """SMS allowance granted to a provider account; consumed by the SMS service."""
    __tablename__ = "sms_credit_grants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    # A reward converts into credit at most once
    reward_id: Mapped[int] = mapped_column(ForeignKey("referral_rewards.id"), unique=True, nullable=False)
    claim_token_id: Mapped[int] = mapped_column(ForeignKey("reward_claim_tokens.id"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False, default="referral_reward")
    granted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self):
        return f"<SmsCreditGrant(user_id={self.user_id}, amount={self.amount}, reward_id={self.reward_id})>"
