from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base
from app.models.enums import ReferralStatus
from app.utils.dates import utcnow

if TYPE_CHECKING:
    from .reward import ReferralReward


class ReferralCode(Base):
    __tablename__ = "referral_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # User ids belong to the identity service, so there is no foreign key here
    owner_user_id: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)
    code: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ReferralCode(owner_user_id={self.owner_user_id}, code='{self.code}')>"


class Referral(Base):
    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    referrer_user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    referred_user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    code: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[ReferralStatus] = mapped_column(
        SQLEnum(ReferralStatus, name="referralstatus"), default=ReferralStatus.PENDING, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    activated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    clicks: Mapped[List["ReferralClick"]] = relationship(back_populates="referral", passive_deletes="all")
    rewards: Mapped[List["ReferralReward"]] = relationship(back_populates="referral")

    __table_args__ = (UniqueConstraint("referrer_user_id", "referred_user_id", name="_referrer_referred_uc"),)

    def __repr__(self):
        return f"<Referral(id={self.id}, referrer={self.referrer_user_id}, referred={self.referred_user_id}, status='{self.status}')>"


class ReferralClick(Base):
    """Append-only audit row for an attributable profile visit."""
    __tablename__ = "referral_clicks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    referral_id: Mapped[int] = mapped_column(ForeignKey("referrals.id"), nullable=False)
    customer_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    visitor_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    ip: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    clicked_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    is_valid: Mapped[bool] = mapped_column(Boolean, nullable=False)
    month_year: Mapped[str] = mapped_column(String(7), nullable=False)

    referral: Mapped["Referral"] = relationship(back_populates="clicks")

    __table_args__ = (
        Index("ix_referral_clicks_monthly", "referral_id", "month_year", "is_valid"),
        Index("ix_referral_clicks_customer", "referral_id", "customer_user_id", "clicked_at"),
        Index("ix_referral_clicks_visitor", "referral_id", "visitor_id", "clicked_at"),
    )
