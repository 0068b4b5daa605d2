from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.enums import RewardStatus, RewardType
from app.models.reward import ReferralReward


class CRUDReferralReward(CRUDBase[ReferralReward]):
    async def get_for_referrer(
        self, db: AsyncSession, *, reward_id: int, referrer_user_id: int
    ) -> Optional[ReferralReward]:
        statement = select(self.model).where(
            self.model.id == reward_id,
            self.model.referrer_user_id == referrer_user_id,
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_aggregate_types(self, db: AsyncSession, *, referrer_user_id: int) -> Set[RewardType]:
        statement = select(self.model.reward_type).where(
            self.model.referrer_user_id == referrer_user_id,
            self.model.is_aggregate.is_(True),
        )
        result = await db.execute(statement)
        return set(result.scalars().all())

    async def list_for_referrer(self, db: AsyncSession, *, referrer_user_id: int) -> List[ReferralReward]:
        statement = (
            select(self.model)
            .where(self.model.referrer_user_id == referrer_user_id)
            .order_by(self.model.earned_at.desc(), self.model.id.desc())
        )
        result = await db.execute(statement)
        return result.scalars().all()

    async def list_available(
        self, db: AsyncSession, *, referrer_user_id: int, now: datetime
    ) -> List[ReferralReward]:
        """Earned rewards that have not passed their expiry, newest first."""
        statement = (
            select(self.model)
            .where(
                self.model.referrer_user_id == referrer_user_id,
                self.model.status == RewardStatus.EARNED,
                self.model.expires_at > now,
            )
            .order_by(self.model.earned_at.desc(), self.model.id.desc())
        )
        result = await db.execute(statement)
        return result.scalars().all()

    async def mark_applied(self, db: AsyncSession, *, reward_id: int, now: datetime) -> bool:
        """
        Compare-and-swap earned -> applied on an unexpired reward.

        Returns False when another caller got there first or the reward lapsed. Does not commit.
        """
        statement = (
            update(self.model)
            .where(
                self.model.id == reward_id,
                self.model.status == RewardStatus.EARNED,
                self.model.expires_at > now,
            )
            .values(status=RewardStatus.APPLIED, applied_at=now)
        )
        result = await db.execute(statement)
        return result.rowcount == 1

    async def expire_stale(self, db: AsyncSession, *, now: datetime) -> int:
        statement = (
            update(self.model)
            .where(self.model.status == RewardStatus.EARNED, self.model.expires_at <= now)
            .values(status=RewardStatus.EXPIRED)
        )
        result = await db.execute(statement)
        return result.rowcount

referral_reward = CRUDReferralReward(ReferralReward)
