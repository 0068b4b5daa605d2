from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.enums import ReferralStatus, TRACKED_REFERRAL_STATUSES
from app.models.referral import Referral


class CRUDReferral(CRUDBase[Referral]):
    async def get_by_pair(
        self, db: AsyncSession, *, referrer_user_id: int, referred_user_id: int
    ) -> Optional[Referral]:
        statement = select(self.model).where(
            self.model.referrer_user_id == referrer_user_id,
            self.model.referred_user_id == referred_user_id,
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_tracked_for_referred(
        self, db: AsyncSession, *, referred_user_id: int, lock: bool = False
    ) -> Optional[Referral]:
        """
        Oldest active or pending referral of a referred user.

        With ``lock`` the row is held FOR UPDATE until the transaction ends, which
        serializes click recording per referral (ignored on SQLite).
        """
        statement = (
            select(self.model)
            .where(
                self.model.referred_user_id == referred_user_id,
                self.model.status.in_(TRACKED_REFERRAL_STATUSES),
            )
            .order_by(self.model.id)
            .limit(1)
        )
        if lock:
            statement = statement.with_for_update()
        result = await db.execute(statement)
        return result.scalars().first()

    async def activate_pending(self, db: AsyncSession, *, referred_user_id: int, now: datetime) -> int:
        """Flip every pending referral of the user to active. Does not commit."""
        statement = (
            update(self.model)
            .where(
                self.model.referred_user_id == referred_user_id,
                self.model.status == ReferralStatus.PENDING,
            )
            .values(status=ReferralStatus.ACTIVE, activated_at=now)
        )
        result = await db.execute(statement)
        return result.rowcount

    async def list_for_referrer(
        self,
        db: AsyncSession,
        *,
        referrer_user_id: int,
        statuses: Optional[Sequence[ReferralStatus]] = None,
    ) -> List[Referral]:
        statement = select(self.model).where(self.model.referrer_user_id == referrer_user_id)
        if statuses:
            statement = statement.where(self.model.status.in_(statuses))
        statement = statement.order_by(self.model.created_at.desc(), self.model.id.desc())
        result = await db.execute(statement)
        return result.scalars().all()

referral = CRUDReferral(Referral)
