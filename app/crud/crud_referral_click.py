from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.referral import ReferralClick


class CRUDReferralClick(CRUDBase[ReferralClick]):
    async def create(self, db: AsyncSession, **fields) -> ReferralClick:
        """Append a click row. Does not commit."""
        db_obj = self.model(**fields)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def count_valid_in_month(self, db: AsyncSession, *, referral_id: int, month_year: str) -> int:
        statement = select(func.count(self.model.id)).where(
            self.model.referral_id == referral_id,
            self.model.month_year == month_year,
            self.model.is_valid.is_(True),
        )
        result = await db.execute(statement)
        return result.scalar_one()

    async def count_recent_from_identity(
        self,
        db: AsyncSession,
        *,
        referral_id: int,
        since: datetime,
        customer_user_id: Optional[int] = None,
        visitor_id: Optional[str] = None,
    ) -> int:
        """Valid clicks by one identity against one referral after ``since``."""
        statement = select(func.count(self.model.id)).where(
            self.model.referral_id == referral_id,
            self.model.clicked_at > since,
            self.model.is_valid.is_(True),
        )
        if customer_user_id is not None:
            statement = statement.where(self.model.customer_user_id == customer_user_id)
        else:
            statement = statement.where(self.model.visitor_id == visitor_id)
        result = await db.execute(statement)
        return result.scalar_one()

    async def count_valid(self, db: AsyncSession, *, referral_id: int) -> int:
        statement = select(func.count(self.model.id)).where(
            self.model.referral_id == referral_id,
            self.model.is_valid.is_(True),
        )
        result = await db.execute(statement)
        return result.scalar_one()

    async def valid_counts_by_referral(self, db: AsyncSession, *, referral_ids: Iterable[int]) -> Dict[int, int]:
        """All-time valid click count per referral; referrals without clicks map to 0."""
        referral_ids = list(referral_ids)
        counts = {referral_id: 0 for referral_id in referral_ids}
        if not referral_ids:
            return counts
        statement = (
            select(self.model.referral_id, func.count(self.model.id))
            .where(self.model.referral_id.in_(referral_ids), self.model.is_valid.is_(True))
            .group_by(self.model.referral_id)
        )
        result = await db.execute(statement)
        for referral_id, count in result.all():
            counts[referral_id] = count
        return counts

    async def stats_by_referral(
        self, db: AsyncSession, *, referral_ids: Iterable[int], month_year: str
    ) -> Dict[int, Dict[str, int]]:
        """Total, valid and this-month valid click counts per referral."""
        referral_ids = list(referral_ids)
        stats = {
            referral_id: {"total_clicks": 0, "valid_clicks": 0, "monthly_clicks": 0}
            for referral_id in referral_ids
        }
        if not referral_ids:
            return stats
        valid_flag = case((self.model.is_valid.is_(True), 1), else_=0)
        monthly_flag = case(
            ((self.model.is_valid.is_(True)) & (self.model.month_year == month_year), 1), else_=0
        )
        statement = (
            select(
                self.model.referral_id,
                func.count(self.model.id),
                func.sum(valid_flag),
                func.sum(monthly_flag),
            )
            .where(self.model.referral_id.in_(referral_ids))
            .group_by(self.model.referral_id)
        )
        result = await db.execute(statement)
        for referral_id, total, valid, monthly in result.all():
            stats[referral_id] = {
                "total_clicks": total,
                "valid_clicks": int(valid or 0),
                "monthly_clicks": int(monthly or 0),
            }
        return stats

referral_click = CRUDReferralClick(ReferralClick)
