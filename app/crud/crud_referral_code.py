from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.referral import ReferralCode


class CRUDReferralCode(CRUDBase[ReferralCode]):
    async def get_by_owner(self, db: AsyncSession, *, owner_user_id: int) -> Optional[ReferralCode]:
        statement = select(self.model).where(self.model.owner_user_id == owner_user_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[ReferralCode]:
        statement = select(self.model).where(self.model.code == code)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

referral_code = CRUDReferralCode(ReferralCode)
