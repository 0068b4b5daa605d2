from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.enums import ClaimTokenStatus
from app.models.reward import ClaimToken


class CRUDClaimToken(CRUDBase[ClaimToken]):
    async def get_by_token(self, db: AsyncSession, *, token: str) -> Optional[ClaimToken]:
        statement = select(self.model).where(self.model.token == token)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_live_for_reward(
        self, db: AsyncSession, *, reward_id: int, now: datetime
    ) -> Optional[ClaimToken]:
        """A pending, unexpired token already issued for the reward, if any."""
        statement = (
            select(self.model)
            .where(
                self.model.reward_id == reward_id,
                self.model.status == ClaimTokenStatus.PENDING,
                self.model.expires_at > now,
            )
            .order_by(self.model.expires_at.desc())
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def create(
        self, db: AsyncSession, *, reward_id: int, referrer_user_id: int, token: str, expires_at: datetime
    ) -> ClaimToken:
        db_obj = self.model(
            reward_id=reward_id,
            referrer_user_id=referrer_user_id,
            token=token,
            status=ClaimTokenStatus.PENDING,
            expires_at=expires_at,
        )
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def mark_claimed(self, db: AsyncSession, *, token_id: int, now: datetime) -> bool:
        """
        Compare-and-swap pending -> claimed on an unexpired token.

        Exactly one concurrent caller sees True. Does not commit.
        """
        statement = (
            update(self.model)
            .where(
                self.model.id == token_id,
                self.model.status == ClaimTokenStatus.PENDING,
                self.model.expires_at > now,
            )
            .values(status=ClaimTokenStatus.CLAIMED, claimed_at=now)
        )
        result = await db.execute(statement)
        return result.rowcount == 1

    async def mark_expired(self, db: AsyncSession, *, token_id: int) -> bool:
        statement = (
            update(self.model)
            .where(self.model.id == token_id, self.model.status == ClaimTokenStatus.PENDING)
            .values(status=ClaimTokenStatus.EXPIRED)
        )
        result = await db.execute(statement)
        return result.rowcount == 1

    async def expire_stale(self, db: AsyncSession, *, now: datetime) -> int:
        statement = (
            update(self.model)
            .where(self.model.status == ClaimTokenStatus.PENDING, self.model.expires_at <= now)
            .values(status=ClaimTokenStatus.EXPIRED)
        )
        result = await db.execute(statement)
        return result.rowcount

claim_token = CRUDClaimToken(ClaimToken)
