from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.credit import SmsCreditGrant


async def create_grant(
    db: AsyncSession,
    *,
    user_id: int,
    reward_id: int,
    claim_token_id: int,
    amount: int,
    expires_at: datetime,
) -> SmsCreditGrant:
    """Record an SMS allowance for the user. Does not commit."""
    db_obj = SmsCreditGrant(
        user_id=user_id,
        reward_id=reward_id,
        claim_token_id=claim_token_id,
        amount=amount,
        expires_at=expires_at,
    )
    db.add(db_obj)
    await db.flush()
    return db_obj


async def get_grants_for_user(db: AsyncSession, *, user_id: int) -> List[SmsCreditGrant]:
    statement = select(SmsCreditGrant).where(SmsCreditGrant.user_id == user_id).order_by(SmsCreditGrant.granted_at)
    result = await db.execute(statement)
    return result.scalars().all()
