import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


async def expire_stale(db: AsyncSession, *, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Mark lapsed rewards and claim tokens as expired.

    Storage hygiene only: every read path already compares expiry timestamps.
    """
    now = now or utcnow()
    rewards = await crud.referral_reward.expire_stale(db, now=now)
    tokens = await crud.claim_token.expire_stale(db, now=now)
    await db.commit()
    logger.info(f"Expiry sweep at {now.isoformat()}: {rewards} reward(s), {tokens} claim token(s) expired")
    return {"rewards_expired": rewards, "claim_tokens_expired": tokens}
