import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models
from app.core.exceptions import InvalidReferralCodeError
from app.models.enums import ReferralStatus
from app.services.referral_code_service import lookup_referral_code
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


async def create_referral(db: AsyncSession, *, code: str, referred_user_id: int) -> int:
    """
    Record that ``referred_user_id`` signed up with ``code``.

    Idempotent per (referrer, referred) pair: a repeated call returns the id of
    the existing referral.
    """
    code_row = await lookup_referral_code(db, code=code)
    if not code_row:
        logger.warning(f"Referral creation rejected for user {referred_user_id}: unknown code '{code}'")
        raise InvalidReferralCodeError()

    referrer_user_id = code_row.owner_user_id
    existing = await crud.referral.get_by_pair(
        db, referrer_user_id=referrer_user_id, referred_user_id=referred_user_id
    )
    if existing:
        return existing.id

    referral_id = await crud.referral.insert_if_absent(
        db,
        values={
            "referrer_user_id": referrer_user_id,
            "referred_user_id": referred_user_id,
            "code": code_row.code,
            "status": ReferralStatus.PENDING,
        },
    )
    await db.commit()

    if referral_id is None:
        # Lost the race to a concurrent signup call for the same pair
        existing = await crud.referral.get_by_pair(
            db, referrer_user_id=referrer_user_id, referred_user_id=referred_user_id
        )
        return existing.id

    logger.info(f"Created referral {referral_id} ({referrer_user_id} -> {referred_user_id}) with code {code_row.code}")
    return referral_id


async def activate_referrals(
    db: AsyncSession, *, referred_user_id: int, now: Optional[datetime] = None
) -> int:
    """Move the user's pending referrals to active. Returns how many changed."""
    activated = await crud.referral.activate_pending(db, referred_user_id=referred_user_id, now=now or utcnow())
    await db.commit()
    if activated:
        logger.info(f"Activated {activated} referral(s) for referred user {referred_user_id}")
    return activated


async def list_referrals(db: AsyncSession, *, referrer_user_id: int) -> List[models.Referral]:
    return await crud.referral.list_for_referrer(db, referrer_user_id=referrer_user_id)
