"""
Profile click attribution.

Every attributable visit to a referred provider's profile is stored, valid or
not, so the audit trail shows rejected traffic too. A click is valid when the
referral is under its monthly cap and the same visitor has not produced a
valid click on that referral within the cooldown window. Both limits are
scoped to the referral: one visitor can count for several providers.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.core.config import settings
from app.services import reward_engine
from app.utils.dates import month_bucket, utcnow

logger = logging.getLogger(__name__)

MONTHLY_VALID_CLICK_CAP = 25
CLICK_COOLDOWN = timedelta(minutes=5)


async def record_click(
    db: AsyncSession,
    *,
    referred_user_id: int,
    ip: str,
    user_agent: Optional[str] = None,
    customer_user_id: Optional[int] = None,
    visitor_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Validate and store one profile visit. Returns whether it counted.

    Visits to providers without an active or pending referral are not
    attributable: nothing is stored and the visit is reported as valid.
    A visit without any identity is rejected without being stored.
    """
    now = now or utcnow()
    visitor_id = visitor_id.strip() if visitor_id else None

    # Row lock keeps the cap check and the insert consistent per referral on PostgreSQL
    referral = await crud.referral.get_tracked_for_referred(db, referred_user_id=referred_user_id, lock=True)
    if not referral:
        logger.debug(f"No tracked referral for user {referred_user_id}; visit not attributed")
        return True

    referral_id = referral.id
    referrer_user_id = referral.referrer_user_id

    if customer_user_id is None and not visitor_id:
        await db.rollback()
        logger.warning(f"Click on referral {referral_id} rejected: no customer or visitor identity supplied")
        return False

    month_year = month_bucket(now)
    monthly_clicks = await crud.referral_click.count_valid_in_month(
        db, referral_id=referral_id, month_year=month_year
    )
    cap_ok = monthly_clicks < MONTHLY_VALID_CLICK_CAP

    recent_clicks = await crud.referral_click.count_recent_from_identity(
        db,
        referral_id=referral_id,
        since=now - CLICK_COOLDOWN,
        customer_user_id=customer_user_id,
        visitor_id=visitor_id,
    )
    cooldown_ok = recent_clicks < 1

    self_click = (
        settings.REFERRAL_BLOCK_SELF_CLICKS
        and customer_user_id is not None
        and customer_user_id in (referrer_user_id, referral.referred_user_id)
    )

    is_valid = cap_ok and cooldown_ok and not self_click

    await crud.referral_click.create(
        db,
        referral_id=referral_id,
        customer_user_id=customer_user_id,
        visitor_id=visitor_id,
        ip=ip,
        user_agent=user_agent,
        clicked_at=now,
        is_valid=is_valid,
        month_year=month_year,
    )
    await db.commit()

    logger.info(
        f"Click on referral {referral_id} recorded: valid={is_valid} "
        f"(monthly {monthly_clicks}/{MONTHLY_VALID_CLICK_CAP}, cooldown_ok={cooldown_ok}, self_click={self_click})"
    )

    if is_valid:
        try:
            await reward_engine.evaluate(
                db, referrer_user_id=referrer_user_id, referral_id=referral_id, now=now
            )
        except Exception as e:
            await db.rollback()
            logger.error(
                f"Reward evaluation failed for referrer {referrer_user_id}, referral {referral_id}: {e}",
                exc_info=True,
            )

    return is_valid
