"""
One-time claim tokens for SMS rewards.

Redemption is a single transaction: the token flips pending -> claimed and the
reward earned -> applied through compare-and-swap updates, and the SMS credit
row is written alongside. If either swap finds the row already moved, the
transaction is rolled back and nothing is granted.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models
from app.core.config import settings
from app.core.exceptions import (
    AlreadyClaimedError,
    ExpiredClaimTokenError,
    InvalidClaimTokenError,
    RewardNotFoundError,
)
from app.models.enums import ClaimTokenStatus, RewardType
from app.services.reward_engine import ensure_reward_open
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

# 24 random bytes -> 32 url-safe characters
CLAIM_TOKEN_BYTES = 24


def build_claim_url(token: str) -> str:
    return f"{settings.MARKETPLACE_URL.rstrip('/')}/claim-sms/{token}"


async def issue_claim_token(
    db: AsyncSession, *, referrer_user_id: int, reward_id: int, now: Optional[datetime] = None
) -> models.ClaimToken:
    """
    Issue a claim token for one of the caller's earned SMS rewards.

    A still-valid pending token for the same reward is handed back instead of
    minting another one.
    """
    now = now or utcnow()
    reward = await crud.referral_reward.get_for_referrer(db, reward_id=reward_id, referrer_user_id=referrer_user_id)
    if not reward or reward.reward_type != RewardType.SMS_30:
        logger.warning(f"Claim token refused for user {referrer_user_id}: reward {reward_id} not claimable")
        raise RewardNotFoundError()
    ensure_reward_open(reward, now)

    live_token = await crud.claim_token.get_live_for_reward(db, reward_id=reward_id, now=now)
    if live_token:
        return live_token

    claim_token = await crud.claim_token.create(
        db,
        reward_id=reward_id,
        referrer_user_id=referrer_user_id,
        token=secrets.token_urlsafe(CLAIM_TOKEN_BYTES),
        expires_at=now + timedelta(days=settings.CLAIM_TOKEN_EXPIRE_DAYS),
    )
    await db.commit()
    logger.info(f"Issued claim token {claim_token.id} for reward {reward_id} (user {referrer_user_id})")
    return claim_token


async def redeem_claim_token(
    db: AsyncSession, *, token: str, now: Optional[datetime] = None
) -> models.SmsCreditGrant:
    """Convert a pending claim token into SMS credit for the reward's owner."""
    now = now or utcnow()
    claim_token = await crud.claim_token.get_by_token(db, token=token)
    if not claim_token:
        raise InvalidClaimTokenError()
    if claim_token.status == ClaimTokenStatus.CLAIMED:
        raise AlreadyClaimedError()
    if claim_token.status == ClaimTokenStatus.EXPIRED:
        raise ExpiredClaimTokenError()
    if claim_token.expires_at <= now:
        await crud.claim_token.mark_expired(db, token_id=claim_token.id)
        await db.commit()
        raise ExpiredClaimTokenError()

    token_id = claim_token.id
    reward_id = claim_token.reward_id
    user_id = claim_token.referrer_user_id

    reward = await crud.referral_reward.get(db, id=reward_id)
    if not reward:
        raise InvalidClaimTokenError()
    try:
        if not await crud.claim_token.mark_claimed(db, token_id=token_id, now=now):
            await db.rollback()
            logger.warning(f"Claim token {token_id} lost a concurrent redemption")
            raise AlreadyClaimedError()

        if not await crud.referral_reward.mark_applied(db, reward_id=reward_id, now=now):
            await db.rollback()
            await db.refresh(reward)
            ensure_reward_open(reward, now)
            raise AlreadyClaimedError()

        grant = await crud.crud_sms_credit.create_grant(
            db,
            user_id=user_id,
            reward_id=reward_id,
            claim_token_id=token_id,
            amount=reward.reward_value,
            expires_at=now + timedelta(days=settings.SMS_CREDIT_EXPIRE_DAYS),
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Reward {reward_id} already converted to SMS credit")
        raise AlreadyClaimedError()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Redemption of claim token {token_id} failed: {e}", exc_info=True)
        raise

    logger.info(f"Redeemed claim token {token_id}: granted {grant.amount} SMS to user {user_id} (reward {reward_id})")
    return grant
