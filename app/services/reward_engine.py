"""
Reward issuance and application.

``evaluate`` re-derives the referrer's milestones from stored clicks after
each valid click. Issuance goes through a conditional insert backed by the
partial unique indexes on referral_rewards, so running it twice, or from two
requests at once, never yields a second reward of the same kind.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models
from app.core.config import settings
from app.core.exceptions import AlreadyClaimedError, RewardExpiredError, RewardNotFoundError
from app.models.enums import RewardStatus, RewardType, TRACKED_REFERRAL_STATUSES
from app.services.reward_rules import (
    INDIVIDUAL_CLICK_THRESHOLD,
    INDIVIDUAL_REWARD_TYPE,
    INDIVIDUAL_REWARD_VALUE,
    MilestoneSummary,
    qualifies_individually,
    summarize_milestones,
)
from app.utils.dates import add_months, utcnow

logger = logging.getLogger(__name__)


def reward_expiry(now: datetime) -> datetime:
    return add_months(now, settings.REWARD_EXPIRE_MONTHS)


async def load_milestone_summary(db: AsyncSession, *, referrer_user_id: int) -> MilestoneSummary:
    referrals = await crud.referral.list_for_referrer(
        db, referrer_user_id=referrer_user_id, statuses=TRACKED_REFERRAL_STATUSES
    )
    valid_clicks = await crud.referral_click.valid_counts_by_referral(
        db, referral_ids=[referral.id for referral in referrals]
    )
    already_issued = await crud.referral_reward.get_aggregate_types(db, referrer_user_id=referrer_user_id)
    return summarize_milestones(valid_clicks, frozenset(already_issued))


async def evaluate(
    db: AsyncSession, *, referrer_user_id: int, referral_id: int, now: Optional[datetime] = None
) -> List[int]:
    """Issue any rewards the referrer has newly earned. Returns the new reward ids."""
    now = now or utcnow()
    issued: List[int] = []

    valid_clicks = await crud.referral_click.count_valid(db, referral_id=referral_id)
    if qualifies_individually(valid_clicks):
        reward_id = await crud.referral_reward.insert_if_absent(
            db,
            values={
                "referrer_user_id": referrer_user_id,
                "referral_id": referral_id,
                "reward_type": INDIVIDUAL_REWARD_TYPE,
                "reward_value": INDIVIDUAL_REWARD_VALUE,
                "clicks_required": INDIVIDUAL_CLICK_THRESHOLD,
                "clicks_achieved": valid_clicks,
                "earned_at": now,
                "expires_at": reward_expiry(now),
                "status": RewardStatus.EARNED,
                "is_aggregate": False,
            },
        )
        if reward_id:
            issued.append(reward_id)
            logger.info(
                f"Awarded {INDIVIDUAL_REWARD_TYPE.value} reward {reward_id} to user {referrer_user_id} "
                f"for referral {referral_id} at {valid_clicks} valid clicks"
            )

    summary = await load_milestone_summary(db, referrer_user_id=referrer_user_id)
    for tier in summary.due_tiers:
        reward_id = await crud.referral_reward.insert_if_absent(
            db,
            values={
                "referrer_user_id": referrer_user_id,
                "referral_id": None,
                "reward_type": tier.reward_type,
                "reward_value": tier.reward_value,
                "clicks_required": tier.clicks_required,
                "clicks_achieved": summary.qualifying_clicks,
                "earned_at": now,
                "expires_at": reward_expiry(now),
                "status": RewardStatus.EARNED,
                "is_aggregate": True,
            },
        )
        if reward_id:
            issued.append(reward_id)
            logger.info(
                f"Awarded aggregate {tier.reward_type.value} reward {reward_id} to user {referrer_user_id} "
                f"({summary.qualifying_clicks} clicks across {summary.qualifying_referrals} qualifying referrals)"
            )

    await db.commit()
    return issued


async def list_available_rewards(
    db: AsyncSession, *, referrer_user_id: int, now: Optional[datetime] = None
) -> List[models.ReferralReward]:
    return await crud.referral_reward.list_available(db, referrer_user_id=referrer_user_id, now=now or utcnow())


def ensure_reward_open(reward: models.ReferralReward, now: datetime) -> None:
    """Raise unless the reward is earned and still inside its validity window."""
    if reward.status == RewardStatus.APPLIED:
        raise AlreadyClaimedError()
    if reward.status == RewardStatus.EXPIRED or reward.expires_at <= now:
        raise RewardExpiredError()


async def apply_reward(
    db: AsyncSession, *, referrer_user_id: int, reward_id: int, now: Optional[datetime] = None
) -> models.ReferralReward:
    """
    Mark an aggregate (free month) reward as applied.

    The plan change itself belongs to the billing service. SMS rewards are only
    applied through claim-token redemption, which also grants the credit.
    """
    now = now or utcnow()
    reward = await crud.referral_reward.get_for_referrer(db, reward_id=reward_id, referrer_user_id=referrer_user_id)
    if not reward or reward.reward_type == RewardType.SMS_30:
        raise RewardNotFoundError()
    ensure_reward_open(reward, now)

    if not await crud.referral_reward.mark_applied(db, reward_id=reward_id, now=now):
        await db.rollback()
        await db.refresh(reward)
        ensure_reward_open(reward, now)
        raise AlreadyClaimedError()

    await db.commit()
    await db.refresh(reward)
    logger.info(f"Applied {reward.reward_type.value} reward {reward_id} for user {referrer_user_id}")
    return reward
