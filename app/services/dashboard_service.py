from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.models.enums import TRACKED_REFERRAL_STATUSES
from app.services.referral_code_service import build_shareable_link, get_or_create_referral_code
from app.services.reward_rules import qualifies_individually, summarize_milestones
from app.utils.dates import month_bucket, utcnow


async def get_dashboard(
    db: AsyncSession, *, referrer_user_id: int, now: Optional[datetime] = None
) -> schemas.ReferralDashboard:
    """Read-only projection of a referrer's referrals, click stats and rewards."""
    now = now or utcnow()
    month_year = month_bucket(now)

    code = await get_or_create_referral_code(db, owner_user_id=referrer_user_id)
    referrals = await crud.referral.list_for_referrer(db, referrer_user_id=referrer_user_id)
    stats = await crud.referral_click.stats_by_referral(
        db, referral_ids=[referral.id for referral in referrals], month_year=month_year
    )
    rewards = await crud.referral_reward.list_for_referrer(db, referrer_user_id=referrer_user_id)

    referral_stats = []
    for referral in referrals:
        counts = stats[referral.id]
        referral_stats.append(
            schemas.ReferralStats(
                referral_id=referral.id,
                referred_user_id=referral.referred_user_id,
                status=referral.status,
                qualifies=qualifies_individually(counts["valid_clicks"]),
                **counts,
            )
        )

    # Same arithmetic the reward engine uses, restricted to tracked referrals
    summary = summarize_milestones(
        {
            referral.id: stats[referral.id]["valid_clicks"]
            for referral in referrals
            if referral.status in TRACKED_REFERRAL_STATUSES
        }
    )
    next_tier = None
    if summary.next_tier:
        next_tier = schemas.TierProgress(
            reward_type=summary.next_tier.reward_type,
            clicks_required=summary.next_tier.clicks_required,
            referrals_required=summary.next_tier.referrals_required,
        )

    return schemas.ReferralDashboard(
        code=code,
        shareable_link=build_shareable_link(code),
        month_year=month_year,
        referrals=referral_stats,
        rewards=[schemas.Reward.model_validate(reward) for reward in rewards],
        aggregate_progress=schemas.AggregateProgress(
            qualifying_referrals=summary.qualifying_referrals,
            qualifying_clicks=summary.qualifying_clicks,
            next_tier=next_tier,
        ),
    )
