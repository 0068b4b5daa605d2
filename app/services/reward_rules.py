"""
Reward milestone rules.

Pure functions over a snapshot of a referrer's referrals and their valid click
counts. Nothing here touches the database, so the milestone arithmetic can be
tested on its own and re-run any number of times with the same answer.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from app.models.enums import RewardType

# A referral "qualifies" once its own valid clicks reach this threshold,
# which is also the trigger for the per-referral SMS reward.
INDIVIDUAL_CLICK_THRESHOLD = 50
INDIVIDUAL_REWARD_TYPE = RewardType.SMS_30
INDIVIDUAL_REWARD_VALUE = 30


@dataclass(frozen=True)
class AggregateTier:
    """Aggregate milestone over all qualifying referrals of one referrer"""
    reward_type: RewardType
    clicks_required: int
    referrals_required: int
    reward_value: int  # months of the plan


# Ascending order matters: lower tiers are issued first
AGGREGATE_TIERS = (
    AggregateTier(RewardType.FREE_NORMAL_MONTH, clicks_required=250, referrals_required=5, reward_value=1),
    AggregateTier(RewardType.FREE_PRO_MONTH, clicks_required=500, referrals_required=10, reward_value=1),
)


@dataclass
class MilestoneSummary:
    """Qualifying set of a referrer, derived from valid click counts"""
    qualifying_referral_ids: FrozenSet[int]
    qualifying_clicks: int
    qualifying_referrals: int
    due_tiers: List[AggregateTier] = field(default_factory=list)
    next_tier: Optional[AggregateTier] = None


def qualifies_individually(valid_clicks: int) -> bool:
    return valid_clicks >= INDIVIDUAL_CLICK_THRESHOLD


def tier_reached(tier: AggregateTier, qualifying_clicks: int, qualifying_referrals: int) -> bool:
    return qualifying_clicks >= tier.clicks_required and qualifying_referrals >= tier.referrals_required


def summarize_milestones(
    valid_clicks_by_referral: Dict[int, int],
    already_issued: FrozenSet[RewardType] = frozenset(),
) -> MilestoneSummary:
    """
    Compute the qualifying set and the aggregate tiers now due.

    ``valid_clicks_by_referral`` maps each of the referrer's tracked referrals
    (active or pending) to its all-time valid click count. Only qualifying
    referrals contribute to the click total, so clicks on a referral stuck at 49
    never count towards a free month.

    ``due_tiers`` lists reached tiers whose reward type is not in
    ``already_issued``, lowest first. ``next_tier`` is the lowest tier not yet
    reached, for progress display.
    """
    qualifying = {
        referral_id: clicks
        for referral_id, clicks in valid_clicks_by_referral.items()
        if qualifies_individually(clicks)
    }
    qualifying_clicks = sum(qualifying.values())
    qualifying_referrals = len(qualifying)

    due_tiers = []
    next_tier = None
    for tier in AGGREGATE_TIERS:
        if tier_reached(tier, qualifying_clicks, qualifying_referrals):
            if tier.reward_type not in already_issued:
                due_tiers.append(tier)
        elif next_tier is None:
            next_tier = tier

    return MilestoneSummary(
        qualifying_referral_ids=frozenset(qualifying),
        qualifying_clicks=qualifying_clicks,
        qualifying_referrals=qualifying_referrals,
        due_tiers=due_tiers,
        next_tier=next_tier,
    )
