from pydantic import BaseModel
from typing import List, Optional

from app.models.enums import ReferralStatus, RewardType
from .reward import Reward


class ReferralStats(BaseModel):
    referral_id: int
    referred_user_id: int
    status: ReferralStatus
    total_clicks: int
    valid_clicks: int
    monthly_clicks: int
    qualifies: bool


class TierProgress(BaseModel):
    reward_type: RewardType
    clicks_required: int
    referrals_required: int


class AggregateProgress(BaseModel):
    qualifying_referrals: int
    qualifying_clicks: int
    next_tier: Optional[TierProgress] = None


class ReferralDashboard(BaseModel):
    code: str
    shareable_link: str
    month_year: str
    referrals: List[ReferralStats]
    rewards: List[Reward]
    aggregate_progress: AggregateProgress
