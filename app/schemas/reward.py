from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.models.enums import RewardStatus, RewardType


class Reward(BaseModel):
    id: int
    referrer_user_id: int
    referral_id: Optional[int] = None
    reward_type: RewardType
    reward_value: int
    clicks_required: int
    clicks_achieved: int
    earned_at: datetime
    applied_at: Optional[datetime] = None
    expires_at: datetime
    status: RewardStatus
    is_aggregate: bool

    model_config = ConfigDict(from_attributes=True)


class ClaimTokenIssued(BaseModel):
    token: str
    reward_id: int
    expires_at: datetime
    claim_url: str


class ClaimRedeemed(BaseModel):
    success: bool = True
    sms_added: int
    expires_at: datetime
