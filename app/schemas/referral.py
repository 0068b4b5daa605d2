from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.models.enums import ReferralStatus


class ReferralCodeResponse(BaseModel):
    code: str
    shareable_link: str


class ReferralCodeValidation(BaseModel):
    valid: bool
    referrer_user_id: Optional[int] = None


class ReferralCreate(BaseModel):
    code: str = Field(min_length=1)
    referred_user_id: int


class ReferralCreated(BaseModel):
    referral_id: int


class ReferralActivate(BaseModel):
    user_id: int


class ReferralActivated(BaseModel):
    activated: int


class ClickTrack(BaseModel):
    customer_user_id: Optional[int] = None
    # Client-generated anonymous id persisted in the browser; a soft signal only
    visitor_id: Optional[str] = Field(default=None, max_length=128)


class ClickTracked(BaseModel):
    tracked: bool
    referred_user_id: int
    timestamp: datetime


class Referral(BaseModel):
    id: int
    referrer_user_id: int
    referred_user_id: int
    code: str
    status: ReferralStatus
    created_at: datetime
    activated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
