from .token import TokenPayload
from .referral import (
    ReferralCodeResponse, ReferralCodeValidation, ReferralCreate, ReferralCreated,
    ReferralActivate, ReferralActivated, ClickTrack, ClickTracked, Referral
)
from .reward import Reward, ClaimTokenIssued, ClaimRedeemed
from .dashboard import ReferralStats, TierProgress, AggregateProgress, ReferralDashboard
