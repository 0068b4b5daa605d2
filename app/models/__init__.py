# Import the Base class to make it accessible for models
# and for Alembic discovery via Base.metadata
from app.db.base_class import Base  # noqa: F401

from .enums import ReferralStatus, RewardType, RewardStatus, ClaimTokenStatus
from .referral import ReferralCode, Referral, ReferralClick
from .reward import ReferralReward, ClaimToken
from .credit import SmsCreditGrant

__all__ = [
    "Base",
    "ReferralCode",
    "Referral",
    "ReferralClick",
    "ReferralReward",
    "ClaimToken",
    "SmsCreditGrant",
    "ReferralStatus",
    "RewardType",
    "RewardStatus",
    "ClaimTokenStatus",
]
