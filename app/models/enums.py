from __future__ import annotations
import enum


class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class RewardType(str, enum.Enum):
    SMS_30 = "sms_30"
    FREE_NORMAL_MONTH = "free_normal_month"
    FREE_PRO_MONTH = "free_pro_month"


class RewardStatus(str, enum.Enum):
    EARNED = "earned"
    APPLIED = "applied"
    EXPIRED = "expired"


class ClaimTokenStatus(str, enum.Enum):
    PENDING = "pending"
    CLAIMED = "claimed"
    EXPIRED = "expired"


# Referrals whose profile visits still count towards rewards
TRACKED_REFERRAL_STATUSES = (ReferralStatus.ACTIVE, ReferralStatus.PENDING)
