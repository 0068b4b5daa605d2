# Import individual CRUD modules so they can be accessed via the package
from . import crud_sms_credit # noqa
from .crud_referral_code import referral_code
from .crud_referral import referral
from .crud_referral_click import referral_click
from .crud_referral_reward import referral_reward
from .crud_claim_token import claim_token

__all__ = [
    "crud_sms_credit",
    "referral_code",
    "referral",
    "referral_click",
    "referral_reward",
    "claim_token",
]
