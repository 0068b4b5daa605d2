from . import reward_rules
from . import referral_code_service
from . import referral_service
from . import reward_engine
from . import click_service
from . import claim_service
from . import dashboard_service
from . import maintenance_service

__all__ = [
    "reward_rules",
    "referral_code_service",
    "referral_service",
    "reward_engine",
    "click_service",
    "claim_service",
    "dashboard_service",
    "maintenance_service",
]
