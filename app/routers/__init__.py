from fastapi import APIRouter

from . import referrals
from . import rewards

api_router = APIRouter()

# Both routers share the /referrals prefix
api_router.include_router(referrals.router, prefix="/referrals", tags=["referrals"])
api_router.include_router(rewards.router, prefix="/referrals", tags=["referral rewards"])
