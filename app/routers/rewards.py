from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas, services
from app.db.session import get_db
from app.dependencies import get_current_user_id

router = APIRouter()

@router.get("/rewards", response_model=List[schemas.Reward])
async def list_available_rewards(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Earned rewards that have not expired yet."""
    return await services.reward_engine.list_available_rewards(db, referrer_user_id=current_user_id)

@router.post("/rewards/{reward_id}/apply", response_model=schemas.Reward)
async def apply_reward(
    reward_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Apply an earned free-month reward. The plan change is carried out by billing."""
    return await services.reward_engine.apply_reward(
        db, referrer_user_id=current_user_id, reward_id=reward_id
    )

@router.post("/rewards/{reward_id}/claim-token", response_model=schemas.ClaimTokenIssued)
async def issue_claim_token(
    reward_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Issue a one-time token that converts an SMS reward into SMS credit."""
    claim_token = await services.claim_service.issue_claim_token(
        db, referrer_user_id=current_user_id, reward_id=reward_id
    )
    return schemas.ClaimTokenIssued(
        token=claim_token.token,
        reward_id=claim_token.reward_id,
        expires_at=claim_token.expires_at,
        claim_url=services.claim_service.build_claim_url(claim_token.token),
    )

@router.post("/claim-sms/{token}", response_model=schemas.ClaimRedeemed)
async def redeem_claim_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Public endpoint behind the claim link; the token itself is the credential."""
    grant = await services.claim_service.redeem_claim_token(db, token=token)
    return schemas.ClaimRedeemed(sms_added=grant.amount, expires_at=grant.expires_at)
