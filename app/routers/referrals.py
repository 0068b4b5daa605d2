import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas, services
from app.db.session import get_db
from app.dependencies import get_current_user_id, get_optional_user_id, require_internal_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/code", response_model=schemas.ReferralCodeResponse)
async def get_referral_code(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Get (or lazily create) the caller's referral code and shareable link."""
    code = await services.referral_code_service.get_or_create_referral_code(db, owner_user_id=current_user_id)
    return schemas.ReferralCodeResponse(
        code=code, shareable_link=services.referral_code_service.build_shareable_link(code)
    )

@router.get("/validate/{code}", response_model=schemas.ReferralCodeValidation)
async def validate_referral_code(
    code: str,
    db: AsyncSession = Depends(get_db),
):
    """Public endpoint used by the signup page to check a referral code."""
    code_row = await services.referral_code_service.lookup_referral_code(db, code=code)
    if not code_row:
        return schemas.ReferralCodeValidation(valid=False)
    return schemas.ReferralCodeValidation(valid=True, referrer_user_id=code_row.owner_user_id)

@router.post("/", response_model=schemas.ReferralCreated, dependencies=[Depends(require_internal_service)])
async def create_referral(
    referral_in: schemas.ReferralCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a referral when a new user signs up with a code. Called by the signup flow."""
    referral_id = await services.referral_service.create_referral(
        db, code=referral_in.code, referred_user_id=referral_in.referred_user_id
    )
    return schemas.ReferralCreated(referral_id=referral_id)

@router.post("/activate", response_model=schemas.ReferralActivated, dependencies=[Depends(require_internal_service)])
async def activate_referral(
    activate_in: schemas.ReferralActivate,
    db: AsyncSession = Depends(get_db),
):
    """Activate pending referrals once the referred provider is verified. Called by account verification."""
    activated = await services.referral_service.activate_referrals(db, referred_user_id=activate_in.user_id)
    return schemas.ReferralActivated(activated=activated)

@router.post("/track-click/{referred_user_id}", response_model=schemas.ClickTracked)
async def track_profile_click(
    referred_user_id: int,
    request: Request,
    click_in: Optional[schemas.ClickTrack] = None,
    db: AsyncSession = Depends(get_db),
    current_user_id: Optional[int] = Depends(get_optional_user_id),
):
    """Track a public profile visit. Best effort: storage failures answer tracked=false."""
    click_in = click_in or schemas.ClickTrack()
    # An authenticated identity outranks whatever the client put in the body
    customer_user_id = current_user_id if current_user_id is not None else click_in.customer_user_id
    ip = request.client.host if request.client else "unknown"
    try:
        tracked = await services.click_service.record_click(
            db,
            referred_user_id=referred_user_id,
            ip=ip,
            user_agent=request.headers.get("user-agent"),
            customer_user_id=customer_user_id,
            visitor_id=click_in.visitor_id,
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to track profile click for user {referred_user_id}: {e}", exc_info=True)
        tracked = False
    return schemas.ClickTracked(tracked=tracked, referred_user_id=referred_user_id, timestamp=utcnow())

@router.get("/dashboard", response_model=schemas.ReferralDashboard)
async def get_referral_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Referral dashboard: referred providers, click stats, rewards and aggregate progress."""
    return await services.dashboard_service.get_dashboard(db, referrer_user_id=current_user_id)
