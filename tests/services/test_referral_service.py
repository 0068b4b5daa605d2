"""
Tests for referral creation and activation
"""
import pytest

from app import crud
from app.core.exceptions import InvalidReferralCodeError
from app.models.enums import ReferralStatus
from app.services.referral_code_service import get_or_create_referral_code
from app.services.referral_service import activate_referrals, create_referral, list_referrals


class TestCreateReferral:
    """Signup with a referral code"""

    @pytest.mark.asyncio
    async def test_creates_pending_referral(self, db):
        """A new referral starts pending and keeps the code used"""
        code = await get_or_create_referral_code(db, owner_user_id=10)

        referral_id = await create_referral(db, code=code, referred_user_id=20)

        referral = await crud.referral.get(db, id=referral_id)
        assert referral.referrer_user_id == 10
        assert referral.referred_user_id == 20
        assert referral.status == ReferralStatus.PENDING
        assert referral.code == code

    @pytest.mark.asyncio
    async def test_repeat_signup_returns_existing_referral(self, db):
        """Pair (referrer, referred) is unique"""
        code = await get_or_create_referral_code(db, owner_user_id=10)

        first = await create_referral(db, code=code, referred_user_id=20)
        second = await create_referral(db, code=code.lower(), referred_user_id=20)

        assert first == second
        assert len(await list_referrals(db, referrer_user_id=10)) == 1

    @pytest.mark.asyncio
    async def test_unknown_code_is_rejected(self, db):
        """INVALID_CODE and no row written"""
        with pytest.raises(InvalidReferralCodeError) as exc_info:
            await create_referral(db, code="ZZZZ9999", referred_user_id=20)

        assert exc_info.value.code == "INVALID_CODE"
        assert await crud.referral.get_multi(db) == []


class TestActivateReferrals:
    @pytest.mark.asyncio
    async def test_activation_moves_pending_to_active(self, db, fixed_now):
        code = await get_or_create_referral_code(db, owner_user_id=10)
        referral_id = await create_referral(db, code=code, referred_user_id=20)

        activated = await activate_referrals(db, referred_user_id=20, now=fixed_now)

        referral = await crud.referral.get(db, id=referral_id)
        await db.refresh(referral)
        assert activated == 1
        assert referral.status == ReferralStatus.ACTIVE
        assert referral.activated_at == fixed_now

    @pytest.mark.asyncio
    async def test_activation_without_pending_is_a_no_op(self, db, make_referral):
        """Already active or inactive referrals are left alone"""
        await make_referral(10, 20, status=ReferralStatus.INACTIVE)

        assert await activate_referrals(db, referred_user_id=20) == 0
        assert await activate_referrals(db, referred_user_id=99) == 0
