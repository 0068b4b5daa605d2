"""
Tests for the expiry sweep
"""
import pytest
from datetime import timedelta

from app import crud
from app.models.enums import ClaimTokenStatus, RewardStatus
from app.services.claim_service import issue_claim_token
from app.services.maintenance_service import expire_stale
from app.services.reward_engine import evaluate


class TestExpireStale:
    @pytest.mark.asyncio
    async def test_sweep_marks_lapsed_rows_only(self, db, make_referral, seed_valid_clicks, fixed_now):
        """Lapsed tokens and rewards flip to expired, fresh ones are untouched"""
        referral = await make_referral(1, 2)
        await seed_valid_clicks(referral.id, 50)
        await evaluate(db, referrer_user_id=1, referral_id=referral.id, now=fixed_now)

        reward = (await crud.referral_reward.list_for_referrer(db, referrer_user_id=1))[0]
        claim_token = await issue_claim_token(db, referrer_user_id=1, reward_id=reward.id, now=fixed_now)

        early = await expire_stale(db, now=fixed_now + timedelta(days=1))
        assert early == {"rewards_expired": 0, "claim_tokens_expired": 0}

        after_token = await expire_stale(db, now=fixed_now + timedelta(days=8))
        assert after_token == {"rewards_expired": 0, "claim_tokens_expired": 1}

        after_reward = await expire_stale(db, now=fixed_now + timedelta(days=200))
        assert after_reward == {"rewards_expired": 1, "claim_tokens_expired": 0}

        await db.refresh(reward)
        await db.refresh(claim_token)
        assert reward.status == RewardStatus.EXPIRED
        assert claim_token.status == ClaimTokenStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_sweep_on_empty_database(self, db, fixed_now):
        assert await expire_stale(db, now=fixed_now) == {"rewards_expired": 0, "claim_tokens_expired": 0}
