"""
Tests for the referrer dashboard projection
"""
import pytest
from datetime import timedelta

from app.models.enums import RewardType
from app.services.click_service import record_click
from app.services.dashboard_service import get_dashboard
from app.services.referral_code_service import get_or_create_referral_code


class TestGetDashboard:
    @pytest.mark.asyncio
    async def test_empty_dashboard_issues_code(self, db, fixed_now):
        """A referrer without referrals still gets a code and link"""
        dashboard = await get_dashboard(db, referrer_user_id=1, now=fixed_now)

        assert dashboard.code == await get_or_create_referral_code(db, owner_user_id=1)
        assert dashboard.shareable_link.endswith(f"?ref={dashboard.code}")
        assert dashboard.month_year == "2025-11"
        assert dashboard.referrals == []
        assert dashboard.rewards == []
        assert dashboard.aggregate_progress.next_tier.reward_type == RewardType.FREE_NORMAL_MONTH

    @pytest.mark.asyncio
    async def test_click_stats_per_referral(self, db, make_referral, seed_valid_clicks, fixed_now):
        """Totals include invalid clicks, valid and monthly counts do not"""
        referral = await make_referral(1, 2)
        await seed_valid_clicks(referral.id, 48)
        await record_click(db, referred_user_id=2, ip="1.2.3.4", customer_user_id=9, now=fixed_now)
        await record_click(
            db, referred_user_id=2, ip="1.2.3.4", customer_user_id=9, now=fixed_now + timedelta(minutes=1)
        )
        await record_click(
            db, referred_user_id=2, ip="1.2.3.4", customer_user_id=10, now=fixed_now + timedelta(minutes=2)
        )

        dashboard = await get_dashboard(db, referrer_user_id=1, now=fixed_now)

        stats = dashboard.referrals[0]
        assert stats.referral_id == referral.id
        assert stats.total_clicks == 51
        assert stats.valid_clicks == 50
        assert stats.monthly_clicks == 2
        assert stats.qualifies is True
        assert [reward.reward_type for reward in dashboard.rewards] == [RewardType.SMS_30]
        assert dashboard.aggregate_progress.qualifying_referrals == 1
        assert dashboard.aggregate_progress.qualifying_clicks == 50
