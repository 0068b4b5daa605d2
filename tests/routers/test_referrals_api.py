"""
HTTP tests for the referral endpoints
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app import crud
from app.models.enums import ReferralStatus

API = "/api/v1/referrals"


class TestReferralCodeEndpoints:
    @pytest.mark.asyncio
    async def test_code_requires_authentication(self, client):
        response = await client.get(f"{API}/code")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_code_is_stable_and_validates(self, client, auth_headers):
        """GET /code twice returns the same code, which /validate accepts"""
        first = await client.get(f"{API}/code", headers=auth_headers(1))
        second = await client.get(f"{API}/code", headers=auth_headers(1))

        assert first.status_code == 200
        body = first.json()
        assert body == second.json()
        assert body["shareable_link"] == f"https://marketplace.test/signup?ref={body['code']}"

        validation = await client.get(f"{API}/validate/{body['code'].lower()}")
        assert validation.json() == {"valid": True, "referrer_user_id": 1}

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_valid(self, client):
        response = await client.get(f"{API}/validate/NOPE0000")

        assert response.status_code == 200
        assert response.json()["valid"] is False

    @pytest.mark.asyncio
    async def test_garbage_token_is_rejected(self, client):
        response = await client.get(f"{API}/code", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestInternalEndpoints:
    """Signup and verification hooks"""

    @pytest.mark.asyncio
    async def test_create_requires_internal_key(self, client):
        response = await client.post(f"{API}/", json={"code": "ABCD1234", "referred_user_id": 2})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_and_activate(self, client, auth_headers, internal_headers, db):
        code = (await client.get(f"{API}/code", headers=auth_headers(1))).json()["code"]

        created = await client.post(
            f"{API}/", json={"code": code, "referred_user_id": 2}, headers=internal_headers
        )
        again = await client.post(
            f"{API}/", json={"code": code, "referred_user_id": 2}, headers=internal_headers
        )
        assert created.status_code == 200
        assert created.json() == again.json()

        activated = await client.post(f"{API}/activate", json={"user_id": 2}, headers=internal_headers)
        assert activated.json() == {"activated": 1}

        referral = await crud.referral.get(db, id=created.json()["referral_id"])
        assert referral.status == ReferralStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_invalid_code_maps_to_400(self, client, internal_headers):
        response = await client.post(
            f"{API}/", json={"code": "ZZZZ9999", "referred_user_id": 2}, headers=internal_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CODE"


class TestTrackClick:
    @pytest.mark.asyncio
    async def test_anonymous_click_with_visitor_id(self, client, make_referral):
        await make_referral(1, 2)

        response = await client.post(f"{API}/track-click/2", json={"visitor_id": "anon-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["tracked"] is True
        assert body["referred_user_id"] == 2
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_click_without_identity_is_not_tracked(self, client, make_referral):
        await make_referral(1, 2)

        response = await client.post(f"{API}/track-click/2")

        assert response.status_code == 200
        assert response.json()["tracked"] is False

    @pytest.mark.asyncio
    async def test_authenticated_customer_is_rate_limited(self, client, make_referral, auth_headers):
        """The bearer identity is used for the cooldown"""
        await make_referral(1, 2)

        first = await client.post(f"{API}/track-click/2", headers=auth_headers(500))
        second = await client.post(f"{API}/track-click/2", headers=auth_headers(500))

        assert first.json()["tracked"] is True
        assert second.json()["tracked"] is False

    @pytest.mark.asyncio
    async def test_storage_failure_answers_not_tracked(self, client, make_referral, monkeypatch):
        """A failing click insert never breaks the profile page"""
        await make_referral(1, 2)

        async def failing_create(*args, **kwargs):
            raise SQLAlchemyError("database unavailable")

        monkeypatch.setattr(crud.referral_click, "create", failing_create)

        response = await client.post(f"{API}/track-click/2", json={"visitor_id": "anon-1"})

        assert response.status_code == 200
        assert response.json()["tracked"] is False
        assert response.json()["referred_user_id"] == 2


class TestDashboard:
    @pytest.mark.asyncio
    async def test_dashboard_lists_referrals(self, client, make_referral, auth_headers):
        await make_referral(1, 2)
        await client.post(f"{API}/track-click/2", json={"visitor_id": "anon-1"})

        response = await client.get(f"{API}/dashboard", headers=auth_headers(1))

        assert response.status_code == 200
        body = response.json()
        assert body["referrals"][0]["referred_user_id"] == 2
        assert body["referrals"][0]["valid_clicks"] == 1
        assert body["aggregate_progress"]["next_tier"]["reward_type"] == "free_normal_month"
