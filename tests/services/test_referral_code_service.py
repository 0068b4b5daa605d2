"""
Tests for share-code issuance and lookup
"""
import pytest

from app import crud
from app.services import referral_code_service
from app.services.referral_code_service import (
    CODE_ALPHABET,
    CODE_LENGTH,
    build_shareable_link,
    get_or_create_referral_code,
    lookup_referral_code,
)


class TestGetOrCreateReferralCode:
    """Lazy code issuance"""

    @pytest.mark.asyncio
    async def test_first_call_issues_code(self, db):
        """A new owner receives an 8 character code from the alphabet"""
        code = await get_or_create_referral_code(db, owner_user_id=7)

        assert len(code) == CODE_LENGTH
        assert all(ch in CODE_ALPHABET for ch in code)

    @pytest.mark.asyncio
    async def test_repeated_calls_return_same_code(self, db):
        """Issuance is idempotent per owner"""
        first = await get_or_create_referral_code(db, owner_user_id=7)
        second = await get_or_create_referral_code(db, owner_user_id=7)

        assert first == second
        assert len(await crud.referral_code.get_multi(db)) == 1

    @pytest.mark.asyncio
    async def test_collision_retries_with_fresh_code(self, db, monkeypatch):
        """A code owned by someone else is never handed out twice"""
        taken = await get_or_create_referral_code(db, owner_user_id=1)
        candidates = iter([taken, "FRESH123"])
        monkeypatch.setattr(referral_code_service, "generate_referral_code", lambda: next(candidates))

        code = await get_or_create_referral_code(db, owner_user_id=2)

        assert code == "FRESH123"
        assert (await crud.referral_code.get_by_code(db, code=taken)).owner_user_id == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_collisions(self, db, monkeypatch):
        """Persistent collisions surface as an error instead of looping forever"""
        taken = await get_or_create_referral_code(db, owner_user_id=1)
        monkeypatch.setattr(referral_code_service, "generate_referral_code", lambda: taken)

        with pytest.raises(RuntimeError):
            await get_or_create_referral_code(db, owner_user_id=2)


class TestLookupReferralCode:
    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive(self, db):
        """Codes typed in lowercase still resolve"""
        code = await get_or_create_referral_code(db, owner_user_id=3)

        code_row = await lookup_referral_code(db, code=f"  {code.lower()} ")

        assert code_row.owner_user_id == 3

    @pytest.mark.asyncio
    async def test_unknown_and_empty_codes(self, db):
        assert await lookup_referral_code(db, code="NOPE0000") is None
        assert await lookup_referral_code(db, code="   ") is None


def test_shareable_link_points_at_signup():
    """Link format used by the provider dashboard"""
    assert build_shareable_link("ABCD1234") == "https://marketplace.test/signup?ref=ABCD1234"
