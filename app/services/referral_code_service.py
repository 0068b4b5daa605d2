import logging
import secrets
import string
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models
from app.core.config import settings

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10


def generate_referral_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def build_shareable_link(code: str) -> str:
    return f"{settings.MARKETPLACE_URL.rstrip('/')}/signup?ref={code}"


async def get_or_create_referral_code(db: AsyncSession, *, owner_user_id: int) -> str:
    """
    Return the owner's share code, issuing one on first use.

    The unique constraints on owner and code decide every race: a losing
    insert is skipped, then we either pick up the code a concurrent request
    stored for this owner or retry with a fresh code after a collision.
    """
    existing = await crud.referral_code.get_by_owner(db, owner_user_id=owner_user_id)
    if existing:
        return existing.code

    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        code = generate_referral_code()
        inserted_id = await crud.referral_code.insert_if_absent(
            db, values={"owner_user_id": owner_user_id, "code": code}
        )
        await db.commit()
        if inserted_id:
            logger.info(f"Issued referral code {code} to user {owner_user_id}")
            return code

        existing = await crud.referral_code.get_by_owner(db, owner_user_id=owner_user_id)
        if existing:
            return existing.code
        logger.warning(f"Referral code collision on attempt {attempt} for user {owner_user_id}, retrying.")

    raise RuntimeError(f"Could not generate a unique referral code for user {owner_user_id}")


async def lookup_referral_code(db: AsyncSession, *, code: str) -> Optional[models.ReferralCode]:
    if not code or not code.strip():
        return None
    return await crud.referral_code.get_by_code(db, code=normalize_code(code))
