"""
Pytest configuration and shared fixtures.

Service tests run against an in-memory SQLite database so unique indexes and
conditional writes behave as they do in production.
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("MARKETPLACE_URL", "https://marketplace.test")

import pytest
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base_class import Base
from app import models
from app.models.enums import ReferralStatus
from app.utils.dates import month_bucket


@pytest.fixture
def fixed_now():
    """Fixed datetime for deterministic tests"""
    return datetime(2025, 11, 15, 12, 0, 0)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_referral(db):
    """Create a referral row directly, bypassing the code registry"""
    async def _make(referrer_user_id: int, referred_user_id: int, status: ReferralStatus = ReferralStatus.ACTIVE):
        referral = models.Referral(
            referrer_user_id=referrer_user_id,
            referred_user_id=referred_user_id,
            code=f"CODE{referrer_user_id:04d}",
            status=status,
        )
        db.add(referral)
        await db.commit()
        return referral
    return _make


@pytest.fixture
def seed_valid_clicks(db):
    """Insert historic valid clicks for a referral in a past month bucket"""
    async def _seed(referral_id: int, count: int, clicked_at: datetime = datetime(2025, 1, 10, 9, 0, 0)):
        db.add_all([
            models.ReferralClick(
                referral_id=referral_id,
                visitor_id=f"seed-{referral_id}-{i}",
                ip="10.0.0.1",
                clicked_at=clicked_at,
                is_valid=True,
                month_year=month_bucket(clicked_at),
            )
            for i in range(count)
        ])
        await db.commit()
    return _seed
