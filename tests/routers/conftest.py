import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from app.core.config import settings
from app.db.session import get_db
from app.main import app


def make_access_token(user_id: int) -> str:
    """Bearer token shaped like the ones the identity service issues"""
    payload = {"sub": f"user{user_id}@example.com", "user_id": user_id, "role": "SERVICE_PROVIDER"}
    return jwt.encode(payload, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {make_access_token(user_id)}"}
    return _headers


@pytest.fixture
def internal_headers():
    return {"X-Internal-Api-Key": settings.INTERNAL_API_KEY.get_secret_value()}


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client
    app.dependency_overrides.clear()
