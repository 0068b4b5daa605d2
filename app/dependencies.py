from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from typing import Optional

from app import schemas, security
from app.core.config import settings


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def _user_id_from_token(token: str) -> Optional[int]:
    try:
        payload = security.decode_access_token(token)
        token_data = schemas.TokenPayload(**payload)
    except (JWTError, ValidationError):
        return None
    return token_data.user_id


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> int:
    """Id of the caller, read from the bearer token issued by the identity service."""
    user_id = _user_id_from_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


async def get_optional_user_id(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[int]:
    """Like get_current_user_id, but anonymous or unreadable tokens yield None."""
    if not token:
        return None
    return _user_id_from_token(token)


async def require_internal_service(x_internal_api_key: Optional[str] = Header(default=None)) -> None:
    """Guards endpoints called by other services (signup, account verification)."""
    if not security.verify_internal_api_key(x_internal_api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Internal service credentials required.",
        )
