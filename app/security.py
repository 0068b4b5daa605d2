import logging
import secrets

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> dict:
    """
    Decodes an access token issued by the identity service and returns the payload.

    This service never issues tokens itself.
    """
    try:
        key_for_decoding = settings.SECRET_KEY.get_secret_value()
        payload = jwt.decode(
            token, key_for_decoding, algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError as e:
        logger.debug(f"JWTError during token decoding: {e}")
        raise


def verify_internal_api_key(candidate: str | None) -> bool:
    """Constant-time check of the service-to-service key. False when no key is configured."""
    if not candidate or settings.INTERNAL_API_KEY is None:
        return False
    return secrets.compare_digest(candidate, settings.INTERNAL_API_KEY.get_secret_value())
