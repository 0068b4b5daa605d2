"""
Referral engine domain exceptions.

Each exception carries a machine-readable ``code`` and the HTTP status the
API answers with. Conflict and not-found errors are terminal for the caller.
"""
from fastapi import status


class ReferralEngineError(Exception):
    """Base exception for referral engine errors"""
    code = "REFERRAL_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Referral operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidReferralCodeError(ReferralEngineError):
    """Raised when a referral code does not exist"""
    code = "INVALID_CODE"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid referral code."


class RewardNotFoundError(ReferralEngineError):
    """Raised when a reward is missing, foreign, or not eligible for the operation"""
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Reward not found or not available."


class AlreadyClaimedError(ReferralEngineError):
    """Raised when a reward is already applied or a claim token already used"""
    code = "ALREADY_CLAIMED"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Reward has already been claimed."


class InvalidClaimTokenError(ReferralEngineError):
    """Raised when a claim token does not exist"""
    code = "INVALID_TOKEN"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invalid claim token."


class ExpiredClaimTokenError(ReferralEngineError):
    """Raised when a claim token is past its expiry"""
    code = "EXPIRED_TOKEN"
    status_code = status.HTTP_410_GONE
    default_message = "Claim token has expired."


class RewardExpiredError(ReferralEngineError):
    """Raised when a reward is past its expiry"""
    code = "EXPIRED_REWARD"
    status_code = status.HTTP_410_GONE
    default_message = "Reward has expired."
