from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr
from typing import List


class Settings(BaseSettings):
    PROJECT_NAME: str = "Marketplace Referral Engine"
    DATABASE_URL: str
    SECRET_KEY: SecretStr
    ALGORITHM: str = "HS256"
    API_V1_STR: str = "/api/v1"

    # Base URL used when building shareable signup links
    MARKETPLACE_URL: str = Field(default="http://localhost:3002", description="Base URL for the marketplace frontend")
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3002"]

    # Shared secret for service-to-service calls (signup, account verification)
    INTERNAL_API_KEY: SecretStr | None = None

    LOG_LEVEL: str = "INFO"
    # Echo SQL statements to the log
    DB_ECHO: bool = False

    # Expiry windows
    CLAIM_TOKEN_EXPIRE_DAYS: int = 7
    REWARD_EXPIRE_MONTHS: int = 6
    SMS_CREDIT_EXPIRE_DAYS: int = 365

    # Store clicks made by the referrer or the referred provider as invalid
    REFERRAL_BLOCK_SELF_CLICKS: bool = True

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

settings = Settings()
