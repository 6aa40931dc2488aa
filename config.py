# Configuration settings for the Healthcare Portal API
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# JWT Configuration
ALGORITHM = "HS256"

# Roles
PATIENT = "patient"
PROVIDER = "provider"
ROLES = (PATIENT, PROVIDER)

MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts inputs up to this many bytes
MAX_PASSWORD_BYTES = 72

# API Configuration
API_TITLE = "Healthcare Portal API"
API_VERSION = "1.0.0"


class Settings(BaseSettings):
    """Runtime settings loaded from the environment or .env"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Required: startup fails when either is absent
    jwt_secret_key: str = Field(..., min_length=1)
    access_token_expire_minutes: int = Field(..., gt=0)

    database_path: str = "healthcare.db"
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    seed_providers: bool = True
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
