# chicktrack/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "ChickTrack API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 3001))

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./chicktrack.db")

    # Security Settings
    SECRET_KEY: str = Field(default="dev-only-secret-change-me-before-deploying", alias="JWT_SECRET")
    ALGORITHM: str = "HS256"
    SESSION_TOKEN_DAYS: int = 7

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "*"

    # Briq (primary SMS provider)
    BRIQ_BASE_URL: str = "https://api.briqsms.com"
    BRIQ_API_KEY: str = ""
    BRIQ_SENDER_ID: str = ""

    # Africa's Talking (secondary SMS provider)
    AT_API_KEY: str = ""
    AT_USERNAME: str = "sandbox"
    AT_SENDER_ID: str = ""

    # SMS behaviour
    SMS_FAKE: bool = False
    SMS_TIMEOUT_MS: int = 10000

    # OTP Settings
    OTP_TTL_SECONDS: int = 60
    OTP_MESSAGE_TEMPLATE: Optional[str] = None
    OTP_RESEND_COOLDOWN_SECONDS: int = 30
    OTP_JANITOR_INTERVAL_SECONDS: int = 0

    # Two-factor settings
    PHONE_PROOF_TTL_SECONDS: int = 600
    TWOFA_REQUIRE_PHONE_PROOF: bool = False

    # Rate Limiting
    REDIS_URL: Optional[str] = None

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
