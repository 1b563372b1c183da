from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load variables from .env if present
load_dotenv()

class Settings(BaseSettings):
    """Panel configuration loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    # External marketplace backend
    backend_api_url: str = Field("http://localhost:5000/api", alias="BACKEND_API_URL")
    backend_timeout: float = Field(15.0, alias="BACKEND_TIMEOUT")

    # Payout policy mirrored from the backend
    max_payout_attempts: int = Field(3, alias="MAX_PAYOUT_ATTEMPTS")
    support_email: str = Field("supports@krevv.com", alias="SUPPORT_EMAIL")

    # Admin lists
    admin_page_size: int = Field(10, alias="ADMIN_PAGE_SIZE")

    # Comment trees cache (seconds)
    comment_cache_ttl: int = Field(300, alias="COMMENT_CACHE_TTL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @model_validator(mode='after')
    def validate_limits(self) -> 'Settings':
        """Validate numeric limits."""
        if self.max_payout_attempts < 1:
            raise ValueError("MAX_PAYOUT_ATTEMPTS must be at least 1")
        if self.admin_page_size < 1:
            raise ValueError("ADMIN_PAGE_SIZE must be at least 1")
        self.backend_api_url = self.backend_api_url.rstrip("/")
        return self

@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
