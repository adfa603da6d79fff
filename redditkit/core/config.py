from typing import Literal, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"
    DEBUG: bool = False

    # Project
    PROJECT_NAME: str = "redditkit"
    VERSION: str = "0.1.0"

    # API
    BASE_URL: str = "https://oauth.reddit.com"
    USER_AGENT: str = "python:redditkit:0.1.0"
    ACCESS_TOKEN: str = ""

    # Transport
    REQUEST_TIMEOUT: float = 30.0
    MAX_RETRIES: int = 3
    RETRY_MAX_WAIT: float = 10.0

    # Listings
    PAGE_LIMIT: str = "100"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Environment-specific configurations
        if self.ENVIRONMENT == "development":
            self.DEBUG = True
            self.LOG_LEVEL = "DEBUG"

        elif self.ENVIRONMENT == "testing":
            self.DEBUG = True
            self.LOG_LEVEL = "ERROR"  # Reduce test noise
            self.MAX_RETRIES = 1

        elif self.ENVIRONMENT == "production":
            self.DEBUG = False
            self.LOG_LEVEL = "WARNING"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
