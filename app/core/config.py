from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    # MongoDB - no default, the first database call fails when unset
    MONGODB_URI: Optional[str] = None
    MONGODB_DB_NAME: str = "groupmeal"

    # Waitlist
    WAITLIST_COLLECTION: str = "waitlist"
    WAITLIST_SOURCE: str = "landing_page"
    # Unique index on email, makes the insert itself the duplicate check
    WAITLIST_UNIQUE_INDEX: bool = True

    # App Settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        # Use absolute path to .env file
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
