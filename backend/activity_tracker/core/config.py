from functools import lru_cache
from typing import List
import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Study Activity Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Store settings
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "mongodb")  # mongodb | memory
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "study_activity")
    ACTIVITY_COLLECTION: str = "userActivity"

    # Tracking settings
    CHECKPOINT_INTERVAL_SECONDS: float = 60
    MIN_SESSION_SECONDS: int = 5
    WEEK_LENGTH_DAYS: int = 7
    FLUSH_MAX_ATTEMPTS: int = 1  # 1 = best effort, no retry
    FLUSH_RETRY_DELAY_SECONDS: float = 1.0
    LEARNING_PATH_PREFIXES: List[str] = ["/courses/", "/quizzes/"]
    STALE_CONTEXT_CHECKPOINTS: int = 3  # silent checkpoint intervals before a context is dropped

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "[%(asctime)s] %(levelname)s: %(message)s"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
