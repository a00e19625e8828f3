from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of srs_engine folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""
    database_url: str = "sqlite:///./srs_engine.db"
    database_echo: bool = False

    log_level: str = "INFO"

    # Concurrency control
    review_max_retries: int = 3  # optimistic retries on a stale record
    lock_timeout_seconds: float = 10.0  # wait for a per-key lock

    class Config:
        env_file = str(PROJECT_ROOT / ".env")

settings = Settings()
