import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env early so env vars are present when this module is imported
try:
    project_root = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=project_root / ".env")
except Exception:
    # If .env is missing or unreadable, continue; os.environ may already have values
    pass

SERVER_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class AppSettings:
    """Global app settings."""

    database_url: Optional[str] = None
    cors_origins: list[str] = field(default_factory=list)
    log_level: Optional[str] = None
    listing_limit: Optional[int] = None
    upcoming_window_days: Optional[int] = None

    def __post_init__(self):
        """Fill unset fields from the environment."""
        if self.database_url is None:
            self.database_url = os.getenv("DATABASE_URL", "sqlite:///./data/portal.db")
        if not self.cors_origins:
            raw = os.getenv("CORS_ORIGINS", "*")
            self.cors_origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if self.log_level is None:
            self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if self.listing_limit is None:
            self.listing_limit = int(os.getenv("LISTING_LIMIT", "500"))
        if self.upcoming_window_days is None:
            self.upcoming_window_days = int(os.getenv("UPCOMING_WINDOW_DAYS", "7"))
