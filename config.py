"""Service configuration read from the environment."""

import os
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Settings:
    database_url: Optional[str] = None
    database_name: str = "thursday_vibes"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def load_settings() -> Settings:
    """Build settings from DATABASE_URL, DATABASE_NAME, PORT, LOG_LEVEL and CORS_ORIGINS."""
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        database_name=os.getenv("DATABASE_NAME", "thursday_vibes"),
        port=int(os.getenv("PORT", 8000)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
    )
