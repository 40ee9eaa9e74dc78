import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Project root (where .env should be)
project_root = Path(__file__).parent.parent
env_path = project_root / ".env"

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"


class Settings(BaseModel):
    mongo_uri: Optional[str] = None
    db_name: str = "georeport"
    host: str = "0.0.0.0"
    port: int = Field(10000, ge=1, le=65535)
    cors_origins: List[str] = ["*"]
    geocoding_enabled: bool = True
    geocoding_url: str = NOMINATIM_REVERSE_URL
    geocoding_user_agent: str = "GeoReportAPI/1.0"
    geocoding_timeout: float = Field(10.0, gt=0)
    mongo_timeout_ms: int = Field(5000, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=env_path)
        values = {
            "mongo_uri": os.getenv("MONGO_URI"),
            "db_name": os.getenv("DB_NAME"),
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
            "geocoding_enabled": os.getenv("GEOCODING_ENABLED"),
            "geocoding_url": os.getenv("GEOCODING_URL"),
            "geocoding_user_agent": os.getenv("GEOCODING_USER_AGENT"),
            "geocoding_timeout": os.getenv("GEOCODING_TIMEOUT"),
            "mongo_timeout_ms": os.getenv("MONGO_TIMEOUT_MS"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        origins = os.getenv("CORS_ORIGINS")
        if origins:
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        # unset variables fall back to the field defaults
        return cls(**{k: v for k, v in values.items() if v not in (None, "")})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
