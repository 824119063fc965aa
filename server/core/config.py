"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3020, ge=1024, le=65535)
    debug: bool = Field(default=False)

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./data/cache.db")
    database_echo: bool = Field(default=False)
    database_pool_size: int = Field(default=20, ge=5, le=100)
    database_max_overflow: int = Field(default=30, ge=10, le=100)
    database_timeout: float = Field(default=5.0, gt=0, le=120.0)  # Per-operation bound

    # Cache Policy
    default_chain: str = Field(default="bsc", min_length=1)
    security_cache_ttl: int = Field(default=604800, ge=60)  # 7 days
    address_risk_cache_ttl: int = Field(default=86400, ge=60)  # 24 hours
    sentiment_cache_ttl: int = Field(default=604800, ge=60)  # Default expiresAt offset
    audit_cache_ttl: int = Field(default=2592000, ge=60)  # 30 days

    # Expiry Sweep
    cleanup_enabled: bool = Field(default=True)
    cleanup_interval: int = Field(default=300, ge=1)  # Seconds between sweeps

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database directory exists for SQLite."""
        if v and v.startswith("sqlite"):
            if ":///" in v:
                db_path = v.split("///")[1]
                if db_path and db_path != ":memory:":
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("default_chain")
    @classmethod
    def normalize_default_chain(cls, v):
        return v.strip().lower()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
