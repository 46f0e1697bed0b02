"""Runtime configuration for the storefront server.

Settings are built once at startup (``Settings.from_env()``) and passed
explicitly to ``create_app``. Nothing else in the code base reads the
environment.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

DEFAULT_ORIGINS = (
    "http://localhost:5173",  # Vite dev server
    "http://localhost:3000",  # Local testing
)

TEN_MEGABYTES = 10 * 1024 * 1024


class Settings(BaseModel):
    model_config = {"frozen": True}

    environment: str = "development"
    database_url: str = "sqlite:///./storefront.db"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    allowed_origins: tuple[str, ...] = DEFAULT_ORIGINS
    max_body_bytes: int = Field(default=TEN_MEGABYTES, ge=1)
    session_cookie_name: str = "storefront_session"
    session_ttl_hours: int = Field(default=24 * 7, ge=1)
    currency: str = "USD"
    log_level: str | None = None
    log_dir: str | None = None
    create_schema: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "staging")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        origins = [o.strip() for o in env.get("ALLOWED_ORIGINS", ",".join(DEFAULT_ORIGINS)).split(",") if o.strip()]
        frontend_url = env.get("FRONTEND_URL", "").strip()
        if frontend_url and frontend_url not in origins:
            origins.append(frontend_url)

        values = {
            "environment": (env.get("ENVIRONMENT") or env.get("ENV") or "development").lower(),
            "allowed_origins": tuple(origins),
            "log_level": env.get("LOG_LEVEL"),
            "log_dir": env.get("LOG_DIR"),
        }
        for key, name in (
            ("database_url", "DATABASE_URL"),
            ("host", "HOST"),
            ("port", "PORT"),
            ("max_body_bytes", "MAX_BODY_BYTES"),
            ("session_ttl_hours", "SESSION_TTL_HOURS"),
            ("currency", "STORE_CURRENCY"),
        ):
            if env.get(name):
                values[key] = env[name]

        return cls(**values)
