"""Settings from the environment; loads .env locally via python-dotenv."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Runtime configuration."""

    login_username: str | None = Field(default=None, description="Username accepted by /api/login")
    login_password: str | None = Field(default=None, description="Password accepted by /api/login")
    dimension_tolerance: float = Field(default=0.5, ge=0, description="Default margin subtracted from box dimensions")
    weight_tolerance: float = Field(default=0.0, ge=0, description="Default margin subtracted from box weight limits")
    hard_cap: int = Field(default=1000, ge=0, description="Upper limit on any single capacity")
    max_rows: int = Field(default=1000, ge=1, description="Maximum data rows per uploaded sheet")
    log_level: str = Field(default="INFO", description="Root log level for the CLI")

    @property
    def login_configured(self) -> bool:
        return bool(self.login_username) and bool(self.login_password)


_ENV_FIELDS = {
    "LOGIN_USERNAME": "login_username",
    "LOGIN_PASSWORD": "login_password",
    "BOXWEAVER_DIMENSION_TOLERANCE": "dimension_tolerance",
    "BOXWEAVER_WEIGHT_TOLERANCE": "weight_tolerance",
    "BOXWEAVER_HARD_CAP": "hard_cap",
    "BOXWEAVER_MAX_ROWS": "max_rows",
    "BOXWEAVER_LOG_LEVEL": "log_level",
}


def get_settings() -> Settings:
    """Read settings from the environment. A .env file does not override real variables."""
    load_dotenv()
    values = {field: os.environ[var] for var, field in _ENV_FIELDS.items() if os.getenv(var)}
    return Settings(**values)
