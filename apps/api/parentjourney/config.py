"""Application configuration utilities."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from config.json."""

    database_path: str = Field(default="./data/parentjourney.db")
    onboarding_storage_key: str = Field(default="parent-journey-onboarding")
    tour_start_delay_seconds: float = Field(default=0.5, ge=0)
    notice_auto_dismiss_seconds: float = Field(default=7.0, gt=0)
    session_idle_seconds: float = Field(default=1800.0, gt=0)
    auth_jwt_secret: Optional[str] = None
    auth_jwt_audience: Optional[str] = Field(default="authenticated")
    auth_user_url: Optional[str] = None
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    @property
    def resolved_database_path(self) -> Path:
        """Return the absolute path for the SQLite database file."""
        return (Path(__file__).resolve().parents[1] / self.database_path).resolve()


def _config_path() -> Path:
    override = os.getenv("PARENTJOURNEY_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[1] / "config.json"


def load_config() -> AppConfig:
    """Load configuration from config.json, falling back to defaults when absent."""

    config_file = _config_path()
    contents: Dict[str, Any] = {}
    if config_file.exists():
        contents = json.loads(config_file.read_text())

    secret = os.getenv("PARENTJOURNEY_JWT_SECRET")
    if secret:
        contents["auth_jwt_secret"] = secret
    user_url = os.getenv("PARENTJOURNEY_AUTH_USER_URL")
    if user_url:
        contents["auth_user_url"] = user_url
    return AppConfig(**contents)


CONFIG = load_config()
