"""Environment-driven settings shared by the API, the client and the CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

DEFAULT_USER_ID = "demo-user-001"
DEFAULT_API_PREFIX = "/api"
DEFAULT_API_URL = "http://localhost:5000"


def _normalize_prefix(prefix: str) -> str:
    prefix = prefix.strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


@dataclass(frozen=True)
class Settings:
    env: str = "prod"
    allowed_origins: Optional[List[str]] = None
    data_dir: Path = Path("data")
    api_prefix: str = DEFAULT_API_PREFIX
    user_id: str = DEFAULT_USER_ID
    api_url: str = DEFAULT_API_URL

    @property
    def is_development(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls) -> "Settings":
        allowed_origins = os.getenv("BUDGET_TRACKER_ALLOWED_ORIGINS")
        origins = None
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
        return cls(
            env=os.getenv("BUDGET_TRACKER_ENV", "prod").lower(),
            allowed_origins=origins or None,
            data_dir=Path(os.getenv("BUDGET_TRACKER_DATA_DIR", "data")),
            api_prefix=_normalize_prefix(os.getenv("BUDGET_TRACKER_API_PREFIX", DEFAULT_API_PREFIX)),
            user_id=os.getenv("BUDGET_TRACKER_USER_ID", DEFAULT_USER_ID),
            api_url=os.getenv("BUDGET_TRACKER_API_URL", DEFAULT_API_URL).rstrip("/"),
        )
