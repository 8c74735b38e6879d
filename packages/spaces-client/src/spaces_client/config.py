from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "https://vercel.com/api"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


class SpacesSettings(BaseModel):
    """Client configuration; fixed for the lifetime of a client."""

    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_API_URL
    use_preflight: bool = False
    timeout: float = Field(default=30.0, gt=0)
    retry_preflight: bool = False
    max_attempts: int = Field(default=3, ge=1)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "SpacesSettings":
        source = os.environ if env is None else env
        return cls(
            api_url=source.get("TURBO_API") or DEFAULT_API_URL,
            use_preflight=_env_flag(source.get("TURBO_PREFLIGHT")),
            timeout=float(source.get("TURBO_API_TIMEOUT") or 30.0),
            retry_preflight=_env_flag(source.get("TURBO_SPACES_RETRY_PREFLIGHT")),
            max_attempts=int(source.get("TURBO_SPACES_MAX_ATTEMPTS") or 3),
        )
