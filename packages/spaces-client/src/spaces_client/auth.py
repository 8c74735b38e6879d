from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict


class APIAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    team_id: str = ""
    team_slug: str | None = None


def select_auth(env: Mapping[str, str] | None = None) -> APIAuth:
    source = os.environ if env is None else env
    token = (source.get("TURBO_TOKEN") or "").strip()
    if not token:
        raise RuntimeError("No Spaces token found. Run `turbo login` or set TURBO_TOKEN.")

    team_slug = (source.get("TURBO_TEAM") or "").strip() or None
    return APIAuth(
        token=token,
        team_id=(source.get("TURBO_TEAMID") or "").strip(),
        team_slug=team_slug,
    )
