from __future__ import annotations

import secrets

from fastapi import Header, HTTPException

from zenplan_api.settings import get_settings


async def require_backend_token(
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> str:
    expected = get_settings().backend_session_secret
    if not x_backend_token or not secrets.compare_digest(x_backend_token.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid backend token")
    return x_backend_token
