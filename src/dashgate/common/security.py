"""Admin API key authentication dependency."""

import secrets

from fastapi import Header, HTTPException


async def require_admin_key(
    x_admin_api_key: str = Header(..., alias="X-Admin-Api-Key"),
) -> str:
    """FastAPI dependency that validates the admin API key from header."""
    from dashgate.common.config import get_settings

    settings = get_settings()
    if not secrets.compare_digest(
        x_admin_api_key.encode(), settings.admin_api_key.encode()
    ):
        raise HTTPException(status_code=403, detail="Invalid admin API key")
    return x_admin_api_key
