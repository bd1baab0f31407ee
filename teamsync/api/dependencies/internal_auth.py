# teamsync/api/dependencies/internal_auth.py
from typing import Optional

from fastapi import Header, HTTPException, status

from teamsync.core.config import get_settings

INVALID_KEY_DETAIL = "Invalid or missing internal API key."


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Internal API key required for /internal endpoints in non-local environments.",
    ),
) -> None:
    """
    Dependency protecting /internal endpoints (reload, maintenance).

    Rules
    -----
    - APP_ENV in ("local", "test"):
        - no INTERNAL_API_KEY configured -> open
        - INTERNAL_API_KEY configured    -> header must match
    - any other APP_ENV:
        - INTERNAL_API_KEY missing -> 500 (misconfiguration)
        - header missing or wrong  -> 401
    """
    settings = get_settings()
    env = (settings.APP_ENV or "local").lower()
    expected = settings.INTERNAL_API_KEY

    if env in ("local", "test") and not expected:
        return

    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="INTERNAL_API_KEY not configured for this environment.",
        )

    if internal_api_key != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_KEY_DETAIL,
        )
