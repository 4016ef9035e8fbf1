"""
VoterReg Backend — FastAPI Dependencies
========================================

What:  Per-request injectables: the Store and the caller identity.
How:   The authenticating gateway in front of this service forwards the
       verified user id in the X-Auth-Id header; routes trust it as-is.
Who:   Route handlers via Depends(...); tests override get_store through
       app.dependency_overrides.
"""

from typing import Optional

from fastapi import Header

from app.exceptions import AccessDeniedError
from app.store import Store, store

AUTH_HEADER = "X-Auth-Id"


async def get_store() -> Store:
    return store


async def get_optional_auth_id(
    x_auth_id: Optional[str] = Header(default=None, alias=AUTH_HEADER),
) -> Optional[str]:
    """Caller identity, or None for anonymous requests."""
    if x_auth_id is None:
        return None
    return x_auth_id.strip() or None


async def get_current_auth_id(
    x_auth_id: Optional[str] = Header(default=None, alias=AUTH_HEADER),
) -> str:
    """
    Caller identity for operations that need one.

    Raises:
        AccessDeniedError: the request carries no identity.
    """
    auth_id = await get_optional_auth_id(x_auth_id)
    if auth_id is None:
        raise AccessDeniedError(
            message="You must be signed in to perform this action.",
            context={"header": AUTH_HEADER},
        )
    return auth_id
