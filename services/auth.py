"""Authentication collaborator.

Resolves the Authorization header to an explicit Actor that routers hand to the
workflows. In TEST_MODE, accepts dev tokens for stable test identities without a
real identity provider; in production, verifies Supabase JWTs.
Security: roles always come from the users table, never from the client.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from config import load_settings_from_env
from services.access import Actor, Role
from services.database import get_db
from services.security_logger import log_auth_failure

# Fixed dev identities (user id -> role); seed_test_users.py creates one user each.
# Security: dev tokens only work when TEST_MODE=true; production uses real Supabase auth.
DEV_USER_IDS = {
    "49366adb-2d13-412f-9ae5-4c35dbffab10": "admin",
    "7c1f0d1e-3b0a-4f7e-9a55-1b2f1f0c8d21": "seller",
    "94e116f7-885d-4d32-87ae-697c5dc09b9e": "curator",
    "2a3b7c3e-971b-4b42-9c8c-0f1843486c50": "client",
}


@dataclass(frozen=True)
class Identity:
    """Who the token belongs to, before any profile lookup."""
    id: str
    email: Optional[str] = None


@lru_cache()
def _supabase_client(url: str, key: str):
    from supabase import create_client
    return create_client(url, key)


def verify_token(token: str, settings) -> Identity:
    """Validate a Supabase access token and return the identity it carries."""
    if not settings.SUPABASE_URL:
        log_auth_failure(None, "Supabase not configured")
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    try:
        response = _supabase_client(settings.SUPABASE_URL, settings.SUPABASE_KEY).auth.get_user(token)
    except Exception as e:
        log_auth_failure(None, f"Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        log_auth_failure(None, "Token carried no user")
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    return Identity(id=str(user.id), email=getattr(user, "email", None))


async def get_identity(authorization: str = Header(None)) -> Identity:
    """
    Resolve the Authorization header to an Identity.

    In TEST_MODE (dev):
      - Accepts: "dev-token-<user_id>" or "Bearer dev-token-<user_id>"
    In production (TEST_MODE=false):
      - Accepts: valid Supabase JWT
    """
    # Fresh settings so tests that patch env observe the current TEST_MODE
    settings = load_settings_from_env()

    if not authorization:
        log_auth_failure(None, "Missing authorization header")
        raise HTTPException(status_code=401, detail="No authorization header")

    # Strip "Bearer " prefix if present
    token = authorization.replace("Bearer ", "").strip()

    if settings.TEST_MODE and token.startswith("dev-token-"):
        return Identity(id=token.replace("dev-token-", "").strip())

    return verify_token(token, settings)


async def get_current_user(identity: Identity = Depends(get_identity), db=Depends(get_db)) -> Actor:
    """
    Load the caller's profile and return it as an Actor.

    Raises 401 when the identity has no profile row yet (clients must
    create one through PUT /api/users/{id} first).
    """
    response = db.table("users").select("*").eq("id", identity.id).execute()
    if not response.data:
        log_auth_failure(identity.id, "No user profile for identity")
        raise HTTPException(status_code=401, detail="User profile not found")

    user = response.data[0]
    return Actor(
        id=user["id"],
        role=Role.parse(user.get("role")),
        curator_approved=bool(user.get("curator_approved")),
        email=user.get("email"),
        name=user.get("name"),
    )


async def get_current_user_optional(authorization: str = Header(None), db=Depends(get_db)) -> Optional[Actor]:
    """
    Variant of get_current_user that returns None when no Authorization header is provided.
    Useful for public endpoints that show more to signed-in users.
    """
    if not authorization:
        return None
    identity = await get_identity(authorization)
    return await get_current_user(identity, db)
