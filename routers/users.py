"""User account management endpoints.

Handles profile registration, admin user management and seller statistics.
Security: Roles come only from this table; users pick client, seller or curator
at registration and only admins change roles afterwards. Curator registrations
start unapproved (see routers/curators.py).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func

from database_adapter import Product, User
from models.users import SellerStats, UserAdminUpdate, UserRegister, UserResponse
from services.access import Action, Actor, ensure_allowed, is_not_self, is_self
from services.auth import Identity, get_current_user, get_identity
from services.database import get_db
from services.errors import Forbidden, InvalidInput, NotFound
from services.security_logger import log_unauthorized_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _email_taken(db, email: str, user_id: str) -> bool:
    response = db.table("users").select("id").eq("email", email).neq("id", user_id).execute()
    return bool(response.data)


def _get_or_404(db, user_id: str) -> dict:
    response = db.table("users").select("*").eq("id", user_id).execute()
    if not response.data:
        raise NotFound("User not found")
    return response.data[0]


@router.get("/", response_model=list[UserResponse])
def list_users(
    role: Optional[str] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """List all users, optionally by role (admin only)."""
    ensure_allowed(current_user, Action.MANAGE_USERS)
    query = db.table("users").select("*")
    if role:
        query = query.eq("role", role)
    return query.order("created_at", desc=True).execute().data


@router.get("/{user_id}", response_model=UserResponse)
def get_user_account(
    user_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Get a user profile (the user themselves or an admin)."""
    ensure_allowed(current_user, Action.VIEW_PROFILE, is_self(user_id))
    return _get_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def register_or_update_profile(
    user_id: str,
    account: UserRegister,
    identity: Identity = Depends(get_identity),
    db=Depends(get_db),
):
    """Create the profile for the authenticated identity, or update name and email.

    The role is only taken on first registration; later calls never change it.
    Changing the email clears its verified flag.
    """
    if identity.id != user_id:
        log_unauthorized_access(identity.id, "register_profile", f"target {user_id} is another identity")
        raise Forbidden()
    if _email_taken(db, account.email, user_id):
        raise InvalidInput("Email is already registered")

    existing = db.table("users").select("*").eq("id", user_id).execute()
    if existing.data:
        current = existing.data[0]
        update_data = {"name": account.name, "email": account.email}
        if account.email != current["email"]:
            update_data["email_verified"] = False
        response = db.table("users").update(update_data).eq("id", user_id).execute()
        return response.data[0]

    payload = {
        "id": user_id,
        "name": account.name,
        "email": account.email,
        "role": account.role,
        "curator_approved": False,
    }
    response = db.table("users").insert(payload).execute()
    logger.info(f"Registered user {user_id} as {account.role}")
    return response.data[0]


@router.patch("/{user_id}", response_model=UserResponse)
def admin_update_user(
    user_id: str,
    updates: UserAdminUpdate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Update any user's name, email, role or point balances (admin only)."""
    ensure_allowed(current_user, Action.MANAGE_USERS)
    existing = _get_or_404(db, user_id)

    update_data = updates.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in update_data and _email_taken(db, update_data["email"], user_id):
        raise InvalidInput("Email is already registered")
    if "role" in update_data and update_data["role"] != existing["role"]:
        # A role change always restarts curator onboarding
        update_data["curator_approved"] = False
    if not update_data:
        return existing

    response = db.table("users").update(update_data).eq("id", user_id).execute()
    logger.info(f"User {user_id} updated by admin {current_user.id}: {sorted(update_data)}")
    return response.data[0]


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Delete a user account (admin only; never the caller's own account)."""
    ensure_allowed(current_user, Action.DELETE_USER, is_not_self(user_id))
    _get_or_404(db, user_id)
    db.table("users").delete().eq("id", user_id).execute()
    logger.info(f"User {user_id} deleted by admin {current_user.id}")
    return None


@router.get("/{user_id}/stats", response_model=SellerStats)
def get_seller_stats(
    user_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Submission counts by status plus seller points (the seller or an admin)."""
    ensure_allowed(current_user, Action.VIEW_SELLER_STATS, is_self(user_id))

    with db.transaction() as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        counts = dict(
            session.query(Product.status, func.count(Product.id))
            .filter(Product.seller_id == user_id)
            .group_by(Product.status)
            .all()
        )
        seller_points = user.seller_points or 0

    return {
        "user_id": user_id,
        "total_submissions": sum(counts.values()),
        "pending": counts.get("pending", 0),
        "approved": counts.get("approved", 0),
        "rejected": counts.get("rejected", 0),
        "seller_points": seller_points,
    }
