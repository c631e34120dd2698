"""Redeemable products: items approved curators buy with curator points.

Catalog management is admin only. Redemption runs in services/redemptions.py.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from models.redeemables import (
    RedeemableCreate,
    RedeemableResponse,
    RedeemableUpdate,
    RedeemResult,
    RedemptionResponse,
)
from services.access import Action, Actor, ensure_allowed
from services.auth import get_current_user
from services.database import get_db
from services.errors import NotFound
from services.redemptions import RedemptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/redeemable-products", tags=["redeemables"])


def _get_or_404(db, redeemable_id: str) -> dict:
    response = db.table("redeemable_products").select("*").eq("id", redeemable_id).execute()
    if not response.data:
        raise NotFound("Redeemable product not found")
    return response.data[0]


@router.get("", response_model=list[RedeemableResponse])
def get_redeemables(
    category: Optional[str] = None,
    include_inactive: bool = False,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """List redeemable items; inactive ones are shown to admins on request."""
    query = db.table("redeemable_products").select("*")
    if not (include_inactive and current_user.is_admin):
        query = query.eq("is_active", True)
    if category:
        query = query.eq("category", category)
    return query.order("created_at", desc=True).execute().data


@router.post("", response_model=RedeemableResponse, status_code=201)
def create_redeemable(
    item: RedeemableCreate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    ensure_allowed(current_user, Action.MANAGE_REDEEMABLES)
    response = db.table("redeemable_products").insert(item.model_dump()).execute()
    logger.info(f"Redeemable {response.data[0]['id']} created by {current_user.id}")
    return response.data[0]


@router.get("/redemptions", response_model=list[RedemptionResponse])
def get_my_redemptions(
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """The caller's redemption history, newest first."""
    return (
        db.table("product_redemptions")
        .select("*")
        .eq("user_id", current_user.id)
        .order("created_at", desc=True)
        .execute()
        .data
    )


@router.get("/{redeemable_id}", response_model=RedeemableResponse)
def get_redeemable(
    redeemable_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    item = _get_or_404(db, redeemable_id)
    if not item["is_active"] and not current_user.is_admin:
        raise NotFound("Redeemable product not found")
    return item


@router.put("/{redeemable_id}", response_model=RedeemableResponse)
def update_redeemable(
    redeemable_id: str,
    updates: RedeemableUpdate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    ensure_allowed(current_user, Action.MANAGE_REDEEMABLES)
    existing = _get_or_404(db, redeemable_id)

    update_data = updates.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        return existing
    response = db.table("redeemable_products").update(update_data).eq("id", redeemable_id).execute()
    return response.data[0]


@router.delete("/{redeemable_id}", status_code=204)
def delete_redeemable(
    redeemable_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    ensure_allowed(current_user, Action.MANAGE_REDEEMABLES)
    _get_or_404(db, redeemable_id)
    db.table("redeemable_products").delete().eq("id", redeemable_id).execute()
    logger.info(f"Redeemable {redeemable_id} deleted by {current_user.id}")
    return None


@router.post("/{redeemable_id}/redeem", response_model=RedeemResult)
def redeem(
    redeemable_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Spend curator points on one unit (approved curators and admins)."""
    return RedemptionService(db).redeem(current_user, redeemable_id)
