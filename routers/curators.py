"""Curator onboarding endpoints (admin only, except the points lookup)."""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from models.users import UserResponse
from services.access import Action, Actor, ensure_allowed, is_self
from services.auth import get_current_user
from services.curators import CuratorApprovalWorkflow
from services.database import get_db
from services.errors import NotFound
from services.notifications import curator_decision_message, deliver, get_notifier

router = APIRouter(prefix="/api/curators", tags=["curators"])


class CuratorApproval(BaseModel):
    initial_points: Optional[int] = Field(None, ge=0)


class CuratorRejection(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class CuratorDecisionResponse(BaseModel):
    user: UserResponse
    approved: bool
    reason: Optional[str] = None


class CuratorPoints(BaseModel):
    user_id: str
    curator_points: int
    curator_approved: bool


@router.get("/pending", response_model=list[UserResponse])
def get_pending_curators(
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Curator applications awaiting an admin decision."""
    return CuratorApprovalWorkflow(db).pending(current_user)


@router.post("/{user_id}/approve", response_model=CuratorDecisionResponse)
def approve_curator(
    user_id: str,
    background_tasks: BackgroundTasks,
    approval: Optional[CuratorApproval] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Approve a curator; initial_points defaults to the onboarding grant."""
    grant = approval.initial_points if approval else None
    decision = CuratorApprovalWorkflow(db).approve(current_user, user_id, grant)

    subject, body = curator_decision_message(True, decision.user["curator_points"])
    background_tasks.add_task(deliver, notifier, decision.user.get("email"), subject, body)
    return decision


@router.post("/{user_id}/reject", response_model=CuratorDecisionResponse)
def reject_curator(
    user_id: str,
    background_tasks: BackgroundTasks,
    rejection: Optional[CuratorRejection] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Reject a curator application; the user continues as a client."""
    reason = rejection.reason if rejection else None
    decision = CuratorApprovalWorkflow(db).reject(current_user, user_id, reason)

    subject, body = curator_decision_message(False, reason=reason)
    background_tasks.add_task(deliver, notifier, decision.user.get("email"), subject, body)
    return decision


@router.get("/{user_id}/points", response_model=CuratorPoints)
def get_curator_points(
    user_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Curator point balance (the curator themselves or an admin)."""
    ensure_allowed(current_user, Action.VIEW_CURATOR_POINTS, is_self(user_id))

    response = db.table("users").select("id,curator_points,curator_approved").eq("id", user_id).execute()
    if not response.data:
        raise NotFound("User not found")
    user = response.data[0]
    return {
        "user_id": user["id"],
        "curator_points": user["curator_points"] or 0,
        "curator_approved": bool(user["curator_approved"]),
    }
