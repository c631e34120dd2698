"""Curator onboarding workflow.

Users who register as curators start unapproved and cannot review or redeem.
An admin either approves them (curator_approved=True, starting point grant) or
rejects them (demoted to client, points cleared). Both transitions are single
conditional UPDATEs so two admins acting at once cannot double-apply them.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_, update

from database_adapter import User, row_to_dict, utcnow_naive
from services import points
from services.access import Action, Actor, Role, ensure_allowed
from services.errors import InvalidInput, InvalidState, NotFound

logger = logging.getLogger(__name__)


@dataclass
class CuratorDecision:
    user: dict
    approved: bool
    reason: Optional[str] = None


class CuratorApprovalWorkflow:

    def __init__(self, db):
        self.db = db

    def pending(self, actor: Actor) -> list[dict]:
        """Curators still waiting for a decision, newest registrations first."""
        ensure_allowed(actor, Action.APPROVE_CURATOR)
        with self.db.transaction() as session:
            rows = (
                session.query(User)
                .filter(User.role == Role.CURATOR.value)
                .filter(or_(User.curator_approved.is_(None), User.curator_approved.is_(False)))
                .order_by(User.created_at.desc())
                .all()
            )
            return [row_to_dict(row) for row in rows]

    def approve(self, actor: Actor, user_id: str, grant: Optional[int] = None) -> CuratorDecision:
        """Approve a pending curator and set their starting points."""
        ensure_allowed(actor, Action.APPROVE_CURATOR)
        if grant is None:
            grant = points.curator_onboarding_grant()
        if grant < 0:
            raise InvalidInput("Initial points must be non-negative")

        with self.db.transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFound("User not found")
            if user.role != Role.CURATOR.value:
                raise InvalidState("User is not a curator")
            if user.curator_approved:
                raise InvalidState("Curator is already approved")

            approved = session.execute(
                update(User)
                .where(
                    User.id == user_id,
                    User.role == Role.CURATOR.value,
                    or_(User.curator_approved.is_(None), User.curator_approved.is_(False)),
                )
                .values(curator_approved=True, curator_points=grant, updated_at=utcnow_naive())
                .execution_options(synchronize_session=False)
            ).rowcount
            if approved != 1:
                raise InvalidState("Curator is already approved")

            session.refresh(user)
            data = row_to_dict(user)

        logger.info(f"Curator {user_id} approved by {actor.id} with {grant} points")
        return CuratorDecision(user=data, approved=True)

    def reject(self, actor: Actor, user_id: str, reason: Optional[str] = None) -> CuratorDecision:
        """Reject a curator application: demote to client and clear curator points."""
        ensure_allowed(actor, Action.APPROVE_CURATOR)

        with self.db.transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFound("User not found")

            rejected = session.execute(
                update(User)
                .where(User.id == user_id, User.role == Role.CURATOR.value)
                .values(
                    role=Role.CLIENT.value,
                    curator_points=0,
                    curator_approved=False,
                    updated_at=utcnow_naive(),
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if rejected != 1:
                raise InvalidState("User is not a curator")

            session.refresh(user)
            data = row_to_dict(user)

        logger.info(f"Curator {user_id} rejected by {actor.id}" + (f": {reason}" if reason else ""))
        return CuratorDecision(user=data, approved=False, reason=reason)
