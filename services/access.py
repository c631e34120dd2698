"""Role-based access policy.

Roles and protected actions are closed enums and PERMISSIONS maps every action
to the roles allowed to perform it. Admin is allowed everything at the role level
(the single superuser rule). Ownership rules are Checks evaluated after the role
allows; most of them are waived for admins, the ones marked binds_admin are not.

Every denial raises the same Forbidden("Not authorized"); which rule failed is
only written to the security log.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from services.errors import Forbidden
from services.security_logger import log_unauthorized_access


class Role(str, Enum):
    CLIENT = "client"
    SELLER = "seller"
    CURATOR = "curator"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Map a stored role string to a Role; unknown or missing values get least privilege."""
        try:
            return cls(value)
        except ValueError:
            return cls.CLIENT


class Action(str, Enum):
    SUBMIT_PRODUCT = "submit_product"
    EDIT_PRODUCT = "edit_product"
    DELETE_PRODUCT = "delete_product"
    REVIEW_PRODUCT = "review_product"
    VIEW_REVIEW_QUEUE = "view_review_queue"
    VIEW_CURATION_REVIEWS = "view_curation_reviews"
    PURCHASE_PRODUCT = "purchase_product"
    UPDATE_ORDER = "update_order"
    VIEW_ALL_ORDERS = "view_all_orders"
    REDEEM_PRODUCT = "redeem_product"
    MANAGE_REDEEMABLES = "manage_redeemables"
    APPROVE_CURATOR = "approve_curator"
    MANAGE_USERS = "manage_users"
    DELETE_USER = "delete_user"
    VIEW_PROFILE = "view_profile"
    VIEW_SELLER_STATS = "view_seller_stats"
    VIEW_CURATOR_POINTS = "view_curator_points"
    VERIFY_EMAIL = "verify_email"
    WRITE_CUSTOMER_REVIEW = "write_customer_review"
    RESPOND_TO_REVIEW = "respond_to_review"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


_EVERYONE = frozenset(Role)

# Minimal roles per action; admin is implied for all of them.
PERMISSIONS: dict[Action, frozenset] = {
    Action.SUBMIT_PRODUCT: frozenset({Role.SELLER}),
    Action.EDIT_PRODUCT: frozenset({Role.SELLER}),
    Action.DELETE_PRODUCT: frozenset(),
    Action.REVIEW_PRODUCT: frozenset({Role.CURATOR}),
    Action.VIEW_REVIEW_QUEUE: frozenset({Role.CURATOR}),
    Action.VIEW_CURATION_REVIEWS: frozenset({Role.CURATOR}),
    Action.PURCHASE_PRODUCT: _EVERYONE,
    Action.UPDATE_ORDER: _EVERYONE,
    Action.VIEW_ALL_ORDERS: frozenset(),
    Action.REDEEM_PRODUCT: frozenset({Role.CURATOR}),
    Action.MANAGE_REDEEMABLES: frozenset(),
    Action.APPROVE_CURATOR: frozenset(),
    Action.MANAGE_USERS: frozenset(),
    Action.DELETE_USER: frozenset(),
    Action.VIEW_PROFILE: _EVERYONE,
    Action.VIEW_SELLER_STATS: frozenset({Role.SELLER}),
    Action.VIEW_CURATOR_POINTS: frozenset({Role.CURATOR}),
    Action.VERIFY_EMAIL: _EVERYONE,
    Action.WRITE_CUSTOMER_REVIEW: _EVERYONE,
    Action.RESPOND_TO_REVIEW: frozenset({Role.SELLER}),
}

# Curators may perform these only once an admin has approved them.
CURATOR_PRIVILEGED = frozenset({
    Action.REVIEW_PRODUCT,
    Action.VIEW_REVIEW_QUEUE,
    Action.VIEW_CURATION_REVIEWS,
    Action.REDEEM_PRODUCT,
})


@dataclass(frozen=True)
class Actor:
    """Authenticated caller, passed explicitly into every workflow."""
    id: str
    role: Role
    curator_approved: bool = False
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class Check:
    """Per-action predicate layered on top of the role table."""
    name: str
    test: Callable[[Actor], bool]
    binds_admin: bool = False


def authorize(role: Role, action: Action) -> Decision:
    """Role-level decision. Total over Role x Action."""
    if role is Role.ADMIN:
        return Decision.ALLOW
    return Decision.ALLOW if role in PERMISSIONS[action] else Decision.DENY


def _denial(actor: Optional[Actor], action: Action, checks) -> Optional[str]:
    """Reason the actor is denied, or None when allowed."""
    if actor is None:
        return "no actor"
    if authorize(actor.role, action) is Decision.DENY:
        return f"role {actor.role.value} not permitted"
    if action in CURATOR_PRIVILEGED and actor.role is Role.CURATOR and not actor.curator_approved:
        return "curator not approved"
    for check in checks:
        if actor.is_admin and not check.binds_admin:
            continue
        if not check.test(actor):
            return f"check {check.name} failed"
    return None


def permits(actor: Optional[Actor], action: Action, *checks: Check) -> bool:
    """Same rules as ensure_allowed without raising; used to narrow listings."""
    return _denial(actor, action, checks) is None


def ensure_allowed(actor: Optional[Actor], action: Action, *checks: Check) -> Actor:
    """Raise Forbidden unless actor may perform action; returns the actor."""
    reason = _denial(actor, action, checks)
    if reason is not None:
        log_unauthorized_access(actor.id if actor else None, action.value, reason)
        raise Forbidden()
    return actor


# ----- Ownership checks -----
def owns_product(product: dict) -> Check:
    return Check("owns_product", lambda actor: product.get("seller_id") == actor.id)


def owns_order(order: dict) -> Check:
    return Check("owns_order", lambda actor: order.get("customer_id") == actor.id)


def is_self(user_id: str) -> Check:
    return Check("is_self", lambda actor: actor.id == user_id)


def wrote_review(review: dict, binds_admin: bool = False) -> Check:
    return Check("wrote_review", lambda actor: review.get("customer_id") == actor.id, binds_admin=binds_admin)


def has_purchased(purchased: bool) -> Check:
    """Customer reviews need a completed order; admins are not exempt."""
    return Check("has_purchased", lambda actor: purchased, binds_admin=True)


def is_not_self(user_id: str) -> Check:
    """A user may not target their own account; applies to admins too."""
    return Check("is_not_self", lambda actor: actor.id != user_id, binds_admin=True)
