"""Point ledger: fixed point awards for seller and curator actions.

Pure lookups with no state. Callers apply the returned deltas inside the same
transaction as the status change that earned them.
"""

SELLER_POINTS = {
    "submit": 2,
    "approved": 10,
    "rejected": 5,
}

CURATOR_POINTS_BY_CATEGORY = {
    "ebook": 300,
    "ecourse": 300,
    "resep_masakan": 200,
    "jasa_design": 200,
    "software": 200,
}

DEFAULT_CURATOR_POINTS = 200

CURATOR_ONBOARDING_GRANT = 100


def seller_points_for(action: str) -> int:
    """Points a seller earns for 'submit', 'approved' or 'rejected'; 0 otherwise."""
    return SELLER_POINTS.get(action, 0)


def curator_points_for(category: str) -> int:
    """Points a curator earns for reviewing a product of this category."""
    return CURATOR_POINTS_BY_CATEGORY.get(category, DEFAULT_CURATOR_POINTS)


def curator_onboarding_grant() -> int:
    return CURATOR_ONBOARDING_GRANT
