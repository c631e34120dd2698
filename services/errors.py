"""Domain error taxonomy shared by workflows and routers.

Every failed operation surfaces one of these kinds; the HTTP layer maps them to
status codes in services/error_handler.py. None of them is retried.
"""


class MarketplaceError(Exception):
    """Base class for errors a caller can branch on."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(MarketplaceError):
    """Malformed or missing request data (e.g. wrong number of review scores)."""

    kind = "invalid_input"
    status_code = 400


class Forbidden(MarketplaceError):
    """Actor lacks the role, approval or ownership an action needs."""

    kind = "forbidden"
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFound(MarketplaceError):
    """Referenced entity does not exist."""

    kind = "not_found"
    status_code = 404


class InvalidState(MarketplaceError):
    """Operation not valid for the entity's current state."""

    kind = "invalid_state"
    status_code = 409
