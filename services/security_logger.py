"""Security event logging.

Authentication failures and denied actions go to the "security" logger so they
can be routed separately from application logs. Callers never learn which rule
denied them; the detail lives here only.
"""
import logging
from typing import Optional

security_logger = logging.getLogger("security")


def log_auth_failure(user_id: Optional[str], reason: str):
    security_logger.warning(f"Authentication failure: user={user_id or 'anonymous'} reason={reason}")


def log_unauthorized_access(user_id: Optional[str], action: str, reason: str):
    security_logger.warning(f"Access denied: user={user_id or 'anonymous'} action={action} reason={reason}")
