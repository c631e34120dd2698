"""Atomic point balance updates.

Balances are changed with a single UPDATE ... SET col = col + n statement inside
the caller's transaction, never read-then-write, so concurrent credits to the
same user cannot lose updates. Debits carry a WHERE col >= n guard so a balance
never goes negative.
"""
from sqlalchemy import update
from sqlalchemy.orm import Session

from database_adapter import User, utcnow_naive

SELLER = User.seller_points
CURATOR = User.curator_points


def credit(session: Session, user_id: str, column, amount: int) -> bool:
    """Add amount to the user's balance. False when the user does not exist."""
    result = session.execute(
        update(User)
        .where(User.id == user_id)
        .values({column: column + amount, User.updated_at: utcnow_naive()})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def debit(session: Session, user_id: str, column, amount: int) -> bool:
    """Subtract amount if the balance covers it. False when it does not (or no such user)."""
    result = session.execute(
        update(User)
        .where(User.id == user_id, column >= amount)
        .values({column: column - amount, User.updated_at: utcnow_naive()})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def balance(session: Session, user_id: str, column) -> int:
    value = session.query(column).filter(User.id == user_id).scalar()
    return value or 0
