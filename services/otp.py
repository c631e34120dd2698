"""Email verification with one-time codes.

A 6-digit code is issued per email address, valid for 15 minutes, replacing any
earlier code. Delivery is the caller's job (see services/notifications.py).
"""
import logging
import secrets
from datetime import timedelta

from database_adapter import User, VerificationCode, utcnow_naive
from services.access import Action, Actor, ensure_allowed
from services.errors import InvalidInput, InvalidState, NotFound

logger = logging.getLogger(__name__)

OTP_TTL = timedelta(minutes=15)


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


class OtpService:

    def __init__(self, db):
        self.db = db

    def issue(self, actor: Actor) -> tuple[str, str]:
        """Create a fresh code for the actor's email. Returns (email, code)."""
        ensure_allowed(actor, Action.VERIFY_EMAIL)
        code = generate_otp()

        with self.db.transaction() as session:
            user = session.get(User, actor.id)
            if user is None:
                raise NotFound("User not found")
            if user.email_verified:
                raise InvalidState("Email is already verified")

            session.query(VerificationCode).filter(VerificationCode.identifier == user.email).delete()
            session.add(VerificationCode(
                identifier=user.email,
                code=code,
                expires_at=utcnow_naive() + OTP_TTL,
            ))
            email = user.email

        logger.info(f"Verification code issued for user {actor.id}")
        return email, code

    def verify(self, actor: Actor, code: str) -> dict:
        ensure_allowed(actor, Action.VERIFY_EMAIL)
        expired = False

        with self.db.transaction() as session:
            user = session.get(User, actor.id)
            if user is None:
                raise NotFound("User not found")
            if user.email_verified:
                raise InvalidState("Email is already verified")

            record = (
                session.query(VerificationCode)
                .filter(VerificationCode.identifier == user.email, VerificationCode.code == code)
                .first()
            )
            if record is None:
                raise InvalidInput("Invalid verification code")

            # Codes for this address are spent either way
            session.query(VerificationCode).filter(VerificationCode.identifier == user.email).delete()
            if record.expires_at < utcnow_naive():
                expired = True
            else:
                user.email_verified = True

        if expired:
            raise InvalidInput("Verification code has expired")
        logger.info(f"Email verified for user {actor.id}")
        return {"verified": True}
