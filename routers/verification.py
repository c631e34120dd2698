"""Email verification with one-time codes sent by email."""
from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from services.access import Actor
from services.auth import get_current_user
from services.database import get_db
from services.notifications import deliver, get_notifier, otp_message
from services.otp import OtpService

router = APIRouter(prefix="/api/verification", tags=["verification"])


class OtpVerify(BaseModel):
    code: str = Field(..., min_length=6, max_length=6)


@router.post("/otp")
def send_otp(
    background_tasks: BackgroundTasks,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Issue a code for the caller's email; any earlier code stops working."""
    email, code = OtpService(db).issue(current_user)
    subject, body = otp_message(code)
    background_tasks.add_task(deliver, notifier, email, subject, body)
    return {"message": "Verification code sent", "email": email}


@router.post("/otp/verify")
def verify_otp(
    payload: OtpVerify,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    return OtpService(db).verify(current_user, payload.code)
