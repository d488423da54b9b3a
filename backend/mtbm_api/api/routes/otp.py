"""OTP API - Email verification codes"""
from fastapi import APIRouter, Depends
from pymongo.database import Database

from ..deps import get_db, get_mail_service, get_settings_dep
from ..schemas import SendOtpRequest, VerifyOtpRequest
from ...config.settings import Settings
from ...services.mail_service import MailService
from ...services.otp_service import OtpService

router = APIRouter()


def get_otp_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    mail_service: MailService = Depends(get_mail_service)
) -> OtpService:
    return OtpService(db, settings, mail_service)


@router.post("/send-otp")
def send_otp(
    payload: SendOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    """Email a fresh six-digit code; the response waits for delivery"""
    service.issue(payload.email)
    return {"message": "OTP sent successfully"}


@router.post("/verify-otp")
def verify_otp(
    payload: VerifyOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    service.verify(payload.email, payload.otp)
    return {"message": "OTP verified successfully", "verified": True}
