"""
Auth router: phone sign-in with a one-time password.

Flow:
  1. POST /auth/otp/start   {phone}        → code sent by SMS (or local echo)
  2. POST /auth/otp/verify  {phone, code}  → {token, role}

The token is a 2-hour bearer credential; there is no refresh, the citizen
simply requests a new code.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from civic_tracker.config import Settings, get_settings
from civic_tracker.database import get_db
from civic_tracker.core.dependencies import get_sms_gateway
from civic_tracker.core.rate_limiter import limiter
from civic_tracker.schemas.auth import (
    OTPStartRequest, OTPStartResponse, OTPVerifyRequest, OTPVerifyResponse,
)
from civic_tracker.services import auth_service, otp_service
from civic_tracker.services.sms_service import SmsGateway

router = APIRouter()


@router.post("/otp/start", response_model=OTPStartResponse)
@limiter.limit("5/minute")
def start_otp(
    request: Request,
    body: OTPStartRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    gateway: SmsGateway = Depends(get_sms_gateway),
):
    """
    Issue and send a code. 429 with "Please wait Ns" inside the 45s resend
    window; 502 if the SMS provider fails (the cooldown still applies).
    The code itself is never part of the response.
    """
    otp_service.request_otp(db, settings, gateway, body.phone)
    return {"ok": True, "message": "OTP sent successfully"}


@router.post("/otp/verify", response_model=OTPVerifyResponse)
@limiter.limit("10/minute")
def verify_otp(
    request: Request,
    body: OTPVerifyRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Verify the code and receive a bearer token plus the derived role."""
    token, role = auth_service.verify_phone_login(db, settings, phone=body.phone, code=body.code)
    return {"token": token, "role": role, "token_type": "bearer"}
