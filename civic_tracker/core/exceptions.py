"""
Centralised custom exceptions.
Services raise these directly; FastAPI renders them as JSON error responses.
Each OTP failure has its own message so a client can tell "request a new
code" apart from "try again".
"""
from typing import Optional

from fastapi import HTTPException, status


class CredentialsException(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(HTTPException):
    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundException(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class ValidationException(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


# ── OTP ───────────────────────────────────────────────────────────────────────

class OTPRateLimitedException(HTTPException):
    """A code was requested again before the resend cooldown elapsed."""

    def __init__(self, wait_seconds: int):
        self.wait_seconds = wait_seconds
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Please wait {wait_seconds}s",
            headers={"Retry-After": str(wait_seconds)},
        )


class OTPNotRequestedException(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request an OTP first",
        )


class OTPExpiredException(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="OTP expired",
        )


class OTPTooManyAttemptsException(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many attempts",
        )


class InvalidOTPException(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid OTP",
        )


class OTPDeliveryException(HTTPException):
    """The SMS transport refused or failed the message. The OTP row is kept."""

    def __init__(self, reason: Optional[str] = None):
        detail = "Failed to send OTP"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
