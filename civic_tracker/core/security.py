"""
Credential minting and verification.
Uses PyJWT (not python-jose) — actively maintained, no known CVEs as of 2026.

A credential asserts {phone, role}. There are no refresh tokens: when the
2-hour access token expires the citizen signs in again with a fresh OTP.
"""
import jwt
from jwt.exceptions import InvalidTokenError
from datetime import timedelta

from civic_tracker.config import Settings
from civic_tracker.core.clock import utcnow


def create_access_token(settings: Settings, phone: str, role: str) -> str:
    """
    Access token valid for settings.access_token_expire_minutes (2 hours).
    'sub' carries the phone identity exactly as it was verified.

    PyJWT 2.x note: jwt.encode() returns str directly — no need to call .decode().
    Always use timezone-aware datetimes to avoid PyJWT deprecation warnings.
    """
    now = utcnow()
    payload = {
        "sub": phone,
        "role": role,
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(settings: Settings, token: str) -> dict:
    """
    Decodes and validates an access token.
    Raises jwt.exceptions.InvalidTokenError (or subclass) on any failure.
    The caller is responsible for converting this into an HTTPException.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    if payload.get("type") != "access":
        raise InvalidTokenError("Not an access token")
    return payload
