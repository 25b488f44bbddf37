"""
FastAPI dependencies used across routers.
Keep this file lean: only auth/settings/gateway dependencies go here.
Business logic belongs in services/.
"""
from functools import lru_cache

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import InvalidTokenError

from civic_tracker.config import Settings, get_settings
from civic_tracker.core.security import decode_access_token
from civic_tracker.core.exceptions import CredentialsException, ForbiddenException
from civic_tracker.schemas.auth import CurrentUser
from civic_tracker.services.sms_service import SmsGateway

# tokenUrl must match the endpoint that issues tokens
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/otp/verify")


@lru_cache()
def get_sms_gateway() -> SmsGateway:
    """One gateway per process; tests swap it via app.dependency_overrides."""
    return SmsGateway(get_settings())


def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """
    Validates the bearer credential and returns the caller's claims.

    Checks performed (in order):
    1. Token is a valid JWT signed with our secret key and not expired
    2. Token type is 'access'
    3. 'sub' (phone) and 'role' claims are present

    No DB lookup: the User row is created lazily by the operations that need it.
    """
    try:
        payload = decode_access_token(settings, token)
    except InvalidTokenError:
        raise CredentialsException()

    phone = payload.get("sub")
    role = payload.get("role")
    if not phone or role not in ("citizen", "admin"):
        raise CredentialsException()
    return CurrentUser(phone=phone, role=role)


def get_current_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Requires the authenticated caller to hold the admin role."""
    if current_user.role != "admin":
        raise ForbiddenException("Admin access required")
    return current_user
