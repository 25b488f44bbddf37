"""
Auth service: phone sign-in built on top of the OTP service.
Keeps routers thin — routers only handle HTTP, services handle logic.
"""
import logging

from sqlalchemy.orm import Session

from civic_tracker.config import Settings
from civic_tracker.core.security import create_access_token
from civic_tracker.services import otp_service
from civic_tracker.services.user_service import derive_role, upsert_user

logger = logging.getLogger(__name__)


def verify_phone_login(db: Session, settings: Settings, phone: str, code: str) -> tuple[str, str]:
    """
    Verifies the OTP for `phone` and signs the caller in.
    Returns (access_token, role).

    The OTP deletion and the user upsert commit together, so a failure here
    leaves the code usable and no half-created user behind.
    """
    otp_service.consume_otp(db, settings, phone, code)

    phone = phone.strip()
    role = derive_role(settings, phone)
    try:
        upsert_user(db, phone, role, overwrite_role=True)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Phone {phone} signed in as {role}")
    return create_access_token(settings, phone, role), role
