"""
User service: role derivation and lazy user creation.
Callers own the transaction; nothing here commits.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session

from civic_tracker.config import Settings
from civic_tracker.models.user import User

ROLE_ADMIN = "admin"
ROLE_CITIZEN = "citizen"


def derive_role(settings: Settings, phone: str) -> str:
    """Admin if the phone is on the configured allow-list, citizen otherwise."""
    return ROLE_ADMIN if phone in settings.admin_phone_list else ROLE_CITIZEN


def upsert_user(db: Session, phone: str, role: str, overwrite_role: bool = True) -> User:
    """
    Return the user for this phone, creating it if needed.

    overwrite_role=True  → an existing row takes the given role (OTP sign-in
                           re-derives the role every time).
    overwrite_role=False → an existing row keeps its role (issue creation).

    The row is flushed, not committed, so it joins the caller's transaction.
    """
    user = db.execute(select(User).where(User.phone == phone)).scalar_one_or_none()
    if user is None:
        user = User(phone=phone, role=role)
        db.add(user)
    elif overwrite_role:
        user.role = role
    db.flush()
    return user
