from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from civic_tracker.core.clock import utcnow
from civic_tracker.database import Base


class User(Base):
    """
    One row per phone identity. Created lazily on first OTP verification or
    on the first issue an authenticated caller files. Never deleted.

    role is "citizen" or "admin" and is derived from the phone number
    (see user_service.derive_role). The client never chooses it.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(Text, unique=True, nullable=False, index=True)
    role = Column(String(16), nullable=False, default="citizen")
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────────
    issues = relationship("Issue", back_populates="creator")
