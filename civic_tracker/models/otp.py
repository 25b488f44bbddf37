from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.sql import func
from civic_tracker.database import Base


class OTPRecord(Base):
    """
    The single outstanding OTP for a phone identity.

    Lifecycle notes:
    - phone is unique: a new request overwrites the previous row (upsert),
      so there is never more than one code in flight per identity.
    - attempts counts failed verifications and is reset on regeneration.
      Once it reaches the configured ceiling the row can no longer verify.
    - The row is deleted on successful verification (one-time use).
    - An expired row is left in place; the next request overwrites it.
    - phone is the trimmed raw input, not the E.164 delivery address.
    """
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(Text, unique=True, nullable=False, index=True)
    code = Column(String(12), nullable=False)
    attempts = Column(Integer, nullable=False, default=0, server_default="0")
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
