"""
OTP service: issuance, resend throttling, and verification of phone OTPs.

Design decisions:
  1. One row per phone (unique key). A new request overwrites the previous
     code, so there is never more than one outstanding code per identity.
  2. Resend cooldown: a new code is refused until 45s after the last one was
     issued. The cooldown is based on the stored row, not on delivery
     success, which bounds SMS gateway load even when sends fail.
  3. Codes expire 5 minutes after issuance. Expired rows stay until the
     next request overwrites them.
  4. At most 5 wrong guesses per code. The increment is a conditional
     UPDATE (attempts < max) issued under a row lock, so concurrent wrong
     guesses can never push the counter past the ceiling.
  5. A matched code is removed with a conditional DELETE in the caller's
     transaction; a consumed code can't be replayed.
  6. secrets.randbelow() is cryptographically secure (unlike random.randint).
"""
import hmac
import logging
import math
import secrets
from datetime import timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civic_tracker.config import Settings
from civic_tracker.core.clock import as_utc, utcnow
from civic_tracker.core.exceptions import (
    InvalidOTPException,
    OTPDeliveryException,
    OTPExpiredException,
    OTPNotRequestedException,
    OTPRateLimitedException,
    OTPTooManyAttemptsException,
    ValidationException,
)
from civic_tracker.models.otp import OTPRecord
from civic_tracker.services.sms_service import SmsGateway, to_e164

logger = logging.getLogger(__name__)


def generate_otp(length: int = 6) -> str:
    """
    Generate a cryptographically secure numeric OTP.
    For length 6: secrets.randbelow(900000) gives 0–899999, +100000 gives
    100000–999999. Always `length` digits — no leading zero issues.
    """
    low = 10 ** (length - 1)
    return str(secrets.randbelow(9 * low) + low)


def _require(value, field: str) -> str:
    cleaned = str(value).strip() if value is not None else ""
    if not cleaned:
        raise ValidationException(f"{field} required")
    return cleaned


def _lock_record(db: Session, phone: str):
    return db.execute(
        select(OTPRecord).where(OTPRecord.phone == phone).with_for_update()
    ).scalar_one_or_none()


def request_otp(db: Session, settings: Settings, gateway: SmsGateway, phone: str) -> str:
    """
    Issue a fresh code for `phone` and send it by SMS.

    Steps:
    1. Lock the existing row (if any) and enforce the resend cooldown.
    2. Generate a code; overwrite or insert the row with attempts reset to 0.
    3. Commit, then hand the message to the gateway.

    Returns the raw code (callers must never put it in an HTTP response).
    Raises OTPRateLimitedException inside the cooldown and
    OTPDeliveryException when the gateway hard-fails; in the latter case
    the row is already committed and the cooldown still applies.
    """
    phone = _require(phone, "phone")
    cooldown = settings.otp_resend_cooldown_seconds
    now = utcnow()

    record = _lock_record(db, phone)
    if record is not None:
        elapsed = (now - as_utc(record.created_at)).total_seconds()
        if elapsed < cooldown:
            db.rollback()
            wait = min(cooldown, max(1, math.ceil(cooldown - elapsed)))
            logger.info(f"OTP resend throttled for {phone}: wait {wait}s")
            raise OTPRateLimitedException(wait)

    code = generate_otp(settings.otp_length)
    expires_at = now + timedelta(minutes=settings.otp_expiry_minutes)

    if record is None:
        db.add(OTPRecord(phone=phone, code=code, attempts=0, created_at=now, expires_at=expires_at))
    else:
        record.code = code
        record.attempts = 0
        record.created_at = now
        record.expires_at = expires_at

    try:
        db.commit()
    except IntegrityError:
        # Another request inserted the first row for this phone a moment ago
        db.rollback()
        logger.info(f"Concurrent OTP request for {phone} lost the insert race")
        raise OTPRateLimitedException(cooldown)

    logger.info(f"OTP issued for {phone}, expires at {expires_at.isoformat()}")

    body = (
        f"Your {settings.app_name} OTP is {code}. "
        f"Valid for {settings.otp_expiry_minutes} minutes."
    )
    result = gateway.send(to_e164(phone, settings.phone_country_code), body)
    if not result.delivered and not result.via_local_echo:
        logger.warning(f"OTP delivery failed for {phone}: {result.error}")
        raise OTPDeliveryException(result.error)

    return code


def consume_otp(db: Session, settings: Settings, phone: str, code: str) -> None:
    """
    Check `code` against the outstanding OTP for `phone`.

    Checks, in order:
    - a row exists                          → else OTPNotRequestedException
    - now <= expires_at                     → else OTPExpiredException
    - attempts < max                        → else OTPTooManyAttemptsException
    - code matches (constant-time compare)  → else attempts += 1 (committed)
                                              and InvalidOTPException

    On a match the row is deleted but NOT committed: the caller commits it
    together with whatever the successful sign-in writes.
    """
    phone = _require(phone, "phone")
    code = _require(code, "code")
    max_attempts = settings.otp_max_attempts

    record = _lock_record(db, phone)
    if record is None:
        db.rollback()
        raise OTPNotRequestedException()

    if utcnow() > as_utc(record.expires_at):
        db.rollback()
        raise OTPExpiredException()

    if record.attempts >= max_attempts:
        db.rollback()
        raise OTPTooManyAttemptsException()

    if not hmac.compare_digest(record.code.encode(), code.encode()):
        result = db.execute(
            update(OTPRecord)
            .where(OTPRecord.phone == phone, OTPRecord.attempts < max_attempts)
            .values(attempts=OTPRecord.attempts + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount == 0:
            raise OTPTooManyAttemptsException()
        logger.info(f"Wrong OTP for {phone}")
        raise InvalidOTPException()

    result = db.execute(
        delete(OTPRecord)
        .where(
            OTPRecord.phone == phone,
            OTPRecord.code == code,
            OTPRecord.attempts < max_attempts,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Consumed or locked out by a concurrent request since we read it
        db.rollback()
        if _lock_record(db, phone) is None:
            db.rollback()
            raise OTPNotRequestedException()
        db.rollback()
        raise OTPTooManyAttemptsException()
