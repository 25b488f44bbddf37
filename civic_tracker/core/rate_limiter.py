"""
slowapi rate limiter instance.
Import `limiter` into routers and decorate endpoints with @limiter.limit("N/period").

This is a coarse per-IP guard in front of the OTP endpoints. The per-phone
resend cooldown and attempt ceiling live in otp_service and apply no matter
which address the requests come from.

IMPORTANT: Every rate-limited endpoint MUST have `request: Request` as a parameter
(slowapi needs it to extract the client IP). The @limiter.limit decorator must be
placed BELOW the @router.xxx decorator, not above it.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from civic_tracker.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200/minute"],
    enabled=get_settings().rate_limit_enabled,
)
