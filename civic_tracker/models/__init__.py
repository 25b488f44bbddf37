# models/__init__.py
# Import all models here so that:
# 1. Alembic's env.py can import this single module and detect all tables.
# 2. SQLAlchemy relationship() calls resolve correctly (all classes in same metadata).
# Order matters: models with no foreign keys first, then dependents.

from civic_tracker.models.user import User
from civic_tracker.models.otp import OTPRecord
from civic_tracker.models.issue import Issue, IssueEvent
from civic_tracker.models.attachment import Attachment

__all__ = [
    "User",
    "OTPRecord",
    "Issue",
    "IssueEvent",
    "Attachment",
]
