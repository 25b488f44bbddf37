"""
Issue service: creation, filtering, and status transitions.

Every status change writes two things: the issue's `status` column and a new
IssueEvent row. They are always committed together, and transitions lock the
issue row first (SELECT FOR UPDATE), so concurrent transitions on one issue
serialize and the cached status always equals the latest event's status.

Events are INSERT-only; nothing in this module updates or deletes them.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from civic_tracker.core.exceptions import NotFoundException
from civic_tracker.models.issue import Issue, IssueEvent
from civic_tracker.schemas.auth import CurrentUser
from civic_tracker.services.attachment_service import link_attachments
from civic_tracker.services.user_service import upsert_user

logger = logging.getLogger(__name__)

STATUS_CREATED = "Created"
ALL_CATEGORIES = "All"


@dataclass
class IssueFilters:
    """
    Optional filters for list_issues, AND-ed together.

    statuses   : keep issues whose status is in this set
    category   : exact match; "All" or None selects every category
    date_from  : created on or after 00:00 UTC of this date
    date_to    : created on or before 23:59:59.999999 UTC of this date
    q          : case-insensitive substring of category or description
    """
    statuses: list[str] = field(default_factory=list)
    category: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    q: Optional[str] = None

    @classmethod
    def from_query(cls, status=None, category=None, date_from=None, date_to=None, q=None) -> "IssueFilters":
        """Build filters from raw query-string values (status is comma-separated)."""
        statuses = [s.strip() for s in (status or "").split(",") if s.strip()]
        return cls(
            statuses=statuses,
            category=category.strip() if category and category.strip() else None,
            date_from=date_from,
            date_to=date_to,
            q=q.strip() if q and q.strip() else None,
        )


def _append_event(db: Session, issue_id: int, status: str, actor_phone: Optional[str]) -> IssueEvent:
    event = IssueEvent(issue_id=issue_id, status=status, actor_phone=actor_phone)
    db.add(event)
    return event


def create_issue(
    db: Session,
    category: str,
    description: str,
    lat: float,
    lng: float,
    actor: Optional[CurrentUser] = None,
    attachments: Optional[Any] = None,
) -> Issue:
    """
    Create an issue in one transaction:
      1. upsert the actor's user row (an existing role is preserved)
      2. insert the issue with status "Created"
      3. link well-formed attachment references
      4. append the "Created" event attributed to the actor

    actor=None files the issue anonymously.
    """
    actor_phone = actor.phone if actor else None
    try:
        creator = upsert_user(db, actor.phone, actor.role, overwrite_role=False) if actor else None

        issue = Issue(
            category=category,
            description=description or "",
            lat=lat,
            lng=lng,
            status=STATUS_CREATED,
            created_by_id=creator.id if creator else None,
        )
        db.add(issue)
        db.flush()  # flush to get the id assigned without committing

        link_attachments(db, issue.id, attachments)
        _append_event(db, issue.id, STATUS_CREATED, actor_phone)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(issue)
    logger.info(f"Issue {issue.id} created (category={category}, by={actor_phone or 'anonymous'})")
    return issue


def get_issue_or_404(db: Session, issue_id: int) -> Issue:
    issue = db.execute(
        select(Issue)
        .where(Issue.id == issue_id)
        .options(selectinload(Issue.attachments))
    ).scalar_one_or_none()
    if issue is None:
        raise NotFoundException("Issue")
    return issue


def list_issues(db: Session, filters: Optional[IssueFilters] = None) -> list[Issue]:
    """Issues matching every given filter, most recently created first."""
    filters = filters or IssueFilters()
    stmt = select(Issue).options(selectinload(Issue.attachments))

    if filters.statuses:
        stmt = stmt.where(Issue.status.in_(filters.statuses))

    if filters.category and filters.category != ALL_CATEGORIES:
        stmt = stmt.where(Issue.category == filters.category)

    if filters.date_from:
        start = datetime.combine(filters.date_from, time.min, tzinfo=timezone.utc)
        stmt = stmt.where(Issue.created_at >= start)

    if filters.date_to:
        end = datetime.combine(filters.date_to, time.max, tzinfo=timezone.utc)
        stmt = stmt.where(Issue.created_at <= end)

    if filters.q:
        needle = filters.q.lower()
        stmt = stmt.where(
            or_(
                func.lower(Issue.description).contains(needle, autoescape=True),
                func.lower(Issue.category).contains(needle, autoescape=True),
            )
        )

    # ids are assigned in creation order
    stmt = stmt.order_by(Issue.id.desc())
    return list(db.execute(stmt).scalars().all())


def transition_status(
    db: Session,
    issue_id: int,
    new_status: str,
    actor: Optional[CurrentUser] = None,
) -> Issue:
    """
    Set a new status label and append the matching event, atomically.

    Any non-empty label is accepted; there is no fixed transition graph.
    Raises NotFoundException for an unknown issue id.
    """
    actor_phone = actor.phone if actor else None
    try:
        issue = db.execute(
            select(Issue).where(Issue.id == issue_id).with_for_update()
        ).scalar_one_or_none()
        if issue is None:
            raise NotFoundException("Issue")

        previous = issue.status
        issue.status = new_status
        _append_event(db, issue.id, new_status, actor_phone)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(issue)
    logger.info(f"Issue {issue_id}: {previous} -> {new_status} (by={actor_phone or 'anonymous'})")
    return issue


def list_events(db: Session, issue_id: int) -> list[IssueEvent]:
    """Full status history of an issue, oldest first."""
    get_issue_or_404(db, issue_id)
    return list(
        db.execute(
            select(IssueEvent)
            .where(IssueEvent.issue_id == issue_id)
            .order_by(IssueEvent.id.asc())
        ).scalars().all()
    )
