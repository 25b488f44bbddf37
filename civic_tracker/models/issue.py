from sqlalchemy import Column, Float, ForeignKey, Integer, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from civic_tracker.core.clock import utcnow
from civic_tracker.database import Base


class Issue(Base):
    """
    A reported civic issue.

    status is a cache of the latest IssueEvent's status. Only issue_service
    writes it, always in the same commit as the event that sets it.
    Status labels are free-form; there is no fixed transition graph.
    """
    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="Created", server_default="Created", index=True)
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    # SET NULL: anonymous issues have no creator
    created_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────
    creator = relationship("User", back_populates="issues")
    events = relationship(
        "IssueEvent",
        back_populates="issue",
        order_by="IssueEvent.id",
        cascade="all, delete-orphan",
    )
    attachments = relationship(
        "Attachment",
        back_populates="issue",
        order_by="Attachment.id",
        cascade="all, delete-orphan",
    )


class IssueEvent(Base):
    """
    Append-only status history for an issue.
    Records are INSERT-only — never updated or deleted.
    Ordered by id, the last event's status is the issue's current status.
    """
    __tablename__ = "issue_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(
        Integer,
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(Text, nullable=False)
    at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    # Phone of the caller who caused the event; NULL for anonymous actions
    actor_phone = Column(Text, nullable=True)

    # ── Relationships ──────────────────────────────────────────────────────────
    issue = relationship("Issue", back_populates="events")
