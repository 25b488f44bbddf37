from sqlalchemy import Column, ForeignKey, Integer, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from civic_tracker.core.clock import utcnow
from civic_tracker.database import Base


class Attachment(Base):
    """
    Metadata for a photo linked to an issue. The bytes live in the upload
    directory under `filename`; this row only records what was uploaded.
    Rows are written at issue creation time only.
    """
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(
        Integer,
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename = Column(Text, nullable=False)
    mime = Column(Text, nullable=False)
    size = Column(Integer, nullable=False)
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────────
    issue = relationship("Issue", back_populates="attachments")
