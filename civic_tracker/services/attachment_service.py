"""
Attachment linker: turns client-supplied upload references into Attachment
rows for a new issue.

A reference is kept only if it has a non-empty filename, a non-empty mime
type and a whole-number size that fits the size column. Anything else is
dropped without an error, so a caller can lose some attachments silently;
the issue is still created.
"""
import logging
import math
from numbers import Real
from typing import Any, Optional

from sqlalchemy.orm import Session

from civic_tracker.models.attachment import Attachment

logger = logging.getLogger(__name__)

# attachments.size is a 32-bit INTEGER
MAX_SIZE = 2**31 - 1


def is_well_formed(ref: Any) -> bool:
    if not isinstance(ref, dict):
        return False
    filename = ref.get("filename")
    mime = ref.get("mime")
    size = ref.get("size")
    if not isinstance(filename, str) or not filename.strip():
        return False
    if not isinstance(mime, str) or not mime.strip():
        return False
    # bool is an int subclass; True is not a size
    if not isinstance(size, Real) or isinstance(size, bool):
        return False
    # JSON allows NaN/Infinity; 2048.0 is fine, 2048.5 is not
    if isinstance(size, float) and not (math.isfinite(size) and size.is_integer()):
        return False
    return 0 <= size <= MAX_SIZE


def link_attachments(db: Session, issue_id: int, refs: Optional[Any]) -> list[Attachment]:
    """
    Adds an Attachment row per well-formed reference to the session.
    Does not commit; runs inside issue creation's transaction.
    Anything other than a list of references links nothing.
    """
    if not refs:
        return []
    if not isinstance(refs, list):
        logger.info(f"Issue {issue_id}: ignored non-list attachments value")
        return []

    rows = [
        Attachment(
            issue_id=issue_id,
            filename=ref["filename"].strip(),
            mime=ref["mime"].strip(),
            size=int(ref["size"]),
        )
        for ref in refs
        if is_well_formed(ref)
    ]
    dropped = len(refs) - len(rows)
    if dropped:
        logger.info(f"Issue {issue_id}: dropped {dropped} malformed attachment reference(s)")

    db.add_all(rows)
    return rows
