"""
Issue schemas: create/list/status requests and their responses.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime


class Coordinates(BaseModel):
    # strict: "12.9" as a string is rejected; ints are accepted as floats
    lat: float = Field(strict=True, allow_inf_nan=False)
    lng: float = Field(strict=True, allow_inf_nan=False)


class IssueCreateRequest(BaseModel):
    category: str
    description: Optional[str] = ""
    coords: Coordinates
    # Raw references from /upload. Malformed entries, and a value that is
    # not a list at all, are dropped by the attachment linker, not rejected here.
    attachments: Optional[Any] = None

    @field_validator("category")
    @classmethod
    def category_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("category required")
        return v

    @field_validator("description")
    @classmethod
    def description_default(cls, v: Optional[str]) -> str:
        return v or ""


class IssueCreateResponse(BaseModel):
    id: int


class StatusUpdateRequest(BaseModel):
    status: str = "Assigned"

    @field_validator("status")
    @classmethod
    def status_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("status must not be empty")
        return v


class StatusUpdateResponse(BaseModel):
    ok: bool = True
    status: str


class AttachmentOut(BaseModel):
    id: int
    url: str
    mime: str
    size: int


class IssueOut(BaseModel):
    id: int
    category: str
    description: str
    status: str
    created_at: datetime
    coords: Coordinates
    attachments: List[AttachmentOut] = []

    @classmethod
    def from_issue(cls, issue) -> "IssueOut":
        """Flattens lat/lng into coords and turns attachment rows into URLs."""
        return cls(
            id=issue.id,
            category=issue.category,
            description=issue.description,
            status=issue.status,
            created_at=issue.created_at,
            coords=Coordinates(lat=issue.lat, lng=issue.lng),
            attachments=[
                AttachmentOut(id=a.id, url=f"/uploads/{a.filename}", mime=a.mime, size=a.size)
                for a in issue.attachments
            ],
        )


class IssueListResponse(BaseModel):
    items: List[IssueOut]
    total: int


class IssueEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    at: datetime
    actor_phone: Optional[str] = None


class IssueHistoryResponse(BaseModel):
    issue_id: int
    status: str
    events: List[IssueEventOut]


class UploadResponse(BaseModel):
    """Shape a client passes back verbatim as an attachment reference."""
    ok: bool = True
    filename: str
    mime: str
    size: int
    url: str
