"""
Issues router: file, list, inspect, and move issues through statuses.

Endpoints:
  POST /issues                 → file an issue (any signed-in caller)
  GET  /issues                 → filtered list, newest first
  GET  /issues/{id}            → one issue with attachments
  GET  /issues/{id}/events     → status history, oldest first
  POST /issues/{id}/status     → set a new status (admin only)
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from civic_tracker.database import get_db
from civic_tracker.core.dependencies import get_current_admin, get_current_user
from civic_tracker.schemas.auth import CurrentUser
from civic_tracker.schemas.issue import (
    IssueCreateRequest, IssueCreateResponse, IssueHistoryResponse, IssueEventOut,
    IssueListResponse, IssueOut, StatusUpdateRequest, StatusUpdateResponse,
)
from civic_tracker.services import issue_service
from civic_tracker.services.issue_service import IssueFilters

router = APIRouter()


@router.post("", response_model=IssueCreateResponse)
def create_issue(
    body: IssueCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    File a new issue with status "Created".
    Attachment references that are missing filename, mime or a numeric size
    are dropped silently; the issue is still created.
    """
    issue = issue_service.create_issue(
        db,
        category=body.category,
        description=body.description,
        lat=body.coords.lat,
        lng=body.coords.lng,
        actor=current_user,
        attachments=body.attachments,
    )
    return {"id": issue.id}


@router.get("", response_model=IssueListResponse)
def list_issues(
    status: Optional[str] = Query(None, description="Comma-separated status labels"),
    category: Optional[str] = Query(None, description='Exact category, or "All"'),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    q: Optional[str] = Query(None, description="Search category and description"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    filters = IssueFilters.from_query(
        status=status, category=category, date_from=date_from, date_to=date_to, q=q,
    )
    items = [IssueOut.from_issue(i) for i in issue_service.list_issues(db, filters)]
    return IssueListResponse(items=items, total=len(items))


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return IssueOut.from_issue(issue_service.get_issue_or_404(db, issue_id))


@router.get("/{issue_id}/events", response_model=IssueHistoryResponse)
def get_issue_events(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Current status is read off the last event, so it always agrees with the history."""
    events = issue_service.list_events(db, issue_id)
    return IssueHistoryResponse(
        issue_id=issue_id,
        status=events[-1].status,
        events=[IssueEventOut.model_validate(e) for e in events],
    )


@router.post("/{issue_id}/status", response_model=StatusUpdateResponse)
def update_status(
    issue_id: int,
    body: StatusUpdateRequest,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin),
):
    """Any non-empty label is accepted; 404 for an unknown issue."""
    issue = issue_service.transition_status(db, issue_id, body.status, actor=admin)
    return {"ok": True, "status": issue.status}
