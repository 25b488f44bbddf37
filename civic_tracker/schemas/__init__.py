from civic_tracker.schemas.auth import (
    OTPStartRequest, OTPStartResponse, OTPVerifyRequest, OTPVerifyResponse, CurrentUser
)
from civic_tracker.schemas.issue import (
    Coordinates, IssueCreateRequest, IssueCreateResponse, IssueOut, IssueListResponse,
    IssueEventOut, IssueHistoryResponse, StatusUpdateRequest, StatusUpdateResponse,
    AttachmentOut, UploadResponse
)
