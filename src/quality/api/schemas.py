"""Pydantic request/response models for the Quality API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class CreateQualityCheckRequest(BaseModel):
    order_id: str = Field(..., min_length=1)
    website_id: str = Field(..., min_length=1)
    submitted_by: str | None = Field(None, description="Defaults to the calling user")
    title: str | None = Field(None, max_length=255)
    priority: str = Field("medium", examples=["high"])
    deadline: datetime | None = None
    tags: list[str] = []


class RunAutomatedChecksRequest(BaseModel):
    content: str = Field(..., min_length=1)
    metadata: dict = Field(
        default_factory=dict,
        description="references, site_domain and link_status from the crawler",
    )
    expected_version: int | None = None


class VersionedRequest(BaseModel):
    expected_version: int | None = None


class CompleteReviewRequest(BaseModel):
    verdict: str = Field(..., examples=["approved"])
    comments: str | None = None
    expected_version: int | None = None


class AddCommentRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class SubmitRevisionRequest(BaseModel):
    changes: str | None = Field(None, max_length=10000)
    expected_version: int | None = None


class RegisterReviewerRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)


class ReviewerAvailabilityRequest(BaseModel):
    is_active: bool


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class QualityCheckIdResponse(BaseModel):
    quality_check_id: str


class CommentResponse(BaseModel):
    author_id: str
    text: str
    sequence: int
    created_at: datetime


class RevisionResponse(BaseModel):
    revision_number: int
    submitted_by: str
    submitted_at: datetime
    changes: str | None = None


class ManualReviewResponse(BaseModel):
    status: str
    review_started_at: datetime | None = None
    review_completed_at: datetime | None = None
    final_verdict: str | None = None
    final_comments: str | None = None
    revisions_requested: bool = False


class QualityCheckResponse(BaseModel):
    quality_check_id: str
    order_id: str
    website_id: str
    submitted_by: str
    assigned_to: str | None = None
    title: str | None = None
    status: str
    priority: str
    deadline: datetime | None = None
    automated_checks: dict | None = None
    manual_review: ManualReviewResponse
    comments: list[CommentResponse] = []
    revisions: list[RevisionResponse] = []
    tags: list[str] = []
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class QualityCheckListResponse(BaseModel):
    items: list[QualityCheckResponse]
    total: int
    page: int
    limit: int


class AutomatedChecksResponse(BaseModel):
    status: str
    automated_checks: dict | None = None


class AssignmentResponse(BaseModel):
    assigned_to: str


class QualityStatsResponse(BaseModel):
    total: int = 0
    pending: int = 0
    under_review: int = 0
    in_progress: int = 0
    needs_revision: int = 0
    passed: int = 0
    failed: int = 0


class ReviewerIdResponse(BaseModel):
    reviewer_id: str
