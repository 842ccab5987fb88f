"""FastAPI routes for the Quality domain.

Thin adapters that translate HTTP requests into domain commands. Role and
ownership checks happen here; workflow rules live in the aggregate.
Every mutating call on a check goes through the per-check guard. Commands
run in the threadpool, since scoring jobs and lock waits block.
"""

import json

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from quality.api.schemas import (
    AddCommentRequest,
    AssignmentResponse,
    AutomatedChecksResponse,
    CommentResponse,
    CompleteReviewRequest,
    CreateQualityCheckRequest,
    ManualReviewResponse,
    QualityCheckIdResponse,
    QualityCheckListResponse,
    QualityCheckResponse,
    QualityStatsResponse,
    RegisterReviewerRequest,
    ReviewerAvailabilityRequest,
    ReviewerIdResponse,
    RevisionResponse,
    RunAutomatedChecksRequest,
    StatusResponse,
    SubmitRevisionRequest,
    VersionedRequest,
)
from quality.check.assignment import AssignReviewer
from quality.check.automated import RunAutomatedChecks
from quality.check.comments import AddComment
from quality.check.creation import CreateQualityCheck
from quality.check.locking import process_guarded
from quality.check.queries import (
    get_quality_check,
    list_my_checks,
    list_overdue_checks,
    list_quality_checks,
)
from quality.check.review import CompleteManualReview, StartManualReview
from quality.check.revision import SubmitRevision
from quality.projections.quality_stats import get_quality_stats
from quality.reviewer.management import RegisterReviewer, SetReviewerAvailability
from shared.auth import Actor, current_actor
from shared.exceptions import AuthorizationError

router = APIRouter(prefix="/quality", tags=["quality"])


def _to_response(check) -> QualityCheckResponse:
    return QualityCheckResponse(
        quality_check_id=str(check.id),
        order_id=str(check.order_id),
        website_id=str(check.website_id),
        submitted_by=str(check.submitted_by),
        assigned_to=str(check.assigned_to) if check.assigned_to else None,
        title=check.title,
        status=check.status,
        priority=check.priority,
        deadline=check.deadline,
        automated_checks=check.automated_result,
        manual_review=ManualReviewResponse(
            status=check.review_status,
            review_started_at=check.review_started_at,
            review_completed_at=check.review_completed_at,
            final_verdict=check.final_verdict,
            final_comments=check.final_comments,
            revisions_requested=bool(check.revisions_requested),
        ),
        comments=[
            CommentResponse(
                author_id=str(c.author_id),
                text=c.text,
                sequence=c.sequence,
                created_at=c.created_at,
            )
            for c in check.ordered_comments()
        ],
        revisions=[
            RevisionResponse(
                revision_number=r.revision_number,
                submitted_by=str(r.submitted_by),
                submitted_at=r.submitted_at,
                changes=r.changes,
            )
            for r in check.ordered_revisions()
        ],
        tags=check.tag_list,
        version=check.lock_version or 0,
        created_at=check.created_at,
        updated_at=check.updated_at,
    )


def _to_list_response(result) -> QualityCheckListResponse:
    return QualityCheckListResponse(
        items=[_to_response(c) for c in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
    )


def _require_participant(check, actor: Actor) -> None:
    if actor.is_reviewer or str(check.submitted_by) == actor.user_id:
        return
    raise AuthorizationError({"quality_check_id": ["Only the submitter or a reviewer can access this check"]})


def _require_assigned_reviewer(check, actor: Actor) -> None:
    actor.require_reviewer()
    if actor.is_admin or not check.assigned_to or str(check.assigned_to) == actor.user_id:
        return
    raise AuthorizationError({"assigned_to": ["This check is assigned to another reviewer"]})


# ---------------------------------------------------------------------------
# Intake & reads
# ---------------------------------------------------------------------------
@router.post("/checks", status_code=201, response_model=QualityCheckIdResponse)
async def create_quality_check(
    body: CreateQualityCheckRequest,
    actor: Actor = Depends(current_actor),
) -> QualityCheckIdResponse:
    """Open a quality check for delivered content."""
    command = CreateQualityCheck(
        order_id=body.order_id,
        website_id=body.website_id,
        submitted_by=body.submitted_by or actor.user_id,
        title=body.title,
        priority=body.priority,
        deadline=body.deadline,
        tags=json.dumps(body.tags),
    )
    check_id = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return QualityCheckIdResponse(quality_check_id=check_id)


@router.get("/checks", response_model=QualityCheckListResponse)
async def list_checks(
    status: str | None = None,
    priority: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1),
    limit: int = Query(20),
    actor: Actor = Depends(current_actor),
) -> QualityCheckListResponse:
    """List checks. Reviewers see every check, other users their own submissions."""
    result = list_quality_checks(
        status=status,
        priority=priority,
        submitted_by=None if actor.is_reviewer else actor.user_id,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return _to_list_response(result)


@router.get("/checks/my", response_model=QualityCheckListResponse)
async def my_checks(
    page: int = Query(1),
    limit: int = Query(20),
    actor: Actor = Depends(current_actor),
) -> QualityCheckListResponse:
    """Checks assigned to the calling reviewer."""
    actor.require_reviewer()
    return _to_list_response(list_my_checks(actor.user_id, page=page, limit=limit))


@router.get("/checks/overdue", response_model=QualityCheckListResponse)
async def overdue_checks(
    page: int = Query(1),
    limit: int = Query(20),
    actor: Actor = Depends(current_actor),
) -> QualityCheckListResponse:
    actor.require_reviewer()
    return _to_list_response(list_overdue_checks(page=page, limit=limit))


@router.get("/checks/{quality_check_id}", response_model=QualityCheckResponse)
async def get_check(
    quality_check_id: str,
    actor: Actor = Depends(current_actor),
) -> QualityCheckResponse:
    check = get_quality_check(quality_check_id)
    _require_participant(check, actor)
    return _to_response(check)


@router.get("/stats", response_model=QualityStatsResponse)
async def quality_stats(actor: Actor = Depends(current_actor)) -> QualityStatsResponse:
    """Dashboard counters: number of checks per status."""
    actor.require_reviewer()
    return QualityStatsResponse(**get_quality_stats())


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------
@router.post("/checks/{quality_check_id}/automated", response_model=AutomatedChecksResponse)
async def run_automated_checks(
    quality_check_id: str,
    body: RunAutomatedChecksRequest,
    actor: Actor = Depends(current_actor),
) -> AutomatedChecksResponse:
    """Score the content. A scoring outage keeps the previous snapshot."""
    _require_participant(get_quality_check(quality_check_id), actor)

    command = RunAutomatedChecks(
        quality_check_id=quality_check_id,
        content=body.content,
        metadata=json.dumps(body.metadata),
        expected_version=body.expected_version,
    )
    result = await run_in_threadpool(process_guarded, command, quality_check_id)
    if result is None:
        return AutomatedChecksResponse(
            status="unavailable",
            automated_checks=get_quality_check(quality_check_id).automated_result,
        )
    return AutomatedChecksResponse(status="ok", automated_checks=result)


@router.put("/checks/{quality_check_id}/assign", response_model=AssignmentResponse)
async def assign_reviewer(
    quality_check_id: str,
    body: VersionedRequest | None = None,
    actor: Actor = Depends(current_actor),
) -> AssignmentResponse:
    actor.require_reviewer()
    command = AssignReviewer(
        quality_check_id=quality_check_id,
        expected_version=body.expected_version if body else None,
    )
    reviewer_id = await run_in_threadpool(process_guarded, command, quality_check_id)
    return AssignmentResponse(assigned_to=reviewer_id)


@router.put("/checks/{quality_check_id}/start-review", response_model=QualityCheckResponse)
async def start_review(
    quality_check_id: str,
    body: VersionedRequest | None = None,
    actor: Actor = Depends(current_actor),
) -> QualityCheckResponse:
    _require_assigned_reviewer(get_quality_check(quality_check_id), actor)
    command = StartManualReview(
        quality_check_id=quality_check_id,
        expected_version=body.expected_version if body else None,
    )
    await run_in_threadpool(process_guarded, command, quality_check_id)
    return _to_response(get_quality_check(quality_check_id))


@router.put("/checks/{quality_check_id}/complete-review", response_model=QualityCheckResponse)
async def complete_review(
    quality_check_id: str,
    body: CompleteReviewRequest,
    actor: Actor = Depends(current_actor),
) -> QualityCheckResponse:
    _require_assigned_reviewer(get_quality_check(quality_check_id), actor)
    command = CompleteManualReview(
        quality_check_id=quality_check_id,
        verdict=body.verdict,
        comments=body.comments,
        expected_version=body.expected_version,
    )
    await run_in_threadpool(process_guarded, command, quality_check_id)
    return _to_response(get_quality_check(quality_check_id))


@router.post("/checks/{quality_check_id}/comments", status_code=201, response_model=QualityCheckResponse)
async def add_comment(
    quality_check_id: str,
    body: AddCommentRequest,
    actor: Actor = Depends(current_actor),
) -> QualityCheckResponse:
    _require_participant(get_quality_check(quality_check_id), actor)
    command = AddComment(
        quality_check_id=quality_check_id,
        author_id=actor.user_id,
        text=body.text,
    )
    await run_in_threadpool(process_guarded, command, quality_check_id)
    return _to_response(get_quality_check(quality_check_id))


@router.post("/checks/{quality_check_id}/revision", status_code=201, response_model=QualityCheckResponse)
async def submit_revision(
    quality_check_id: str,
    body: SubmitRevisionRequest,
    actor: Actor = Depends(current_actor),
) -> QualityCheckResponse:
    """Only the submitter (or an admin) can answer a revision request."""
    check = get_quality_check(quality_check_id)
    if not actor.is_admin and str(check.submitted_by) != actor.user_id:
        raise AuthorizationError({"submitted_by": ["Only the submitter can submit a revision"]})

    command = SubmitRevision(
        quality_check_id=quality_check_id,
        submitted_by=actor.user_id,
        changes=body.changes,
        expected_version=body.expected_version,
    )
    await run_in_threadpool(process_guarded, command, quality_check_id)
    return _to_response(get_quality_check(quality_check_id))


# ---------------------------------------------------------------------------
# Reviewer roster
# ---------------------------------------------------------------------------
@router.post("/reviewers", status_code=201, response_model=ReviewerIdResponse)
async def register_reviewer(
    body: RegisterReviewerRequest,
    actor: Actor = Depends(current_actor),
) -> ReviewerIdResponse:
    actor.require_reviewer()
    command = RegisterReviewer(user_id=body.user_id, name=body.name)
    reviewer_id = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return ReviewerIdResponse(reviewer_id=reviewer_id)


@router.put("/reviewers/{user_id}/availability", response_model=StatusResponse)
async def set_reviewer_availability(
    user_id: str,
    body: ReviewerAvailabilityRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    actor.require_reviewer()
    command = SetReviewerAvailability(user_id=user_id, is_active=body.is_active)
    await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return StatusResponse()
