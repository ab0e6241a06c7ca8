"""
Submissions API routes.
Handles iteration submission, likes, mutes, views, and listing.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from sqlalchemy.orm import Session

from nitpick.auth.jwt_handler import get_current_user
from nitpick.database import get_db
from nitpick.middleware.rate_limiter import limiter, submissions_limit, likes_limit
from nitpick.models.problem import Problem
from nitpick.models.submission import Submission
from nitpick.models.user import User
from nitpick.queries.submissions import SubmissionQuery
from nitpick.schemas.submission import (
    SubmissionCreate,
    SubmissionResponse,
    SubmissionDetailResponse,
    ViewResponse,
)
from nitpick.services.submission_service import SubmissionService

router = APIRouter()


def _get_submission_or_404(service: SubmissionService, key: str) -> Submission:
    submission = service.get_by_key(key)
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found"
        )
    return submission


def _detail(submission: Submission, user: User) -> SubmissionDetailResponse:
    prior = submission.prior_version()
    base = SubmissionResponse.model_validate(submission).model_dump()
    return SubmissionDetailResponse(
        **base,
        solution=submission.solution,
        view_count=submission.view_count(),
        prior_version_key=prior.key if prior else None,
        is_muted=submission.is_muted_by(user),
        discussion_involves_user=submission.discussion_involves_user,
    )


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(submissions_limit)
async def create_submission(
    request: Request,
    submission_data: SubmissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Submit a new iteration on a problem.

    Every earlier live iteration on the same problem is superseded.
    """
    service = SubmissionService(db)
    problem = Problem(submission_data.language, submission_data.slug)
    exercise = service.exercise_for(current_user, problem)

    submission = service.start_on(
        current_user,
        problem,
        user_exercise=exercise,
        solution=submission_data.solution,
    )

    service.supersede_earlier(submission)

    return submission


@router.get("", response_model=List[SubmissionResponse])
async def list_submissions(
    language: Optional[str] = None,
    pending: bool = False,
    aging: bool = False,
    recent: bool = False,
    unmuted: bool = False,
    exclude_hello: bool = False,
    exclude_mine: bool = False,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List submissions, newest first.

    Each flag narrows the result further; all filters combine into one query.
    """
    query = SubmissionQuery()
    if aging:
        query = query.aging()
    elif pending:
        query = query.pending()
    if recent:
        query = query.recent()
    if language:
        query = query.for_language(language)
    if unmuted:
        query = query.unmuted_for(current_user)
    if exclude_hello:
        query = query.excluding_hello()
    if exclude_mine:
        query = query.not_submitted_by(current_user)

    return query.reversed().limit(limit).all(db)


@router.get("/random", response_model=SubmissionResponse)
async def random_completed_submission(
    language: str,
    slug: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Pick one completed submission for a problem at random."""
    submission = SubmissionQuery().random_completed_for(db, Problem(language, slug))
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No completed submissions for this problem"
        )
    return submission


@router.get("/{key}", response_model=SubmissionDetailResponse)
async def get_submission(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Show a submission and note that the current user has seen it."""
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)

    service.mark_viewed(submission, current_user, commit=True)
    if submission.user_exercise_id is not None:
        service.record_view(submission, current_user)

    return _detail(submission, current_user)


@router.post("/{key}/view", response_model=ViewResponse)
async def mark_submission_viewed(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a submission viewed; reports failure instead of raising."""
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    outcome = service.mark_viewed(submission, current_user, commit=True)
    return ViewResponse(recorded=outcome.recorded, error=outcome.error)


@router.get("/{key}/participants", response_model=List[SubmissionResponse])
async def list_participant_submissions(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active submissions to the same problem by everyone in the discussion."""
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    return submission.participant_submissions(current_user)


@router.post("/{key}/like", response_model=SubmissionResponse)
@limiter.limit(likes_limit)
async def like_submission(
    request: Request,
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    return service.like(submission, current_user)


@router.delete("/{key}/like", response_model=SubmissionResponse)
@limiter.limit(likes_limit)
async def unlike_submission(
    request: Request,
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    return service.unlike(submission, current_user)


@router.post("/{key}/mute", response_model=SubmissionResponse)
async def mute_submission(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    return service.mute(submission, current_user, commit=True)


@router.delete("/{key}/mute", response_model=SubmissionResponse)
async def unmute_submission(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    return service.unmute(submission, current_user, commit=True)


@router.delete("/{key}/mutes", response_model=SubmissionResponse)
async def unmute_everyone(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Clear every mute on a submission. Only the author may do this."""
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    if submission.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can clear mutes"
        )
    return service.unmute_all(submission)


@router.post("/{key}/supersede", response_model=SubmissionResponse)
async def supersede_submission(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    if submission.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can supersede a submission"
        )
    return service.supersede(submission)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = SubmissionService(db)
    submission = _get_submission_or_404(service, key)
    if submission.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can delete a submission"
        )
    service.destroy(submission)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
