from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from app.dependencies import get_current_user, get_review_service, require_hr_or_admin
from app.models.user import User
from app.schemas.review import (
    ReviewActionRequest,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    ScoreInput,
)
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])
team_router = APIRouter(prefix="/team", tags=["team"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.create_review(data, actor_id=current_user.id)


@router.get("", response_model=List[ReviewResponse])
def list_my_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.list_user_reviews(current_user.id)


@router.get("/by-period", response_model=Optional[ReviewResponse])
def get_review_by_period(
    period: str = Query(..., min_length=1),
    user_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """
    Returns null when the user has no review for the period. Looking up
    another user needs to be their direct manager, HR or admin.
    """
    return service.get_review_by_period(user_id or current_user.id, period, actor_id=current_user.id)


@router.get("/all-submitted", response_model=List[ReviewResponse])
def list_all_submitted_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.list_all_submitted_reviews(current_user.id)


@router.get("/all-by-period", response_model=List[ReviewResponse])
def list_reviews_by_period(
    period: str = Query(..., min_length=1),
    current_user: User = Depends(require_hr_or_admin()),
    service: ReviewService = Depends(get_review_service),
):
    return service.list_reviews_by_period(period)


@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.get_review(review_id, actor_id=current_user.id)


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.update_review(review_id, data, actor_id=current_user.id)


@router.post("/{review_id}/submit", response_model=ReviewResponse)
def submit_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.submit_review(review_id, actor_id=current_user.id)


@router.post("/{review_id}/approve", response_model=ReviewResponse)
def approve_review(
    review_id: int,
    action: Optional[ReviewActionRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    comment = action.comment if action else None
    return service.approve_review(review_id, actor_id=current_user.id, comment=comment)


@router.post("/{review_id}/reject", response_model=ReviewResponse)
def reject_review(
    review_id: int,
    action: Optional[ReviewActionRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    comment = action.comment if action else None
    return service.reject_review(review_id, actor_id=current_user.id, comment=comment)


@router.post("/{review_id}/score", response_model=ReviewResponse)
def score_review(
    review_id: int,
    data: ScoreInput,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.score_review(review_id, data)


@router.post("/{review_id}/confirm-score", response_model=ReviewResponse)
def confirm_score(
    review_id: int,
    action: Optional[ReviewActionRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    comment = action.comment if action else None
    return service.confirm_score(review_id, actor_id=current_user.id, comment=comment)


@router.post("/{review_id}/archive", response_model=ReviewResponse)
def archive_review(
    review_id: int,
    action: Optional[ReviewActionRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    comment = action.comment if action else None
    return service.archive_review(review_id, actor_id=current_user.id, comment=comment)


@team_router.get("/reviews", response_model=List[ReviewResponse])
def list_team_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Reviews of the caller's direct reports, drafts excluded."""
    return service.list_team_reviews(current_user.id)
