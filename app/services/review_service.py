"""
Performance Review Service Layer

The review lifecycle engine. Owns every status transition, the permission
checks attached to them, score computation and item-set validation.

Architecture:
- Router -> ReviewService (this module) -> ReviewStore -> Models
- Actors arrive as already-authenticated user IDs
- Rules live here; the store only persists

Lifecycle:
    draft -> pending_approval -> pending_score -> completed
          -> pending_hr_confirmation -> archived
    rejected is reachable by reject_review; a rejected review is editable
    again and returns to draft when updated.
"""
import logging
from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import (
    AccessDeniedError,
    InvalidStateError,
    NotFoundError,
    ReviewAlreadyExistsError,
)
from app.models.performance_review import (
    EDITABLE_STATUSES,
    PerformanceItem,
    PerformanceReview,
    ReviewStatus,
)
from app.models.user import User, UserRole
from app.schemas.review import ReviewCreate, ReviewUpdate, ScoreInput
from app.services.review_scoring import aggregate_scores, calculate_grade_point, validate_items
from app.services.review_store import ReviewStore

logger = logging.getLogger(__name__)

SUBMIT_COMMENT = "Submitted for approval"

# Roles that may read any review; everyone else sees their own and their reports'
READ_ALL_ROLES = (UserRole.HR, UserRole.ADMIN)


def next_approval_status(current: ReviewStatus) -> ReviewStatus:
    """
    Where a manager's sign-off moves a review.
    A scored review goes on to HR; anything else is a plan approval.
    """
    if current == ReviewStatus.COMPLETED:
        return ReviewStatus.PENDING_HR_CONFIRMATION
    return ReviewStatus.PENDING_SCORE


class ReviewService:
    """
    Review lifecycle engine.

    Every mutating operation re-reads the review, checks the actor and the
    current status, then hands the whole change to a single store transaction.
    """

    def __init__(self, store: ReviewStore):
        self.store = store

    # --- Helpers -----------------------------------------------------------

    def _get_or_404(self, review_id: int) -> PerformanceReview:
        review = self.store.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Performance review not found", details={"review_id": review_id})
        return review

    def _get_user_or_404(self, user_id: int) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return user

    def _require_owner(self, review: PerformanceReview, actor_id: int, action: str):
        if review.user_id != actor_id:
            logger.warning(f"User {actor_id} tried to {action} review {review.id} owned by {review.user_id}")
            raise AccessDeniedError(f"You are not allowed to {action} this performance review")

    def _require_direct_manager(self, review: PerformanceReview, actor_id: int, action: str):
        owner = review.user
        manager_id = owner.manager_id if owner is not None else None
        if manager_id is None:
            logger.warning(f"Review {review.id} owner has no manager; {action} by {actor_id} refused")
            raise AccessDeniedError(f"You are not allowed to {action} this performance review")
        if manager_id != actor_id:
            logger.warning(f"User {actor_id} is not the direct manager for review {review.id}")
            raise AccessDeniedError(f"You are not allowed to {action} this performance review")

    def _require_reader(self, owner: Optional[User], actor_id: int):
        if owner is not None and actor_id in (owner.id, owner.manager_id):
            return
        actor = self.store.get_user(actor_id)
        if actor is None or actor.role not in READ_ALL_ROLES:
            logger.warning(f"User {actor_id} tried to read a review of user {owner.id if owner else None}")
            raise AccessDeniedError("You are not allowed to view this performance review")

    def _require_status(self, review: PerformanceReview, allowed, message: str):
        if ReviewStatus(review.status) not in allowed:
            raise InvalidStateError(message, current_status=review.status)

    def _require_hr(self, actor_id: int, message: str) -> User:
        actor = self.store.get_user(actor_id)
        if actor is None or not actor.is_hr:
            logger.warning(f"User {actor_id} lacks the HR role")
            raise AccessDeniedError(message)
        return actor

    def _transition(
        self,
        review: PerformanceReview,
        new_status: ReviewStatus,
        actor_id: int,
        comment: Optional[str],
    ) -> PerformanceReview:
        previous = review.status
        self.store.update_status_and_append_approval(review.id, new_status, actor_id, comment)
        logger.info(
            f"Review {review.id} moved {previous} -> {new_status.value}",
            extra={"review_id": review.id, "actor_id": actor_id},
        )
        return self._get_or_404(review.id)

    # --- Create / read -----------------------------------------------------

    def create_review(self, data: ReviewCreate, actor_id: int) -> PerformanceReview:
        """
        Create a Draft review. The owner is data.user_id when given,
        otherwise the actor. At most one review per (user, period).
        """
        owner_id = data.user_id if data.user_id is not None else actor_id
        self._get_user_or_404(owner_id)

        if self.store.get_by_user_and_period(owner_id, data.period) is not None:
            raise ReviewAlreadyExistsError(owner_id, data.period)

        review = PerformanceReview(
            user_id=owner_id,
            period=data.period,
            status=ReviewStatus.DRAFT.value,
            final_comment=data.final_comment,
            items=[PerformanceItem(**item.model_dump()) for item in data.items],
        )
        self.store.create(review)
        logger.info(f"Created review {review.id} for user {owner_id} period {data.period}")
        return self._get_or_404(review.id)

    def get_review(self, review_id: int, actor_id: int) -> PerformanceReview:
        """Readable by the owner, the owner's direct manager, HR and admins."""
        review = self._get_or_404(review_id)
        self._require_reader(review.user, actor_id)
        return review

    def list_user_reviews(self, user_id: int) -> List[PerformanceReview]:
        return self.store.list_by_user(user_id)

    def list_team_reviews(self, manager_id: int) -> List[PerformanceReview]:
        """Reviews of the manager's direct reports, drafts excluded."""
        return self.store.list_by_manager(manager_id)

    def list_all_submitted_reviews(self, caller_id: int) -> List[PerformanceReview]:
        self._require_hr(caller_id, "You are not allowed to view all submitted performance reviews")
        return self.store.list_all_submitted()

    def get_review_by_period(self, user_id: int, period: str, actor_id: int) -> Optional[PerformanceReview]:
        """None means no review exists for the period; that is not an error."""
        if user_id != actor_id:
            self._require_reader(self.store.get_user(user_id), actor_id)
        return self.store.get_by_user_and_period(user_id, period)

    def list_reviews_by_period(self, period: str) -> List[PerformanceReview]:
        return self.store.list_by_period(period)

    # --- Edit --------------------------------------------------------------

    def update_review(self, review_id: int, data: ReviewUpdate, actor_id: int) -> PerformanceReview:
        """
        Replace the item set of a Draft or Rejected review.

        Only the owner may edit. The item set is validated in full before
        anything is written. An edited review is back in Draft with its
        scores cleared, ready to be submitted again.
        """
        review = self._get_or_404(review_id)
        self._require_owner(review, actor_id, "edit")
        self._require_status(
            review,
            EDITABLE_STATUSES,
            "Only draft or rejected performance reviews can be edited",
        )
        validate_items(data.items)

        if data.period is not None and data.period != review.period:
            if self.store.get_by_user_and_period(review.user_id, data.period) is not None:
                raise ReviewAlreadyExistsError(review.user_id, data.period)
            review.period = data.period
        if data.final_comment is not None:
            review.final_comment = data.final_comment

        review.status = ReviewStatus.DRAFT.value
        review.total_score = None
        review.grade_point = None
        items = [PerformanceItem(**item.model_dump()) for item in data.items]
        self.store.replace_review(review, items)
        logger.info(f"Review {review_id} updated with {len(items)} items")
        return self._get_or_404(review_id)

    # --- Transitions -------------------------------------------------------

    def submit_review(self, review_id: int, actor_id: int) -> PerformanceReview:
        review = self._get_or_404(review_id)
        self._require_owner(review, actor_id, "submit")
        self._require_status(
            review,
            (ReviewStatus.DRAFT,),
            "Only draft performance reviews can be submitted",
        )
        return self._transition(review, ReviewStatus.PENDING_APPROVAL, actor_id, SUBMIT_COMMENT)

    def approve_review(self, review_id: int, actor_id: int, comment: Optional[str] = None) -> PerformanceReview:
        """Direct manager approves a pending plan."""
        review = self._get_or_404(review_id)
        self._require_direct_manager(review, actor_id, "approve")
        self._require_status(
            review,
            (ReviewStatus.PENDING_APPROVAL,),
            "Only performance reviews pending approval can be approved",
        )
        new_status = next_approval_status(ReviewStatus(review.status))
        return self._transition(review, new_status, actor_id, comment)

    def confirm_score(self, review_id: int, actor_id: int, comment: Optional[str] = None) -> PerformanceReview:
        """Direct manager signs off a scored review and hands it to HR."""
        review = self._get_or_404(review_id)
        self._require_direct_manager(review, actor_id, "confirm the score of")
        self._require_status(
            review,
            (ReviewStatus.COMPLETED,),
            "Only scored performance reviews can be confirmed",
        )
        new_status = next_approval_status(ReviewStatus(review.status))
        return self._transition(review, new_status, actor_id, comment)

    def archive_review(self, review_id: int, actor_id: int, comment: Optional[str] = None) -> PerformanceReview:
        """HR confirmation, the last hop of the approval chain."""
        review = self._get_or_404(review_id)
        self._require_hr(actor_id, "Only HR can confirm and archive performance reviews")
        self._require_status(
            review,
            (ReviewStatus.PENDING_HR_CONFIRMATION,),
            "Only performance reviews pending HR confirmation can be archived",
        )
        return self._transition(review, ReviewStatus.ARCHIVED, actor_id, comment)

    def reject_review(self, review_id: int, actor_id: int, comment: Optional[str] = None) -> PerformanceReview:
        """
        Send a review back to its owner.

        With the default policy any actor may reject in any status. With
        REVIEW_STRICT_REJECT the actor must be the current approver: the
        direct manager while pending approval or scored, HR while pending
        HR confirmation.
        """
        review = self._get_or_404(review_id)
        if settings.review.strict_reject:
            self._require_current_approver(review, actor_id)
        return self._transition(review, ReviewStatus.REJECTED, actor_id, comment)

    def _require_current_approver(self, review: PerformanceReview, actor_id: int):
        status = ReviewStatus(review.status)
        if status in (ReviewStatus.PENDING_APPROVAL, ReviewStatus.COMPLETED):
            self._require_direct_manager(review, actor_id, "reject")
        elif status == ReviewStatus.PENDING_HR_CONFIRMATION:
            self._require_hr(actor_id, "You are not allowed to reject this performance review")
        else:
            raise InvalidStateError(
                "This performance review is not awaiting approval",
                current_status=review.status,
            )

    # --- Scoring -----------------------------------------------------------

    def score_review(self, review_id: int, data: ScoreInput) -> PerformanceReview:
        """
        Record item scores and completion details, compute the total score and
        grade point, and mark the review Completed.

        The whole request is validated before anything is written: unknown
        item IDs and out-of-range scores abort with no partial update.
        """
        review = self._get_or_404(review_id)
        self._require_status(
            review,
            (ReviewStatus.PENDING_SCORE,),
            "Only performance reviews with an approved plan can be scored",
        )
        total_score, item_updates = aggregate_scores(review.items, data.items)
        grade_point = calculate_grade_point(total_score)

        review.total_score = total_score
        review.grade_point = grade_point
        review.final_comment = data.final_comment
        review.status = ReviewStatus.COMPLETED.value
        self.store.update_items_and_review(review, item_updates)
        logger.info(
            f"Review {review_id} scored: total={total_score} grade_point={grade_point}",
            extra={"review_id": review_id},
        )
        return self._get_or_404(review_id)
