"""
Review Store

Persistence for performance reviews, their items and approval history.
Every multi-row write runs inside _unit_of_work(): either all of it
commits or the session is rolled back and StoreError is raised.
"""
from contextlib import contextmanager
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ReviewAlreadyExistsError, StoreError
from app.models.performance_review import (
    ApprovalHistory,
    PerformanceItem,
    PerformanceReview,
    ReviewStatus,
)
from app.models.user import User
from app.services.base import BaseService


def _with_details(query):
    return query.options(
        selectinload(PerformanceReview.user).selectinload(User.department),
        selectinload(PerformanceReview.items),
        selectinload(PerformanceReview.approvals),
    )


class ReviewStore(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)

    @contextmanager
    def _unit_of_work(self, action: str):
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Store failure during {action}: {e}", exc_info=True)
            raise StoreError(f"Failed to {action}") from e
        except Exception:
            self.db.rollback()
            raise

    # --- Users -------------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    # --- Reads -------------------------------------------------------------

    def get_by_id(self, review_id: int) -> Optional[PerformanceReview]:
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.id == review_id
        ).first()

    def get_by_user_and_period(self, user_id: int, period: str) -> Optional[PerformanceReview]:
        """Returns None when the user has no review for the period."""
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.user_id == user_id,
            PerformanceReview.period == period,
        ).first()

    def list_by_user(self, user_id: int) -> List[PerformanceReview]:
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.user_id == user_id
        ).order_by(PerformanceReview.period.desc()).all()

    def list_by_manager(self, manager_id: int, exclude_status: ReviewStatus = ReviewStatus.DRAFT) -> List[PerformanceReview]:
        report_ids = [
            row.id for row in self.db.query(User.id).filter(User.manager_id == manager_id).all()
        ]
        if not report_ids:
            return []
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.user_id.in_(report_ids),
            PerformanceReview.status != exclude_status.value,
        ).order_by(PerformanceReview.period.desc(), PerformanceReview.user_id.asc()).all()

    def list_all_submitted(self, exclude_status: ReviewStatus = ReviewStatus.DRAFT) -> List[PerformanceReview]:
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.status != exclude_status.value
        ).order_by(PerformanceReview.period.desc(), PerformanceReview.user_id.asc()).all()

    def list_by_period(self, period: str, exclude_status: ReviewStatus = ReviewStatus.DRAFT) -> List[PerformanceReview]:
        return _with_details(self.db.query(PerformanceReview)).filter(
            PerformanceReview.period == period,
            PerformanceReview.status != exclude_status.value,
        ).order_by(PerformanceReview.user_id.asc()).all()

    # --- Writes ------------------------------------------------------------

    def create(self, review: PerformanceReview) -> PerformanceReview:
        """Insert a review with its items. The (user, period) unique constraint backs the engine's pre-check."""
        try:
            with self._unit_of_work("create performance review"):
                self.db.add(review)
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise ReviewAlreadyExistsError(review.user_id, review.period) from e.__cause__
            raise
        return review

    def update_items_and_review(self, review: PerformanceReview, item_updates: Sequence[Dict]) -> None:
        """
        Apply score/completion updates to existing items and save the review's
        own fields in one transaction. A None value leaves the stored field as is.
        """
        with self._unit_of_work("save review scores"):
            for update in item_updates:
                values = {
                    key: update[key]
                    for key in ("completion_details", "score")
                    if update.get(key) is not None
                }
                if not values:
                    continue
                self.db.query(PerformanceItem).filter(
                    PerformanceItem.id == update["id"],
                    PerformanceItem.review_id == review.id,
                ).update(values, synchronize_session="fetch")
            self.db.add(review)

    def update_status(self, review_id: int, new_status: ReviewStatus) -> None:
        with self._unit_of_work("update review status"):
            self.db.query(PerformanceReview).filter(
                PerformanceReview.id == review_id
            ).update({"status": new_status.value}, synchronize_session="fetch")

    def update_status_and_append_approval(
        self,
        review_id: int,
        new_status: ReviewStatus,
        approver_id: int,
        comment: Optional[str] = None,
    ) -> ApprovalHistory:
        """Change the status and append the matching history row atomically."""
        with self._unit_of_work("record review approval"):
            self.db.query(PerformanceReview).filter(
                PerformanceReview.id == review_id
            ).update({"status": new_status.value}, synchronize_session="fetch")
            entry = ApprovalHistory(
                review_id=review_id,
                approver_id=approver_id,
                status=new_status.value,
                comment=comment or "",
            )
            self.db.add(entry)
        return entry

    def replace_review(self, review: PerformanceReview, items: Sequence[PerformanceItem]) -> None:
        """Save the review's fields, delete all of its items and insert `items` in their place."""
        try:
            with self._unit_of_work("update performance review"):
                # delete-orphan removes every previous item row in the same flush
                review.items = list(items)
                self.db.add(review)
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise ReviewAlreadyExistsError(review.user_id, review.period) from e.__cause__
            raise
