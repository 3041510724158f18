from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class ReviewStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    PENDING_SCORE = "pending_score"  # plan approved by the manager
    COMPLETED = "completed"  # scored
    PENDING_HR_CONFIRMATION = "pending_hr_confirmation"
    ARCHIVED = "archived"
    REJECTED = "rejected"


EDITABLE_STATUSES = (ReviewStatus.DRAFT, ReviewStatus.REJECTED)


class ItemCategory(str, enum.Enum):
    WORK_PERFORMANCE = "work_performance"
    AI_USAGE = "ai_usage"
    VALUES = "values"


class PerformanceReview(Base):
    __tablename__ = "performance_reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "period", name="uq_review_user_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    period = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default=ReviewStatus.DRAFT.value)  # Stored as the enum value
    total_score = Column(Float, nullable=True)
    grade_point = Column(Float, nullable=True)
    final_comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="reviews")
    items = relationship(
        "PerformanceItem",
        back_populates="review",
        order_by="PerformanceItem.id",
        cascade="all, delete-orphan",
    )
    approvals = relationship(
        "ApprovalHistory",
        back_populates="review",
        order_by="ApprovalHistory.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<PerformanceReview {self.id} user={self.user_id} period={self.period} status={self.status}>"


class PerformanceItem(Base):
    __tablename__ = "performance_items"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("performance_reviews.id"), nullable=False, index=True)
    # Free-form so new categories need no migration; see ItemCategory for the known ones
    category = Column(String, nullable=False, default=ItemCategory.WORK_PERFORMANCE.value)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    weight = Column(Float, nullable=False)
    target = Column(Text, nullable=False, default="")
    completion_details = Column(Text, nullable=False, default="")
    score = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    review = relationship("PerformanceReview", back_populates="items")


class ApprovalHistory(Base):
    """Append-only audit row; one per approval-style status change."""
    __tablename__ = "approval_histories"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("performance_reviews.id"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False)
    comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    review = relationship("PerformanceReview", back_populates="approvals")
    approver = relationship("User")
