# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, department, performance_review

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .department import Department
from .performance_review import (
    PerformanceReview,
    PerformanceItem,
    ApprovalHistory,
    ReviewStatus,
    ItemCategory,
)

__all__ = [
    "User",
    "UserRole",
    "Department",
    "PerformanceReview",
    "PerformanceItem",
    "ApprovalHistory",
    "ReviewStatus",
    "ItemCategory",
]
