"""
Shared FastAPI dependencies.

The canonical auth dependencies live in app.routers.auth_deps and are
re-exported here next to the service providers.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.auth_deps import (
    get_current_user,
    require_role,
    require_hr_or_admin,
)
from app.models.user import User, UserRole
from app.services.review_service import ReviewService
from app.services.review_store import ReviewStore


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """One store and engine per request, bound to the request's session."""
    return ReviewService(ReviewStore(db))


__all__ = [
    "get_current_user",
    "require_role",
    "require_hr_or_admin",
    "get_review_service",
    "User",
    "UserRole",
]
