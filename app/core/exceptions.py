from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

class InvalidStateError(AppException):
    """An action was attempted from a review status that forbids it."""
    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_STATE",
            details={"current_status": current_status} if current_status else None
        )

class ValidationFailedError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, status_code: int = 422, error_code: str = "VALIDATION_FAILED"):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )

class ReviewAlreadyExistsError(ValidationFailedError):
    def __init__(self, user_id: int, period: str):
        super().__init__(
            message=f"A performance review already exists for user {user_id} in period {period}",
            details={"user_id": user_id, "period": period},
            status_code=409,
            error_code="REVIEW_EXISTS"
        )

class StoreError(AppException):
    """Underlying persistence failure, passed through to the caller."""
    def __init__(self, message: str = "Failed to persist changes"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORE_FAILURE"
        )
