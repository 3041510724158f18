"""
Identity boundary for the HTTP layer.
Resolves the bearer token to a User and gates endpoints by role.
"""
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Callable, List
from app.core.security import TOKEN_EXPIRED, decode_access_token
from app.database import get_db
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Tokens are issued by the corporate identity provider; there is no local login form
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=True)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the bearer token.
    """
    payload = decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("error") == TOKEN_EXPIRED:
        logger.info("Authentication failed: Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=TOKEN_EXPIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing subject in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # The identity provider may send either enum values or localized directory labels
    claimed_role = None
    if payload.get("role") is not None:
        try:
            claimed_role = UserRole.parse(payload["role"])
        except ValueError:
            logger.warning(f"Authentication failed: Unknown role claim {payload['role']!r}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid role claim",
                headers={"WWW-Authenticate": "Bearer"},
            )

    try:
        user = db.get(User, int(user_id))
    except (TypeError, ValueError):
        user = None

    if user is None:
        logger.warning(f"Authentication failed: User {user_id} not found in database")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning(f"Authentication failed: User {user_id} is inactive")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive"
        )
    if claimed_role is not None and claimed_role != user.role:
        # Stored role wins; the directory sync catches up later
        logger.info(f"Role claim {claimed_role.value} for user {user_id} differs from stored role {user.role.value}")
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.get("/hr-only")
        def hr_endpoint(user: User = Depends(require_role([UserRole.HR]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def require_hr_or_admin():
    return require_role([UserRole.HR, UserRole.ADMIN])
