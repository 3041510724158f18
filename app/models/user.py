"""
User Model with a closed role set.
Carries the manager reference that drives the one-level approval check.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from typing import Optional
from app.database import Base


class UserRole(str, enum.Enum):
    """
    User roles.

    - EMPLOYEE: Self-service access to own reviews
    - TEAM_LEAD: Approves plans and scores of direct reports
    - CENTER_HEAD: Approves for direct reports, like TEAM_LEAD
    - HR: Sees every submitted review and archives confirmed ones
    - ADMIN: System administration
    """
    EMPLOYEE = "EMPLOYEE"
    TEAM_LEAD = "TEAM_LEAD"
    CENTER_HEAD = "CENTER_HEAD"
    HR = "HR"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, label: str) -> "UserRole":
        """
        Map a role label from the identity provider onto the closed role set.
        Accepts enum values and the localized labels used by the corporate directory.
        Raises ValueError for anything else.
        """
        normalized = label.strip() if isinstance(label, str) else ""
        role = _ROLE_ALIASES.get(normalized) or _ROLE_ALIASES.get(normalized.lower())
        if role is None:
            raise ValueError(f"Unknown role label: {label!r}")
        return role


_ROLE_ALIASES = {
    "employee": UserRole.EMPLOYEE,
    "员工": UserRole.EMPLOYEE,
    "team_lead": UserRole.TEAM_LEAD,
    "team-lead": UserRole.TEAM_LEAD,
    "组长": UserRole.TEAM_LEAD,
    "center_head": UserRole.CENTER_HEAD,
    "中心负责人": UserRole.CENTER_HEAD,
    "hr": UserRole.HR,
    "人事": UserRole.HR,
    "admin": UserRole.ADMIN,
    "管理员": UserRole.ADMIN,
}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    wechat_userid = Column(String, unique=True, nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)

    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    # Direct manager; the only basis for the approval permission check
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    department = relationship("Department", back_populates="members")
    manager = relationship("User", remote_side=[id], back_populates="direct_reports")
    direct_reports = relationship("User", back_populates="manager")
    reviews = relationship("PerformanceReview", back_populates="user")

    def __repr__(self):
        return f"<User {self.id} {self.name} ({self.role.value})>"

    @property
    def is_hr(self) -> bool:
        return self.role == UserRole.HR

    @property
    def department_path(self) -> Optional[str]:
        if self.department is None:
            return None
        return self.department.full_path
