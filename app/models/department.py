"""
Department Model with Hierarchy Support.
Supports parent-child relationships for organizational structure.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    # Hierarchy support: parent department for nested structures
    parent_id = Column(Integer, ForeignKey("departments.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    parent = relationship("Department", remote_side=[id], back_populates="children")
    children = relationship("Department", back_populates="parent")
    members = relationship("User", back_populates="department")

    def __repr__(self):
        return f"<Department {self.id}: {self.name}>"

    @property
    def full_path(self) -> str:
        """Returns the full hierarchical path of the department."""
        if self.parent is not None:
            return f"{self.parent.full_path} > {self.name}"
        return self.name
