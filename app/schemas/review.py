from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional
from app.models.performance_review import ItemCategory
from app.models.user import UserRole

# Field-level rules (non-empty text, weight > 0, score range) are enforced by the
# review engine so that they surface as ValidationFailed, not as 422 request errors.

class ReviewItemIn(BaseModel):
    category: str = ItemCategory.WORK_PERFORMANCE.value
    title: str = ""
    description: str = ""
    weight: float = 0
    target: str = ""

class ReviewCreate(BaseModel):
    period: str = Field(..., min_length=1)
    user_id: Optional[int] = None  # Defaults to the caller
    items: List[ReviewItemIn] = []
    final_comment: str = ""

class ReviewUpdate(BaseModel):
    items: List[ReviewItemIn]
    period: Optional[str] = None
    final_comment: Optional[str] = None

class ScoreItemInput(BaseModel):
    id: int
    completion_details: Optional[str] = None
    score: Optional[float] = None

class ScoreInput(BaseModel):
    items: List[ScoreItemInput] = []
    final_comment: str = ""

class ReviewActionRequest(BaseModel):
    comment: Optional[str] = None

class UserSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    role: UserRole
    manager_id: Optional[int] = None
    department_path: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ReviewItemResponse(BaseModel):
    id: int
    category: str
    title: str
    description: str
    weight: float
    target: str
    completion_details: str
    score: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

class ApprovalHistoryResponse(BaseModel):
    id: int
    approver_id: int
    status: str
    comment: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ReviewResponse(BaseModel):
    id: int
    user_id: int
    period: str
    status: str
    total_score: Optional[float] = None
    grade_point: Optional[float] = None
    final_comment: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    items: List[ReviewItemResponse] = []
    approvals: List[ApprovalHistoryResponse] = []

    model_config = ConfigDict(from_attributes=True)
