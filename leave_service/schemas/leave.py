from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

class LeaveRequestCreate(BaseModel):
    # Category and reason are validated by the service so errors share one format
    leave_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None

class LeaveRequestResponse(BaseModel):
    id: str
    owner_id: str
    owner_email: Optional[str] = None
    leave_type: str = Field(validation_alias="category")
    start_date: date
    end_date: date
    days: int = Field(validation_alias="duration_days")
    reason: str
    status: str
    created_at: datetime
    reviewer_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_comment: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class LeaveReviewRequest(BaseModel):
    decision: str  # "approve" | "reject"
    comment: Optional[str] = None

class LeaveDeleteResponse(BaseModel):
    deleted: str

class LeaveStatsResponse(BaseModel):
    pending: int
    approved: int
    rejected: int
    total: int

class LeaveBalanceResponse(BaseModel):
    account_id: str
    annual: int
    sick: int
    casual: int
