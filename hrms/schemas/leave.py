from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from hrms.models.leave_request import LeaveStatus, LeaveType
from hrms.schemas.attendance import Pagination

class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1)
    status: LeaveStatus = LeaveStatus.PENDING
    partial_days: Optional[float] = Field(default=None, ge=0, le=1)
    attachments: List[str] = Field(default_factory=list)

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    total_days: float
    partial_days: Optional[float] = None
    reason: str
    status: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    attachments: Optional[List[str]] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveListResponse(BaseModel):
    leaves: List[LeaveRequestResponse]
    pagination: Pagination

class LeaveDecisionRequest(BaseModel):
    approve: bool
    rejection_reason: Optional[str] = None

class LeaveBalanceItem(BaseModel):
    leave_type: str
    entitlement: float
    accrued: float
    used: float
    pending: float
    available: float
    accrual_rate: float

    model_config = ConfigDict(from_attributes=True)

class LeaveBalanceResponse(BaseModel):
    employee_id: str
    year: int
    balances: List[LeaveBalanceItem]
