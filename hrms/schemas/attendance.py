from pydantic import BaseModel, ConfigDict, field_validator
from datetime import date, datetime
from typing import List, Optional

from hrms.core.clock import to_local_naive

def _local_timestamp(value: Optional[datetime]) -> Optional[datetime]:
    # Stored check-in/out times are naive local wall times
    return to_local_naive(value) if value is not None else None

class CheckInOutRequest(BaseModel):
    notes: Optional[str] = None

class AttendanceResponse(BaseModel):
    id: int
    employee_id: str
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    total_hours: Optional[float] = 0.0
    overtime_hours: Optional[float] = 0.0
    status: str
    reminder_sent: bool = False
    auto_checkout: bool = False
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class AdminAttendanceCreate(BaseModel):
    employee_id: str
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: str = "present"
    notes: Optional[str] = None

    @field_validator("check_in", "check_out")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _local_timestamp(value)

class AdminAttendanceUpdate(BaseModel):
    attendance_id: int
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("check_in", "check_out")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _local_timestamp(value)

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

class AttendanceListResponse(BaseModel):
    attendance: List[AttendanceResponse]
    pagination: Pagination

class ReconciliationSummary(BaseModel):
    """Counts reported by one run of the nightly attendance sweep."""
    scheduled: bool = True
    mode: Optional[str] = None  # "reminder" or "auto_checkout"
    business_date: Optional[date] = None
    processed: int = 0
    absent: int = 0
    half_day: int = 0
    reminders_sent: int = 0
    auto_checkouts: int = 0
    reminder_failures: int = 0
    failed: int = 0
