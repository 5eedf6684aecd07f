from sqlalchemy import Column, Integer, String, Date, Float, DateTime, JSON
from sqlalchemy.sql import func
from hrms.database import Base
import enum

class LeaveType(str, enum.Enum):
    PTO = "pto"
    LOP = "lop"  # loss of pay (unpaid)
    COMP_OFF = "comp-off"
    SICK = "sick"
    VACATION = "vacation"
    PERSONAL = "personal"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    BEREAVEMENT = "bereavement"
    OTHER = "other"

class LeaveStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    PROCESSED = "processed"

# Statuses that hold days against the balance or block overlapping requests
CONSUMED_STATUSES = (LeaveStatus.APPROVED.value, LeaveStatus.PROCESSED.value)
BLOCKING_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, index=True, nullable=False)
    leave_type = Column(String, index=True, nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    total_days = Column(Float, nullable=False)
    partial_days = Column(Float, nullable=True)  # fraction of a day, 0..1; informational, not deducted
    reason = Column(String, nullable=False)
    status = Column(String, default=LeaveStatus.PENDING.value, index=True) # Using String to store enum value for simplicity with SQLite
    approved_by = Column(String, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_by = Column(String, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(String, nullable=True)
    attachments = Column(JSON, nullable=True)  # list of document URLs
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
