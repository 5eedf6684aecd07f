from sqlalchemy import Column, Integer, String, Date, Float, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from hrms.database import Base
import enum

class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    HOLIDAY = "holiday"

class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        # One attendance record per employee per day
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, index=True, nullable=False)
    date = Column(Date, nullable=False, index=True)
    check_in = Column(DateTime, nullable=True)
    check_out = Column(DateTime, nullable=True)
    total_hours = Column(Float, default=0.0)
    overtime_hours = Column(Float, default=0.0)
    status = Column(String, default=AttendanceStatus.ABSENT.value)
    reminder_sent = Column(Boolean, default=False, nullable=False)
    auto_checkout = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
