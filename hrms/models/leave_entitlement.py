from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from hrms.database import Base

class LeaveEntitlement(Base):
    __tablename__ = "leave_entitlements"
    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type", "year", name="uq_entitlement_employee_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, index=True, nullable=False)
    leave_type = Column(String, index=True, nullable=False) # e.g., "pto", "sick", "maternity"
    year = Column(Integer, nullable=False)
    entitlement = Column(Float, default=0.0)  # days granted for the year, possibly pro-rated
    accrued = Column(Float, default=0.0)
    used = Column(Float, default=0.0)
    pending = Column(Float, default=0.0)
    available = Column(Float, default=0.0)  # derived: max(0, accrued - used - pending)
    accrual_rate = Column(Float, default=0.0)  # days per month
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
