from sqlalchemy import Column, Integer, String, Date, DateTime
from sqlalchemy.sql import func
from hrms.database import Base
import enum

class EmployeeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"

class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    joining_date = Column(Date, nullable=True)
    status = Column(String, default=EmployeeStatus.ACTIVE.value, index=True)
    reporting_manager = Column(String, nullable=True)  # employee_id of the manager
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Employee {self.employee_id} ({self.status})>"
