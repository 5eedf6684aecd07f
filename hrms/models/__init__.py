# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import employee, leave_request, leave_entitlement, attendance, notification

# Explicit class exports for cleaner imports
from .employee import Employee, EmployeeStatus
from .leave_request import LeaveRequest, LeaveStatus, LeaveType
from .leave_entitlement import LeaveEntitlement
from .attendance import Attendance, AttendanceStatus
from .notification import Notification

__all__ = [
    "Employee",
    "EmployeeStatus",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "LeaveEntitlement",
    "Attendance",
    "AttendanceStatus",
    "Notification",
]
