from pydantic import BaseModel
from typing import Optional
import enum

class Role(str, enum.Enum):
    """
    Roles carried in the access token.

    - ADMIN / HR: manage any employee's leave and attendance
    - MANAGER: decide leave requests
    - EMPLOYEE: self-service only
    """
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"

class CurrentUser(BaseModel):
    sub: str
    role: Role
    employee_id: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_hr(self) -> bool:
        """Check if user has an HR-level role."""
        return self.role in (Role.ADMIN, Role.HR)
