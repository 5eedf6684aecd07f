from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple

from hrms.models.attendance import Attendance
from hrms.models.employee import Employee
from hrms.models.leave_entitlement import LeaveEntitlement
from hrms.models.leave_request import LeaveRequest
from hrms.models.notification import Notification


class DuplicateRecordError(Exception):
    """A write violated a uniqueness constraint (employee/day, employee/type/year)."""


class EmployeeDirectory(Protocol):
    def get(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def find_active(self) -> List[Employee]:
        raise NotImplementedError


class LeaveRequestStore(Protocol):
    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def save(self, leave: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def find_starting_between(
        self,
        *,
        employee_id: str,
        leave_type: str,
        start: date,
        end: date,
        statuses: Sequence[str],
    ) -> List[LeaveRequest]:
        """Requests whose start date lies in [start, end)."""
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: str,
        start: date,
        end: date,
        statuses: Sequence[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
        start_from: Optional[date] = None,
        end_until: Optional[date] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[LeaveRequest], int]:
        raise NotImplementedError


class EntitlementStore(Protocol):
    def get(self, employee_id: str, leave_type: str, year: int) -> Optional[LeaveEntitlement]:
        raise NotImplementedError

    def add(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        """Insert a new record; raises DuplicateRecordError if the key exists."""
        raise NotImplementedError

    def save(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        raise NotImplementedError


class AttendanceStore(Protocol):
    def get(self, record_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def get_for_day(self, employee_id: str, day: date) -> Optional[Attendance]:
        raise NotImplementedError

    def add(self, record: Attendance) -> Attendance:
        """Insert a new record; raises DuplicateRecordError if the day is taken."""
        raise NotImplementedError

    def save(self, record: Attendance) -> Attendance:
        raise NotImplementedError

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Attendance], int]:
        raise NotImplementedError


class NotificationStore(Protocol):
    def add(self, notification: Notification) -> Notification:
        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def save(self, notification: Notification) -> Notification:
        raise NotImplementedError

    def list_for(self, employee_id: str, *, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        raise NotImplementedError

    def mark_all_read(self, employee_id: str) -> int:
        raise NotImplementedError
