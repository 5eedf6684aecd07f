"""
In-memory stores with the same contracts as the SQLAlchemy ones.

Records are plain ORM instances that never touch a session, which keeps unit
tests of the accrual and reconciliation rules free of a database.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from hrms.models.attendance import Attendance
from hrms.models.employee import Employee, EmployeeStatus
from hrms.models.leave_entitlement import LeaveEntitlement
from hrms.models.leave_request import LeaveRequest
from hrms.models.notification import Notification
from hrms.repositories.base import DuplicateRecordError


class _Sequence:
    def __init__(self):
        self._next_id = 1

    def next(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value


class InMemoryEmployeeDirectory:
    def __init__(self, employees: Optional[List[Employee]] = None):
        self._ids = _Sequence()
        self._by_employee_id: Dict[str, Employee] = {}
        for employee in employees or []:
            self.add(employee)

    def add(self, employee: Employee) -> Employee:
        if employee.employee_id in self._by_employee_id:
            raise DuplicateRecordError(f"employee {employee.employee_id} exists")
        employee.id = self._ids.next()
        if employee.status is None:
            employee.status = EmployeeStatus.ACTIVE.value
        self._by_employee_id[employee.employee_id] = employee
        return employee

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._by_employee_id.get(employee_id)

    def find_active(self) -> List[Employee]:
        return [
            e for _, e in sorted(self._by_employee_id.items())
            if e.status == EmployeeStatus.ACTIVE.value
        ]


class InMemoryLeaveRequestStore:
    def __init__(self):
        self._ids = _Sequence()
        self._items: Dict[int, LeaveRequest] = {}

    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        return self._items.get(int(leave_id))

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        leave.id = self._ids.next()
        self._items[leave.id] = leave
        return leave

    def save(self, leave: LeaveRequest) -> LeaveRequest:
        if leave.id is None:
            return self.add(leave)
        self._items[leave.id] = leave
        return leave

    def find_starting_between(
        self,
        *,
        employee_id: str,
        leave_type: str,
        start: date,
        end: date,
        statuses: Sequence[str],
    ) -> List[LeaveRequest]:
        return [
            r for r in self._items.values()
            if r.employee_id == employee_id
            and r.leave_type == leave_type
            and start <= r.start_date < end
            and r.status in statuses
        ]

    def find_overlapping(
        self,
        *,
        employee_id: str,
        start: date,
        end: date,
        statuses: Sequence[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        matches = [
            r for r in self._items.values()
            if r.employee_id == employee_id
            and r.status in statuses
            and r.start_date <= end
            and r.end_date >= start
            and r.id != exclude_id
        ]
        matches.sort(key=lambda r: r.start_date)
        return matches[0] if matches else None

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
        rows = [
            r for r in self._items.values()
            if (not employee_id or r.employee_id == employee_id)
            and (not status or r.status == status)
            and (not leave_type or r.leave_type == leave_type)
            and (not start_from or r.start_date >= start_from)
            and (not end_until or r.end_date <= end_until)
        ]
        rows.sort(key=lambda r: r.id, reverse=True)
        return rows[offset:offset + limit], len(rows)


class InMemoryEntitlementStore:
    def __init__(self):
        self._ids = _Sequence()
        self._items: Dict[Tuple[str, str, int], LeaveEntitlement] = {}

    def get(self, employee_id: str, leave_type: str, year: int) -> Optional[LeaveEntitlement]:
        return self._items.get((employee_id, leave_type, year))

    def add(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        key = (entitlement.employee_id, entitlement.leave_type, entitlement.year)
        if key in self._items:
            raise DuplicateRecordError(f"entitlement {key} exists")
        entitlement.id = self._ids.next()
        self._items[key] = entitlement
        return entitlement

    def save(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        key = (entitlement.employee_id, entitlement.leave_type, entitlement.year)
        self._items[key] = entitlement
        return entitlement

    def __len__(self) -> int:
        return len(self._items)


class InMemoryAttendanceStore:
    def __init__(self):
        self._ids = _Sequence()
        self._items: Dict[Tuple[str, date], Attendance] = {}

    def get(self, record_id: int) -> Optional[Attendance]:
        for record in self._items.values():
            if record.id == record_id:
                return record
        return None

    def get_for_day(self, employee_id: str, day: date) -> Optional[Attendance]:
        return self._items.get((employee_id, day))

    def add(self, record: Attendance) -> Attendance:
        key = (record.employee_id, record.date)
        if key in self._items:
            raise DuplicateRecordError(f"attendance {key} exists")
        record.id = self._ids.next()
        self._items[key] = record
        return record

    def save(self, record: Attendance) -> Attendance:
        self._items[(record.employee_id, record.date)] = record
        return record

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
        rows = [
            r for r in self._items.values()
            if (not employee_id or r.employee_id == employee_id)
            and (not start_date or r.date >= start_date)
            and (not end_date or r.date <= end_date)
            and (not status or r.status == status)
        ]
        rows.sort(key=lambda r: r.date, reverse=True)
        return rows[offset:offset + limit], len(rows)

    def all(self) -> List[Attendance]:
        return list(self._items.values())


class InMemoryNotificationStore:
    def __init__(self):
        self._ids = _Sequence()
        self._items: Dict[int, Notification] = {}

    def add(self, notification: Notification) -> Notification:
        notification.id = self._ids.next()
        if notification.is_read is None:
            notification.is_read = False
        self._items[notification.id] = notification
        return notification

    def get(self, notification_id: int) -> Optional[Notification]:
        return self._items.get(notification_id)

    def save(self, notification: Notification) -> Notification:
        self._items[notification.id] = notification
        return notification

    def list_for(self, employee_id: str, *, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        rows = [
            n for n in self._items.values()
            if n.employee_id == employee_id and (not unread_only or not n.is_read)
        ]
        rows.sort(key=lambda n: n.id, reverse=True)
        return rows[:limit]

    def mark_all_read(self, employee_id: str) -> int:
        count = 0
        for notification in self._items.values():
            if notification.employee_id == employee_id and not notification.is_read:
                notification.is_read = True
                count += 1
        return count
