"""
SQLAlchemy-backed stores.

Each write commits immediately so that one employee's failure during a batch
sweep cannot roll back records already written for other employees.
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hrms.models.attendance import Attendance
from hrms.models.employee import Employee, EmployeeStatus
from hrms.models.leave_entitlement import LeaveEntitlement
from hrms.models.leave_request import LeaveRequest
from hrms.models.notification import Notification
from hrms.repositories.base import DuplicateRecordError


class _SqlStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, obj):
        try:
            self.db.add(obj)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRecordError(str(e.orig)) from e
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(obj)
        return obj


class SqlEmployeeDirectory(_SqlStore):
    def get(self, employee_id: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.employee_id == employee_id).first()

    def find_active(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.status == EmployeeStatus.ACTIVE.value)
            .order_by(Employee.employee_id)
            .all()
        )

    def add(self, employee: Employee) -> Employee:
        return self._commit(employee)


class SqlLeaveRequestStore(_SqlStore):
    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        return self.db.get(LeaveRequest, leave_id)

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        return self._commit(leave)

    def save(self, leave: LeaveRequest) -> LeaveRequest:
        return self._commit(leave)

    def find_starting_between(
        self,
        *,
        employee_id: str,
        leave_type: str,
        start: date,
        end: date,
        statuses: Sequence[str],
    ) -> List[LeaveRequest]:
        return self.db.query(LeaveRequest).filter(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.leave_type == leave_type,
            LeaveRequest.start_date >= start,
            LeaveRequest.start_date < end,
            LeaveRequest.status.in_(list(statuses)),
        ).all()

    def find_overlapping(
        self,
        *,
        employee_id: str,
        start: date,
        end: date,
        statuses: Sequence[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        query = self.db.query(LeaveRequest).filter(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(list(statuses)),
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if exclude_id is not None:
            query = query.filter(LeaveRequest.id != exclude_id)
        return query.order_by(LeaveRequest.start_date).first()

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
        query = self.db.query(LeaveRequest)
        if employee_id:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if status:
            query = query.filter(LeaveRequest.status == status)
        if leave_type:
            query = query.filter(LeaveRequest.leave_type == leave_type)
        if start_from:
            query = query.filter(LeaveRequest.start_date >= start_from)
        if end_until:
            query = query.filter(LeaveRequest.end_date <= end_until)
        total = query.count()
        items = (
            query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total


class SqlEntitlementStore(_SqlStore):
    def get(self, employee_id: str, leave_type: str, year: int) -> Optional[LeaveEntitlement]:
        return self.db.query(LeaveEntitlement).filter(
            LeaveEntitlement.employee_id == employee_id,
            LeaveEntitlement.leave_type == leave_type,
            LeaveEntitlement.year == year,
        ).first()

    def add(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        return self._commit(entitlement)

    def save(self, entitlement: LeaveEntitlement) -> LeaveEntitlement:
        return self._commit(entitlement)


class SqlAttendanceStore(_SqlStore):
    def get(self, record_id: int) -> Optional[Attendance]:
        return self.db.get(Attendance, record_id)

    def get_for_day(self, employee_id: str, day: date) -> Optional[Attendance]:
        return self.db.query(Attendance).filter(
            Attendance.employee_id == employee_id,
            Attendance.date == day,
        ).first()

    def add(self, record: Attendance) -> Attendance:
        return self._commit(record)

    def save(self, record: Attendance) -> Attendance:
        return self._commit(record)

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
        query = self.db.query(Attendance)
        if employee_id:
            query = query.filter(Attendance.employee_id == employee_id)
        if start_date:
            query = query.filter(Attendance.date >= start_date)
        if end_date:
            query = query.filter(Attendance.date <= end_date)
        if status:
            query = query.filter(Attendance.status == status)
        total = query.count()
        items = query.order_by(Attendance.date.desc()).offset(offset).limit(limit).all()
        return items, total


class SqlNotificationStore(_SqlStore):
    def add(self, notification: Notification) -> Notification:
        return self._commit(notification)

    def get(self, notification_id: int) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def save(self, notification: Notification) -> Notification:
        return self._commit(notification)

    def list_for(self, employee_id: str, *, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.employee_id == employee_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def mark_all_read(self, employee_id: str) -> int:
        updated = self.db.query(Notification).filter(
            Notification.employee_id == employee_id,
            Notification.is_read == False,  # noqa: E712
        ).update({Notification.is_read: True}, synchronize_session=False)
        self.db.commit()
        return updated
