import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Optional

from hrms.core.exceptions import NotFoundError, ValidationError
from hrms.models.attendance import Attendance, AttendanceStatus
from hrms.repositories.base import AttendanceStore, EmployeeDirectory
from hrms.services import leave_calculations as calc

logger = logging.getLogger(__name__)

STATUSES = [s.value for s in AttendanceStatus]


def _validate_status(status: str) -> str:
    if status not in STATUSES:
        raise ValidationError(f"Unknown attendance status '{status}'", details={"allowed": STATUSES})
    return status


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceStore,
        employees: EmployeeDirectory,
        standard_work_hours: float = 8,
    ):
        self.attendance = attendance
        self.employees = employees
        self.standard_work_hours = standard_work_hours

    def _apply_hours(self, record: Attendance) -> None:
        record.total_hours, record.overtime_hours = calc.hours_and_overtime(
            record.check_in, record.check_out, self.standard_work_hours
        )

    def check_in(self, employee_id: str, now: datetime, notes: Optional[str] = None) -> Attendance:
        today = now.date()
        record = self.attendance.get_for_day(employee_id, today)
        if record and record.check_in:
            raise ValidationError("Already checked in today")

        if record:
            # e.g. a record the nightly sweep already marked absent
            record.check_in = now
            record.status = AttendanceStatus.PRESENT.value
            if notes:
                record.notes = notes
            record = self.attendance.save(record)
        else:
            record = self.attendance.add(Attendance(
                employee_id=employee_id,
                date=today,
                check_in=now,
                status=AttendanceStatus.PRESENT.value,
                total_hours=0.0,
                overtime_hours=0.0,
                reminder_sent=False,
                auto_checkout=False,
                notes=notes,
            ))
        logger.info(f"{employee_id} checked in at {now.isoformat()}")
        return record

    def check_out(self, employee_id: str, now: datetime, notes: Optional[str] = None) -> Attendance:
        record = self.attendance.get_for_day(employee_id, now.date())
        if not record or not record.check_in:
            raise ValidationError("Must check in before checking out")
        if record.check_out:
            raise ValidationError("Already checked out today")

        record.check_out = now
        self._apply_hours(record)
        if notes:
            record.notes = notes
        record = self.attendance.save(record)
        logger.info(f"{employee_id} checked out after {record.total_hours}h (overtime {record.overtime_hours}h)")
        return record

    def record_attendance(
        self,
        employee_id: str,
        day: date,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        status: str = AttendanceStatus.PRESENT.value,
        notes: Optional[str] = None,
    ) -> Attendance:
        """Admin entry for a day with no record yet."""
        if not self.employees.get(employee_id):
            raise NotFoundError("Employee not found", details={"employee_id": employee_id})
        if self.attendance.get_for_day(employee_id, day):
            raise ValidationError("Attendance record already exists for this date")
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out must be after check-in")

        record = Attendance(
            employee_id=employee_id,
            date=day,
            check_in=check_in,
            check_out=check_out,
            status=_validate_status(status),
            reminder_sent=False,
            auto_checkout=False,
            notes=notes,
        )
        self._apply_hours(record)
        return self.attendance.add(record)

    def update_attendance(self, record_id: int, changes: Dict[str, Any]) -> Attendance:
        """Admin override. `changes` holds only the fields the caller supplied."""
        record = self.attendance.get(record_id)
        if not record:
            raise NotFoundError("Attendance record not found", details={"attendance_id": record_id})

        check_in = changes["check_in"] if "check_in" in changes else record.check_in
        check_out = changes["check_out"] if "check_out" in changes else record.check_out
        status = record.status
        if changes.get("status") is not None:
            status = _validate_status(changes["status"])
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out must be after check-in")

        record.check_in = check_in
        record.check_out = check_out
        record.status = status
        if "notes" in changes:
            record.notes = changes["notes"]

        self._apply_hours(record)
        return self.attendance.save(record)

    def list_attendance(
        self,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, limit)
        items, total = self.attendance.search(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            offset=(page - 1) * limit,
            limit=limit,
        )
        pages = math.ceil(total / limit)
        return {
            "attendance": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": pages,
                "has_next": page < pages,
                "has_prev": page > 1,
            },
        }
