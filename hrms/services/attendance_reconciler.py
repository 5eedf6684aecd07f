"""
Nightly attendance sweep.

Triggered by an external scheduler (see routers/cron.py) in two windows:

- 23:30-23:59: remind employees who are still checked in to check out;
- 00:00-00:04: close the previous day, auto-checking-out open records.

Both windows also mark absences and fix up half-day/present statuses for the
day being processed. Every decision re-reads the stored record, so running
the sweep several times inside a window is harmless.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from hrms.core.config import AttendancePolicy
from hrms.core.exceptions import ExternalServiceError
from hrms.models.attendance import Attendance, AttendanceStatus
from hrms.models.employee import Employee
from hrms.repositories.base import AttendanceStore, EmployeeDirectory
from hrms.schemas.attendance import ReconciliationSummary
from hrms.services import leave_calculations as calc
from hrms.services.email import EmailSender

logger = logging.getLogger(__name__)

REMINDER = "reminder"
AUTO_CHECKOUT = "auto_checkout"

END_OF_DAY = time(23, 59, 59)


class AttendanceReconciler:
    def __init__(
        self,
        employees: EmployeeDirectory,
        attendance: AttendanceStore,
        email: EmailSender,
        policy: Optional[AttendancePolicy] = None,
    ):
        self.employees = employees
        self.attendance = attendance
        self.email = email
        self.policy = policy or AttendancePolicy()

    def window_for(self, now: datetime) -> Optional[str]:
        if now.hour == self.policy.reminder_hour and now.minute >= self.policy.reminder_from_minute:
            return REMINDER
        if now.hour == self.policy.auto_checkout_hour and now.minute < self.policy.auto_checkout_until_minute:
            return AUTO_CHECKOUT
        return None

    @staticmethod
    def business_date_for(now: datetime, mode: str) -> date:
        # Just after midnight the day being closed is yesterday
        if mode == AUTO_CHECKOUT:
            return now.date() - timedelta(days=1)
        return now.date()

    def is_working_day(self, day: date) -> bool:
        return day.weekday() in self.policy.working_weekdays

    def reconcile_attendance(self, now: datetime) -> ReconciliationSummary:
        mode = self.window_for(now)
        if mode is None:
            logger.info(f"Attendance sweep skipped: {now.isoformat()} is not a scheduled time")
            return ReconciliationSummary(scheduled=False)

        day = self.business_date_for(now, mode)
        summary = ReconciliationSummary(mode=mode, business_date=day)
        working_day = self.is_working_day(day)

        # A directory failure is systemic and propagates to the caller
        employees = self.employees.find_active()
        logger.info(f"Attendance sweep ({mode}) for {day.isoformat()}: {len(employees)} active employees")

        for employee in employees:
            try:
                self._reconcile_employee(employee, day, mode, working_day, summary)
            except Exception as e:
                summary.failed += 1
                logger.warning(
                    f"Attendance sweep failed for {employee.employee_id}: {e}",
                    exc_info=True,
                    extra={"employee_id": employee.employee_id, "business_date": day.isoformat()},
                )

        logger.info("Attendance sweep completed", extra={"summary": summary.model_dump(mode="json")})
        return summary

    def _reconcile_employee(
        self,
        employee: Employee,
        day: date,
        mode: str,
        working_day: bool,
        summary: ReconciliationSummary,
    ) -> None:
        record = self.attendance.get_for_day(employee.employee_id, day)

        if record is None:
            if working_day:
                self.attendance.add(Attendance(
                    employee_id=employee.employee_id,
                    date=day,
                    status=AttendanceStatus.ABSENT.value,
                    total_hours=0.0,
                    overtime_hours=0.0,
                    reminder_sent=False,
                    auto_checkout=False,
                ))
                summary.absent += 1
                summary.processed += 1
            return

        if record.check_in and not record.check_out:
            if mode == REMINDER:
                self._send_reminder(employee, record, summary)
            else:
                self._auto_checkout(record, day, summary)
        elif record.check_in and record.check_out and not record.auto_checkout:
            self._reclassify(record, summary)
        elif not record.check_in and working_day:
            if record.status != AttendanceStatus.ABSENT.value:
                record.status = AttendanceStatus.ABSENT.value
                self.attendance.save(record)
                summary.absent += 1
                summary.processed += 1

    def _send_reminder(self, employee: Employee, record: Attendance, summary: ReconciliationSummary) -> None:
        if record.reminder_sent:
            return
        try:
            self.email.send_checkout_reminder(employee.email, employee.full_name)
        except ExternalServiceError as e:
            summary.reminder_failures += 1
            logger.warning(f"Failed to send checkout reminder to {employee.employee_id}: {e.message}")
            return
        record.reminder_sent = True
        self.attendance.save(record)
        summary.reminders_sent += 1
        summary.processed += 1

    def _auto_checkout(self, record: Attendance, day: date, summary: ReconciliationSummary) -> None:
        check_out = datetime.combine(day, END_OF_DAY)
        record.check_out = check_out
        record.auto_checkout = True
        record.total_hours = calc.worked_hours(record.check_in, check_out)
        # Auto-checkout never earns overtime
        record.overtime_hours = 0.0
        if record.total_hours < self.policy.half_day_threshold_hours:
            record.status = AttendanceStatus.HALF_DAY.value
            summary.half_day += 1
        self.attendance.save(record)
        summary.auto_checkouts += 1
        summary.processed += 1

    def _reclassify(self, record: Attendance, summary: ReconciliationSummary) -> None:
        hours, overtime = calc.hours_and_overtime(
            record.check_in, record.check_out, self.policy.standard_work_hours
        )
        changed = hours != record.total_hours or overtime != record.overtime_hours
        record.total_hours = hours
        record.overtime_hours = overtime

        threshold = self.policy.half_day_threshold_hours
        if hours < threshold and record.status == AttendanceStatus.PRESENT.value:
            record.status = AttendanceStatus.HALF_DAY.value
            summary.half_day += 1
            summary.processed += 1
            changed = True
        elif hours >= threshold and record.status == AttendanceStatus.HALF_DAY.value:
            record.status = AttendanceStatus.PRESENT.value
            summary.processed += 1
            changed = True

        if changed:
            self.attendance.save(record)
