"""
Leave Service Layer

Business rules for leave requests: creation with eligibility checks, manager
decisions, cancellation and payroll processing. Every state change ends with
a full balance recompute through the EntitlementLedger.
"""
import logging
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from hrms.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    ValidationError,
)
from hrms.models.employee import Employee
from hrms.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from hrms.repositories.base import EmployeeDirectory, LeaveRequestStore
from hrms.services import leave_calculations as calc
from hrms.services.email import EmailSender
from hrms.services.entitlement_ledger import EntitlementLedger, validate_leave_type
from hrms.services.notification import NotificationService

logger = logging.getLogger(__name__)

CREATABLE_STATUSES = (LeaveStatus.DRAFT.value, LeaveStatus.PENDING.value)
CANCELLABLE_STATUSES = (LeaveStatus.DRAFT.value, LeaveStatus.PENDING.value)


class LeaveService:
    def __init__(
        self,
        ledger: EntitlementLedger,
        leaves: LeaveRequestStore,
        employees: EmployeeDirectory,
        notifications: NotificationService,
        email: EmailSender,
        probation_months: int = 3,
        blackout_dates: Optional[List[Any]] = None,
    ):
        self.ledger = ledger
        self.leaves = leaves
        self.employees = employees
        self.notifications = notifications
        self.email = email
        self.probation_months = probation_months
        self.blackout_dates = blackout_dates or []

    def _get_leave(self, leave_id: int) -> LeaveRequest:
        leave = self.leaves.get(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found", details={"leave_id": leave_id})
        return leave

    def _get_employee(self, employee_id: str) -> Employee:
        employee = self.employees.get(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", details={"employee_id": employee_id})
        return employee

    def _check_eligibility(self, employee: Employee, leave_type: str, start: date, end: date,
                           total_days: int, today: date) -> None:
        if leave_type == LeaveType.PTO.value and employee.joining_date:
            if calc.is_on_probation(employee.joining_date, self.probation_months, today):
                raise ValidationError("You are on probation. PTO cannot be applied during probation period.")

        if calc.overlaps_blackout(start, end, self.blackout_dates):
            raise ValidationError("Leave cannot be applied during blackout dates")

        overlapping = self.ledger.find_overlapping(employee.employee_id, start, end)
        if overlapping:
            raise ValidationError(
                "You have an overlapping leave request. Please cancel or modify existing request first.",
                details={"overlapping_leave_id": overlapping.id},
            )

        if leave_type == LeaveType.PTO.value:
            entitlement = self.ledger.recompute_balance(employee.employee_id, leave_type, start.year, today)
            if entitlement.available < total_days:
                raise ValidationError(
                    f"Insufficient leave balance. Available: {entitlement.available} days, "
                    f"Requested: {total_days} days"
                )

    def create_leave(
        self,
        employee_id: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        today: date,
        status: str = LeaveStatus.PENDING.value,
        partial_days: Optional[float] = None,
        attachments: Optional[List[str]] = None,
    ) -> LeaveRequest:
        leave_type = validate_leave_type(leave_type)
        if status not in CREATABLE_STATUSES:
            raise ValidationError(f"New leave requests must be one of {list(CREATABLE_STATUSES)}")
        if start_date > end_date:
            raise ValidationError("End date must be after start date")
        if partial_days is not None and not 0 <= partial_days <= 1:
            raise ValidationError("Partial days must be between 0 and 1")
        # Drafts may describe past dates; submitted requests may not
        if status == LeaveStatus.PENDING.value and start_date < today:
            raise ValidationError("Cannot apply for leave in the past")

        employee = self._get_employee(employee_id)
        total_days = calc.total_inclusive_days(start_date, end_date)

        if status == LeaveStatus.PENDING.value:
            self._check_eligibility(employee, leave_type, start_date, end_date, total_days, today)

        leave = self.leaves.add(LeaveRequest(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            partial_days=partial_days,
            reason=reason,
            status=status,
            attachments=list(attachments or []),
        ))
        logger.info(f"Leave request {leave.id} ({leave_type}, {total_days}d) created for {employee_id} as {status}")

        if status == LeaveStatus.PENDING.value:
            self.ledger.recompute_balance(employee_id, leave_type, start_date.year, today)
            self._notify_manager(employee, leave)
        return leave

    def decide_leave(
        self,
        leave_id: int,
        approve: bool,
        decided_by: str,
        now: datetime,
        rejection_reason: Optional[str] = None,
    ) -> LeaveRequest:
        leave = self._get_leave(leave_id)
        if leave.status != LeaveStatus.PENDING.value:
            raise ValidationError("Leave request has already been processed")
        employee = self._get_employee(leave.employee_id)

        if approve:
            leave.status = LeaveStatus.APPROVED.value
            leave.approved_by = decided_by
            leave.approved_at = now
            leave.rejection_reason = None
            leave.rejected_by = None
            leave.rejected_at = None
        else:
            leave.status = LeaveStatus.REJECTED.value
            leave.rejected_by = decided_by
            leave.rejected_at = now
            leave.rejection_reason = rejection_reason or "No reason provided"
            leave.approved_by = None
            leave.approved_at = None

        leave = self.leaves.save(leave)
        logger.info(f"Leave request {leave.id} {leave.status} by {decided_by}")
        self.ledger.recompute_balance(leave.employee_id, leave.leave_type, leave.start_date.year, now.date())
        self._notify_decision(employee, leave)
        return leave

    def cancel_leave(self, leave_id: int, employee_id: str, today: date) -> LeaveRequest:
        leave = self._get_leave(leave_id)
        if leave.employee_id != employee_id:
            raise AccessDeniedError("Only the employee can cancel their leave request")
        if leave.status not in CANCELLABLE_STATUSES:
            raise ValidationError("Cannot cancel a leave that is already approved, rejected, or processed")

        leave.status = LeaveStatus.CANCELLED.value
        leave = self.leaves.save(leave)
        self.ledger.recompute_balance(leave.employee_id, leave.leave_type, leave.start_date.year, today)
        return leave

    def mark_processed(self, leave_id: int, now: datetime) -> LeaveRequest:
        leave = self._get_leave(leave_id)
        if leave.status != LeaveStatus.APPROVED.value:
            raise ValidationError("Only approved leave requests can be processed")
        leave.status = LeaveStatus.PROCESSED.value
        leave.processed_at = now
        leave = self.leaves.save(leave)
        self.ledger.recompute_balance(leave.employee_id, leave.leave_type, leave.start_date.year, now.date())
        return leave

    def list_leaves(
        self,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, limit)
        items, total = self.leaves.search(
            employee_id=employee_id,
            status=status,
            leave_type=leave_type,
            start_from=start_date,
            end_until=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        pages = math.ceil(total / limit)
        return {
            "leaves": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": pages,
                "has_next": page < pages,
                "has_prev": page > 1,
            },
        }

    # --- Notifications ---

    @staticmethod
    def _leave_details(leave: LeaveRequest) -> Dict[str, Any]:
        return {
            "leave_type": leave.leave_type,
            "start_date": leave.start_date.isoformat(),
            "end_date": leave.end_date.isoformat(),
            "total_days": leave.total_days,
            "reason": leave.reason,
            "rejection_reason": leave.rejection_reason,
        }

    def _notify_manager(self, employee: Employee, leave: LeaveRequest) -> None:
        if not employee.reporting_manager:
            return
        try:
            manager = self.employees.get(employee.reporting_manager)
            if not manager:
                return
            self.notifications.notify_user(
                manager.employee_id,
                "Leave Request",
                f"{employee.full_name} requested {leave.total_days} day(s) of {leave.leave_type} leave.",
                "info",
                f"/leaves/{leave.id}",
            )
            self.email.send_leave_notification(
                manager.email, "submit", {**self._leave_details(leave), "employee_name": employee.full_name}
            )
        except Exception as e:
            # Don't fail the request if notification fails
            logger.warning(f"Leave notification failed: {e}", exc_info=True)

    def _notify_decision(self, employee: Employee, leave: LeaveRequest) -> None:
        approved = leave.status == LeaveStatus.APPROVED.value
        if approved:
            message = f"Your {leave.leave_type} request for {leave.total_days} days has been APPROVED."
        else:
            message = f"Your {leave.leave_type} request has been REJECTED. Reason: {leave.rejection_reason}"
        try:
            self.notifications.notify_user(
                employee.employee_id,
                "Leave Approved" if approved else "Leave Rejected",
                message,
                "success" if approved else "error",
                f"/leaves/{leave.id}",
            )
            self.email.send_leave_notification(
                employee.email, "approve" if approved else "reject", self._leave_details(leave)
            )
        except Exception as e:
            logger.warning(f"Leave notification failed: {e}", exc_info=True)
