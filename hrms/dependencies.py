"""
Service wiring for the HTTP layer.

Every endpoint gets its collaborators through these providers, so tests can
swap any of them with `app.dependency_overrides`.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from hrms.core.config import settings
from hrms.database import get_db
from hrms.repositories.sql import (
    SqlAttendanceStore,
    SqlEmployeeDirectory,
    SqlEntitlementStore,
    SqlLeaveRequestStore,
    SqlNotificationStore,
)
from hrms.services.attendance_reconciler import AttendanceReconciler
from hrms.services.attendance_service import AttendanceService
from hrms.services.email import EmailSender, get_email_sender
from hrms.services.entitlement_ledger import EntitlementLedger
from hrms.services.leave_service import LeaveService
from hrms.services.notification import NotificationService


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(SqlNotificationStore(db))


def get_entitlement_ledger(db: Session = Depends(get_db)) -> EntitlementLedger:
    return EntitlementLedger(
        employees=SqlEmployeeDirectory(db),
        leaves=SqlLeaveRequestStore(db),
        entitlements=SqlEntitlementStore(db),
        entitlement_table=settings.leave.entitlements,
    )


def get_leave_service(
    db: Session = Depends(get_db),
    ledger: EntitlementLedger = Depends(get_entitlement_ledger),
    notifications: NotificationService = Depends(get_notification_service),
    email: EmailSender = Depends(get_email_sender),
) -> LeaveService:
    return LeaveService(
        ledger=ledger,
        leaves=SqlLeaveRequestStore(db),
        employees=SqlEmployeeDirectory(db),
        notifications=notifications,
        email=email,
        probation_months=settings.leave.probation_months,
        blackout_dates=settings.leave.blackout_dates,
    )


def get_attendance_service(db: Session = Depends(get_db)) -> AttendanceService:
    return AttendanceService(
        SqlAttendanceStore(db),
        SqlEmployeeDirectory(db),
        standard_work_hours=settings.attendance.standard_work_hours,
    )


def get_attendance_reconciler(
    db: Session = Depends(get_db),
    email: EmailSender = Depends(get_email_sender),
) -> AttendanceReconciler:
    return AttendanceReconciler(
        SqlEmployeeDirectory(db),
        SqlAttendanceStore(db),
        email,
        policy=settings.attendance,
    )
