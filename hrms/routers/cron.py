"""
Endpoints called by the external scheduler.

The scheduler hits /cron/attendance every few minutes; the reconciler itself
decides whether the current local time falls in a processing window.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from hrms.core.clock import local_now
from hrms.core.config import settings
from hrms.core.exceptions import AuthenticationError
from hrms.core.schemas import ApiResponse
from hrms.dependencies import get_attendance_reconciler
from hrms.schemas.attendance import ReconciliationSummary
from hrms.services.attendance_reconciler import AttendanceReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"])


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Requires `Authorization: Bearer <CRON_SECRET>` when a secret is configured."""
    if not settings.cron_secret:
        return
    expected = f"Bearer {settings.cron_secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        logger.warning("Rejected cron call with missing or invalid secret")
        raise AuthenticationError("Unauthorized")


def _run_attendance_sweep(reconciler: AttendanceReconciler) -> ApiResponse[ReconciliationSummary]:
    summary = reconciler.reconcile_attendance(local_now())
    if not summary.scheduled:
        return ApiResponse.ok(summary, metadata={"message": "Not the scheduled time for attendance processing"})
    return ApiResponse.ok(summary, metadata={"message": f"Attendance {summary.mode} run completed"})


@router.get("/attendance", response_model=ApiResponse[ReconciliationSummary],
            dependencies=[Depends(verify_cron_secret)])
def run_attendance_sweep(reconciler: AttendanceReconciler = Depends(get_attendance_reconciler)):
    return _run_attendance_sweep(reconciler)


@router.post("/attendance", response_model=ApiResponse[ReconciliationSummary],
             dependencies=[Depends(verify_cron_secret)])
def trigger_attendance_sweep(reconciler: AttendanceReconciler = Depends(get_attendance_reconciler)):
    return _run_attendance_sweep(reconciler)
