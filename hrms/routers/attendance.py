from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from hrms.core.clock import local_now
from hrms.core.config import settings
from hrms.core.limiter import limiter
from hrms.dependencies import get_attendance_service
from hrms.models.attendance import AttendanceStatus
from hrms.routers.auth_deps import (
    get_current_user,
    require_employee_profile,
    require_hr,
    resolve_employee_scope,
)
from hrms.schemas.attendance import (
    AdminAttendanceCreate,
    AdminAttendanceUpdate,
    AttendanceListResponse,
    AttendanceResponse,
    CheckInOutRequest,
)
from hrms.schemas.auth import CurrentUser
from hrms.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.post("/check-in", response_model=AttendanceResponse)
@limiter.limit(settings.check_in_rate_limit)
def check_in(
    request: Request,
    payload: Optional[CheckInOutRequest] = None,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: AttendanceService = Depends(get_attendance_service),
):
    notes = payload.notes if payload else None
    return service.check_in(current_user.employee_id, local_now(), notes)


@router.post("/check-out", response_model=AttendanceResponse)
@limiter.limit(settings.check_in_rate_limit)
def check_out(
    request: Request,
    payload: Optional[CheckInOutRequest] = None,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: AttendanceService = Depends(get_attendance_service),
):
    notes = payload.notes if payload else None
    return service.check_out(current_user.employee_id, local_now(), notes)


@router.get("", response_model=AttendanceListResponse)
def list_attendance(
    employee_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[AttendanceStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.list_attendance(
        employee_id=resolve_employee_scope(current_user, employee_id),
        start_date=start_date,
        end_date=end_date,
        status=status.value if status else None,
        page=page,
        limit=limit,
    )


@router.post("/admin", response_model=AttendanceResponse, status_code=201)
def create_attendance(
    payload: AdminAttendanceCreate,
    current_user: CurrentUser = Depends(require_hr()),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.record_attendance(
        employee_id=payload.employee_id,
        day=payload.date,
        check_in=payload.check_in,
        check_out=payload.check_out,
        status=payload.status,
        notes=payload.notes,
    )


@router.put("/admin", response_model=AttendanceResponse)
def update_attendance(
    payload: AdminAttendanceUpdate,
    current_user: CurrentUser = Depends(require_hr()),
    service: AttendanceService = Depends(get_attendance_service),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"attendance_id"})
    return service.update_attendance(payload.attendance_id, changes)
