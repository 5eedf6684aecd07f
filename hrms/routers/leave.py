from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hrms.core.clock import local_now, local_today
from hrms.dependencies import get_entitlement_ledger, get_leave_service
from hrms.models.leave_request import LeaveStatus, LeaveType
from hrms.routers.auth_deps import (
    get_current_user,
    require_approver,
    require_employee_profile,
    require_hr,
    resolve_employee_scope,
    resolve_single_employee,
)
from hrms.schemas.auth import CurrentUser
from hrms.schemas.leave import (
    LeaveBalanceResponse,
    LeaveDecisionRequest,
    LeaveListResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from hrms.services.entitlement_ledger import EntitlementLedger
from hrms.services.leave_service import LeaveService

router = APIRouter(prefix="/leaves", tags=["Leave"])


@router.get("", response_model=LeaveListResponse)
def list_leaves(
    employee_id: Optional[str] = None,
    status: Optional[LeaveStatus] = None,
    leave_type: Optional[LeaveType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    return service.list_leaves(
        employee_id=resolve_employee_scope(current_user, employee_id),
        status=status.value if status else None,
        leave_type=leave_type.value if leave_type else None,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.post("", response_model=LeaveRequestResponse, status_code=201)
def create_leave(
    payload: LeaveRequestCreate,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: LeaveService = Depends(get_leave_service),
):
    return service.create_leave(
        employee_id=current_user.employee_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        today=local_today(),
        status=payload.status.value,
        partial_days=payload.partial_days,
        attachments=payload.attachments,
    )


@router.get("/balance", response_model=LeaveBalanceResponse)
def get_leave_balance(
    employee_id: Optional[str] = None,
    year: Optional[int] = None,
    current_user: CurrentUser = Depends(get_current_user),
    ledger: EntitlementLedger = Depends(get_entitlement_ledger),
):
    target = resolve_single_employee(current_user, employee_id)
    today = local_today()
    year = year or today.year
    return {
        "employee_id": target,
        "year": year,
        "balances": ledger.balances_for_year(target, year, today),
    }


@router.post("/{leave_id}/decision", response_model=LeaveRequestResponse)
def decide_leave(
    leave_id: int,
    payload: LeaveDecisionRequest,
    current_user: CurrentUser = Depends(require_approver()),
    service: LeaveService = Depends(get_leave_service),
):
    return service.decide_leave(
        leave_id,
        approve=payload.approve,
        decided_by=current_user.employee_id or current_user.sub,
        now=local_now(),
        rejection_reason=payload.rejection_reason,
    )


@router.post("/{leave_id}/cancel", response_model=LeaveRequestResponse)
def cancel_leave(
    leave_id: int,
    current_user: CurrentUser = Depends(require_employee_profile),
    service: LeaveService = Depends(get_leave_service),
):
    return service.cancel_leave(leave_id, current_user.employee_id, local_today())


@router.post("/{leave_id}/process", response_model=LeaveRequestResponse)
def process_leave(
    leave_id: int,
    current_user: CurrentUser = Depends(require_hr()),
    service: LeaveService = Depends(get_leave_service),
):
    return service.mark_processed(leave_id, local_now())
