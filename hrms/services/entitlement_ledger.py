"""
Entitlement Ledger

Maintains per (employee, leave type, year) entitlement records. Balances are
never adjusted incrementally when a leave request is created, approved or
rejected; `recompute_balance` re-derives `used`, `pending` and `available`
from the leave-request ledger every time, so repeated calls are idempotent.

Architecture:
- Router / LeaveService -> EntitlementLedger (this module) -> stores
- Arithmetic lives in leave_calculations and is pure
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from hrms.core.exceptions import NotFoundError, ValidationError
from hrms.models.leave_entitlement import LeaveEntitlement
from hrms.models.leave_request import (
    BLOCKING_STATUSES,
    CONSUMED_STATUSES,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
)
from hrms.repositories.base import (
    DuplicateRecordError,
    EmployeeDirectory,
    EntitlementStore,
    LeaveRequestStore,
)
from hrms.services import leave_calculations as calc

logger = logging.getLogger(__name__)

LEAVE_TYPES: List[str] = [t.value for t in LeaveType]


def validate_leave_type(leave_type: str) -> str:
    value = leave_type.value if isinstance(leave_type, LeaveType) else leave_type
    if value not in LEAVE_TYPES:
        raise ValidationError(
            f"Unknown leave type '{leave_type}'",
            details={"allowed": LEAVE_TYPES},
        )
    return value


def initial_entitlement(
    annual: float,
    joining_date: Optional[date],
    year: int,
    today: date,
) -> Dict[str, float]:
    """
    Figures for a freshly created entitlement record.

    Joined after `year` -> 0; joined during `year` -> pro-rated; joined
    earlier -> full annual amount. Accrual runs from the joining date and is
    clamped to the entitlement.
    """
    entitlement_days = annual
    if joining_date:
        if joining_date.year == year:
            entitlement_days = calc.pro_rated_entitlement(annual, joining_date, year)
        elif joining_date.year > year:
            entitlement_days = 0

    rate = calc.monthly_accrual_rate(annual)
    accrued = min(entitlement_days, calc.accrued_days(rate, joining_date or today, today))
    return {
        "entitlement": entitlement_days,
        "accrued": accrued,
        "used": 0,
        "pending": 0,
        "available": accrued,
        "accrual_rate": rate,
    }


def available_balance(accrued: float, used: float, pending: float) -> float:
    return max(0, accrued - used - pending)


class EntitlementLedger:
    def __init__(
        self,
        employees: EmployeeDirectory,
        leaves: LeaveRequestStore,
        entitlements: EntitlementStore,
        entitlement_table: Dict[str, float],
    ):
        self.employees = employees
        self.leaves = leaves
        self.entitlements = entitlements
        self.entitlement_table = entitlement_table

    def get_or_create_entitlement(
        self,
        employee_id: str,
        leave_type: str,
        year: int,
        today: date,
    ) -> LeaveEntitlement:
        """
        Return the record for the key, creating it on first access.

        An existing record is returned unchanged; recomputation is the job of
        `recompute_balance`.
        """
        leave_type = validate_leave_type(leave_type)
        existing = self.entitlements.get(employee_id, leave_type, year)
        if existing:
            return existing

        employee = self.employees.get(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", details={"employee_id": employee_id})

        annual = self.entitlement_table.get(leave_type, 0)
        figures = initial_entitlement(annual, employee.joining_date, year, today)
        record = LeaveEntitlement(
            employee_id=employee_id,
            leave_type=leave_type,
            year=year,
            **figures,
        )
        try:
            record = self.entitlements.add(record)
        except DuplicateRecordError:
            # Another request created the same key first; the stored record wins.
            logger.info(f"Entitlement {employee_id}/{leave_type}/{year} created concurrently; re-reading")
            winner = self.entitlements.get(employee_id, leave_type, year)
            if winner is None:
                raise
            return winner

        logger.info(
            f"Created {leave_type} entitlement for {employee_id} ({year})",
            extra={"entitlement": figures["entitlement"], "accrued": figures["accrued"]},
        )
        return record

    def recompute_balance(
        self,
        employee_id: str,
        leave_type: str,
        year: int,
        today: date,
    ) -> LeaveEntitlement:
        """Re-derive used, pending and available from the leave requests of `year`."""
        entitlement = self.get_or_create_entitlement(employee_id, leave_type, year, today)
        year_start, next_year_start = date(year, 1, 1), date(year + 1, 1, 1)

        used_leaves = self.leaves.find_starting_between(
            employee_id=employee_id,
            leave_type=entitlement.leave_type,
            start=year_start,
            end=next_year_start,
            statuses=CONSUMED_STATUSES,
        )
        pending_leaves = self.leaves.find_starting_between(
            employee_id=employee_id,
            leave_type=entitlement.leave_type,
            start=year_start,
            end=next_year_start,
            statuses=(LeaveStatus.PENDING.value,),
        )

        used = sum(leave.total_days for leave in used_leaves)
        pending = sum(leave.total_days for leave in pending_leaves)

        entitlement.used = used
        entitlement.pending = pending
        entitlement.available = available_balance(entitlement.accrued, used, pending)
        return self.entitlements.save(entitlement)

    def balances_for_year(self, employee_id: str, year: int, today: date) -> List[LeaveEntitlement]:
        return [
            self.recompute_balance(employee_id, leave_type, year, today)
            for leave_type in LEAVE_TYPES
        ]

    def find_overlapping(
        self,
        employee_id: str,
        start: date,
        end: date,
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        """First pending/approved request sharing at least one day with [start, end]."""
        return self.leaves.find_overlapping(
            employee_id=employee_id,
            start=start,
            end=end,
            statuses=BLOCKING_STATUSES,
            exclude_id=exclude_id,
        )
