from datetime import date

import pytest

from hrms.core.config import DEFAULT_LEAVE_ENTITLEMENTS
from hrms.core.exceptions import NotFoundError, ValidationError
from hrms.models.employee import Employee
from hrms.models.leave_request import LeaveRequest
from hrms.repositories.memory import (
    InMemoryEmployeeDirectory,
    InMemoryEntitlementStore,
    InMemoryLeaveRequestStore,
)
from hrms.services.entitlement_ledger import LEAVE_TYPES, EntitlementLedger, available_balance

TODAY = date(2025, 9, 15)


@pytest.fixture
def stores():
    employees = InMemoryEmployeeDirectory([
        Employee(employee_id="E1", first_name="Ada", last_name="Veteran", email="ada@example.com",
                 joining_date=date(2020, 2, 1)),
        Employee(employee_id="E2", first_name="Bo", last_name="Newcomer", email="bo@example.com",
                 joining_date=date(2025, 7, 1)),
        Employee(employee_id="E3", first_name="Cy", last_name="Future", email="cy@example.com",
                 joining_date=date(2026, 1, 5)),
    ])
    return employees, InMemoryLeaveRequestStore(), InMemoryEntitlementStore()


@pytest.fixture
def ledger(stores):
    employees, leaves, entitlements = stores
    return EntitlementLedger(employees, leaves, entitlements, dict(DEFAULT_LEAVE_ENTITLEMENTS))


def _leave(leaves, employee_id, start, end, status, leave_type="pto"):
    return leaves.add(LeaveRequest(
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        total_days=(end - start).days + 1,
        reason="test",
        status=status,
    ))


def test_full_year_entitlement_for_earlier_joiner(ledger):
    record = ledger.get_or_create_entitlement("E1", "pto", 2025, TODAY)
    assert record.entitlement == 12
    assert record.accrued == 12  # clamped to the entitlement
    assert record.used == 0
    assert record.pending == 0
    assert record.available == 12
    assert record.accrual_rate == 1


def test_pro_rated_entitlement_for_joiner_in_year(ledger):
    record = ledger.get_or_create_entitlement("E2", "pto", 2025, TODAY)
    assert record.entitlement == 6
    assert record.accrued == 3
    assert record.available == 3


def test_no_entitlement_before_joining_year(ledger):
    record = ledger.get_or_create_entitlement("E3", "sick", 2025, TODAY)
    assert record.entitlement == 0
    assert record.accrued == 0


def test_get_or_create_returns_existing_record(ledger, stores):
    _, _, entitlements = stores
    first = ledger.get_or_create_entitlement("E1", "pto", 2025, TODAY)
    second = ledger.get_or_create_entitlement("E1", "pto", 2025, TODAY)
    assert first is second
    assert len(entitlements) == 1


def test_unknown_employee_is_rejected(ledger, stores):
    _, _, entitlements = stores
    with pytest.raises(NotFoundError):
        ledger.get_or_create_entitlement("NOPE", "pto", 2025, TODAY)
    assert len(entitlements) == 0


def test_unknown_leave_type_is_rejected(ledger):
    with pytest.raises(ValidationError):
        ledger.get_or_create_entitlement("E1", "sabbatical", 2025, TODAY)


def test_concurrent_creation_keeps_stored_record(stores):
    employees, leaves, entitlements = stores

    class RacingStore(InMemoryEntitlementStore):
        """Reports the key as missing once, then loses the insert race."""

        def __init__(self):
            super().__init__()
            self.misses = 1

        def get(self, employee_id, leave_type, year):
            if self.misses:
                self.misses -= 1
                return None
            return super().get(employee_id, leave_type, year)

    racing = RacingStore()
    ledger = EntitlementLedger(employees, leaves, racing, dict(DEFAULT_LEAVE_ENTITLEMENTS))
    winner = ledger.get_or_create_entitlement("E1", "pto", 2025, TODAY)
    racing.misses = 1
    again = ledger.get_or_create_entitlement("E1", "pto", 2025, TODAY)
    assert again is winner
    assert len(racing) == 1


def test_recompute_derives_used_and_pending(ledger, stores):
    _, leaves, _ = stores
    _leave(leaves, "E1", date(2025, 3, 3), date(2025, 3, 4), "approved")
    _leave(leaves, "E1", date(2025, 4, 7), date(2025, 4, 7), "processed")
    _leave(leaves, "E1", date(2025, 10, 6), date(2025, 10, 8), "pending")
    _leave(leaves, "E1", date(2025, 5, 5), date(2025, 5, 9), "rejected")
    _leave(leaves, "E1", date(2025, 6, 2), date(2025, 6, 2), "cancelled")
    _leave(leaves, "E1", date(2025, 11, 3), date(2025, 11, 4), "draft")
    _leave(leaves, "E1", date(2025, 8, 4), date(2025, 8, 5), "approved", leave_type="sick")

    record = ledger.recompute_balance("E1", "pto", 2025, TODAY)
    assert record.used == 3
    assert record.pending == 3
    assert record.available == 6
    assert record.available == available_balance(record.accrued, record.used, record.pending)


def test_recompute_is_idempotent(ledger, stores):
    _, leaves, _ = stores
    _leave(leaves, "E1", date(2025, 3, 3), date(2025, 3, 4), "approved")
    first = ledger.recompute_balance("E1", "pto", 2025, TODAY)
    snapshot = (first.used, first.pending, first.available)
    second = ledger.recompute_balance("E1", "pto", 2025, TODAY)
    assert (second.used, second.pending, second.available) == snapshot


def test_recompute_scopes_by_start_year(ledger, stores):
    _, leaves, _ = stores
    _leave(leaves, "E1", date(2024, 12, 30), date(2025, 1, 2), "approved")
    _leave(leaves, "E1", date(2025, 12, 31), date(2026, 1, 1), "approved")

    record = ledger.recompute_balance("E1", "pto", 2025, TODAY)
    assert record.used == 2


def test_available_never_negative(ledger, stores):
    _, leaves, _ = stores
    _leave(leaves, "E2", date(2025, 8, 4), date(2025, 8, 8), "approved")
    record = ledger.recompute_balance("E2", "pto", 2025, TODAY)
    assert record.used == 5
    assert record.available == 0


def test_balances_for_year_covers_every_leave_type(ledger):
    balances = ledger.balances_for_year("E1", 2025, TODAY)
    assert [b.leave_type for b in balances] == LEAVE_TYPES
    assert {b.year for b in balances} == {2025}


def test_find_overlapping_counts_shared_boundary_day(ledger, stores):
    _, leaves, _ = stores
    existing = _leave(leaves, "E1", date(2025, 10, 6), date(2025, 10, 8), "pending")

    assert ledger.find_overlapping("E1", date(2025, 10, 8), date(2025, 10, 10)) is existing
    assert ledger.find_overlapping("E1", date(2025, 10, 9), date(2025, 10, 10)) is None
    assert ledger.find_overlapping("E1", date(2025, 10, 6), date(2025, 10, 6), exclude_id=existing.id) is None
    assert ledger.find_overlapping("E2", date(2025, 10, 6), date(2025, 10, 8)) is None


def test_find_overlapping_ignores_closed_requests(ledger, stores):
    _, leaves, _ = stores
    _leave(leaves, "E1", date(2025, 10, 6), date(2025, 10, 8), "rejected")
    _leave(leaves, "E1", date(2025, 10, 6), date(2025, 10, 8), "cancelled")
    _leave(leaves, "E1", date(2025, 10, 6), date(2025, 10, 8), "draft")
    assert ledger.find_overlapping("E1", date(2025, 10, 7), date(2025, 10, 7)) is None
