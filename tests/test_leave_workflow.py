import pytest
from datetime import timedelta
from fastapi import status

from hrms.core.clock import local_today
from hrms.models.leave_request import LeaveRequest, LeaveStatus

def _leave_payload(days_ahead=14, length=3, leave_type="pto", **extra):
    start = local_today() + timedelta(days=days_ahead)
    end = start + timedelta(days=length - 1)
    return {
        "leave_type": leave_type,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "reason": "Family trip",
        **extra,
    }

def _create_leave_request(client, employee, auth_headers, **kwargs):
    response = client.post("/api/leaves", headers=auth_headers(employee), json=_leave_payload(**kwargs))
    assert response.status_code == status.HTTP_201_CREATED, response.json()
    return response.json()

def _decide(client, leave_id, approver, auth_headers, approve=True, role="manager", reason=None):
    return client.post(
        f"/api/leaves/{leave_id}/decision",
        headers=auth_headers(approver, role),
        json={"approve": approve, "rejection_reason": reason},
    )

def test_create_leave_request(client, employee, auth_headers):
    """Test creating a leave request."""
    leave = _create_leave_request(client, employee, auth_headers)
    assert leave["status"] == LeaveStatus.PENDING.value
    assert leave["employee_id"] == employee.employee_id
    assert leave["total_days"] == 3

def test_create_requires_authentication(client, employee):
    response = client.post("/api/leaves", json=_leave_payload())
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_create_rejects_reversed_dates(client, employee, auth_headers):
    payload = _leave_payload()
    payload["start_date"], payload["end_date"] = payload["end_date"], payload["start_date"]
    response = client.post("/api/leaves", headers=auth_headers(employee), json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "VALIDATION_ERROR"

def test_create_rejects_unknown_leave_type(client, employee, auth_headers):
    response = client.post("/api/leaves", headers=auth_headers(employee), json=_leave_payload(leave_type="sabbatical"))
    assert response.status_code == 422

def test_probation_blocks_pto(client, new_joiner, auth_headers):
    response = client.post("/api/leaves", headers=auth_headers(new_joiner), json=_leave_payload())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "probation" in response.json()["errors"][0]["msg"]

def test_conflict_detection(client, employee, auth_headers):
    """Test overlap detection."""
    _create_leave_request(client, employee, auth_headers, days_ahead=20, length=5)
    response = client.post(
        "/api/leaves",
        headers=auth_headers(employee),
        json=_leave_payload(days_ahead=24, length=2, leave_type="sick"),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "overlapping" in response.json()["errors"][0]["msg"]

def test_draft_can_be_saved_and_cancelled(client, employee, auth_headers):
    draft = _create_leave_request(client, employee, auth_headers, status="draft")
    assert draft["status"] == "draft"
    response = client.post(f"/api/leaves/{draft['id']}/cancel", headers=auth_headers(employee))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "cancelled"

def test_balance_tracks_pending_days(client, employee, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    year = int(leave["start_date"][:4])
    response = client.get(f"/api/leaves/balance?year={year}", headers=auth_headers(employee))
    assert response.status_code == status.HTTP_200_OK
    balances = {b["leave_type"]: b for b in response.json()["balances"]}
    assert balances["pto"]["entitlement"] == 12
    assert balances["pto"]["pending"] == 3
    assert balances["pto"]["available"] == 9
    assert balances["sick"]["pending"] == 0

def test_manager_approval(client, employee, manager, auth_headers, outbox):
    """Test manager approval."""
    leave = _create_leave_request(client, employee, auth_headers)
    response = _decide(client, leave["id"], manager, auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == LeaveStatus.APPROVED.value
    assert data["approved_by"] == manager.employee_id
    # One mail to the manager on submission, one to the employee on approval
    assert [m["to"] for m in outbox.sent] == [manager.email, employee.email]

def test_rejection_defaults_reason(client, employee, manager, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    response = _decide(client, leave["id"], manager, auth_headers, approve=False)
    assert response.json()["status"] == LeaveStatus.REJECTED.value
    assert response.json()["rejection_reason"] == "No reason provided"

def test_employee_cannot_decide(client, employee, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    response = _decide(client, leave["id"], employee, auth_headers, role="employee")
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_only_owner_can_cancel(client, employee, new_joiner, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    response = client.post(f"/api/leaves/{leave['id']}/cancel", headers=auth_headers(new_joiner))
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_hr_processes_approved_leave(client, db_session, employee, manager, hr_employee, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    _decide(client, leave["id"], manager, auth_headers)
    response = client.post(f"/api/leaves/{leave['id']}/process", headers=auth_headers(hr_employee, "hr"))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == LeaveStatus.PROCESSED.value

    stored = db_session.get(LeaveRequest, leave["id"])
    assert stored.processed_at is not None

def test_manager_cannot_process(client, employee, manager, auth_headers):
    leave = _create_leave_request(client, employee, auth_headers)
    _decide(client, leave["id"], manager, auth_headers)
    response = client.post(f"/api/leaves/{leave['id']}/process", headers=auth_headers(manager, "manager"))
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_decide_unknown_leave(client, manager, auth_headers):
    response = _decide(client, 9999, manager, auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["errors"][0]["code"] == "NOT_FOUND"

def test_list_is_scoped_to_caller(client, employee, new_joiner, hr_employee, auth_headers):
    _create_leave_request(client, employee, auth_headers)
    _create_leave_request(client, new_joiner, auth_headers, leave_type="sick")

    own = client.get("/api/leaves", headers=auth_headers(employee)).json()
    assert own["pagination"]["total"] == 1
    assert own["leaves"][0]["employee_id"] == employee.employee_id

    everyone = client.get("/api/leaves", headers=auth_headers(hr_employee, "hr")).json()
    assert everyone["pagination"]["total"] == 2

    filtered = client.get("/api/leaves?status=pending&leave_type=sick", headers=auth_headers(hr_employee, "hr")).json()
    assert [l["employee_id"] for l in filtered["leaves"]] == [new_joiner.employee_id]

def test_employee_cannot_list_others(client, employee, new_joiner, auth_headers):
    response = client.get(f"/api/leaves?employee_id={new_joiner.employee_id}", headers=auth_headers(employee))
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_create_with_partial_day_and_attachments(client, employee, auth_headers):
    leave = _create_leave_request(
        client, employee, auth_headers, length=1, partial_days=0.5,
        attachments=["https://files.example.com/certificate.pdf"],
    )
    assert leave["partial_days"] == 0.5
    assert leave["attachments"] == ["https://files.example.com/certificate.pdf"]

def test_partial_days_above_one_is_rejected(client, employee, auth_headers):
    response = client.post("/api/leaves", headers=auth_headers(employee), json=_leave_payload(partial_days=2))
    assert response.status_code == 422
