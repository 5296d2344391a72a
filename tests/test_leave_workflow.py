import pytest
from datetime import timedelta
from fastapi import status
from leave_service.core.clock import server_clock
from leave_service.models.leave_request import LeaveRequest, LeaveStatus


def _register(client, headers, email):
    response = client.post("/api/accounts/register", headers=headers, json={"email": email, "role": "employee"})
    assert response.status_code == 201

def _create_leave_request(client, headers, leave_type="annual", offset_days=10, length_days=3, reason="Family trip"):
    start = server_clock.today() + timedelta(days=offset_days)
    end = start + timedelta(days=length_days - 1)
    return client.post(
        "/api/leave-requests",
        headers=headers,
        json={"start_date": start.isoformat(), "end_date": end.isoformat(), "leave_type": leave_type, "reason": reason}
    )

def _review(client, headers, req_id, decision="approve", comment=None):
    return client.post(
        f"/api/leave-requests/{req_id}/review",
        headers=headers,
        json={"decision": decision, "comment": comment}
    )

def test_create_leave_request(client, employee_headers):
    """Test creating a leave request."""
    response = _create_leave_request(client, employee_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["days"] == 3
    assert data["status"] == LeaveStatus.PENDING
    assert data["owner_id"] == "emp-a"
    assert data["leave_type"] == "annual"

def test_create_rejects_past_start(client, employee_headers, db_session):
    response = _create_leave_request(client, employee_headers, offset_days=-1)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["msg"] == "Start date cannot be in the past"
    assert db_session.query(LeaveRequest).count() == 0

def test_create_rejects_unknown_category(client, employee_headers):
    response = _create_leave_request(client, employee_headers, leave_type="sabbatical")
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_create_rejects_missing_reason(client, employee_headers):
    start = server_clock.today() + timedelta(days=5)
    for body in ({"reason": None}, {}):
        response = client.post(
            "/api/leave-requests",
            headers=employee_headers,
            json={"start_date": start.isoformat(), "end_date": start.isoformat(), "leave_type": "annual", **body}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["msg"] == "Reason is required"

def test_create_rejects_malformed_date(client, employee_headers):
    response = client.post(
        "/api/leave-requests",
        headers=employee_headers,
        json={"start_date": "soon", "end_date": "2099-01-01", "leave_type": "annual", "reason": "x"}
    )
    assert response.status_code == 422

def test_approval_debits_balance(client, employee_headers, admin_headers):
    """Approving a 3 day annual request takes 12 down to 9."""
    _register(client, employee_headers, "alice@example.com")
    req_id = _create_leave_request(client, employee_headers).json()["id"]

    response = _review(client, admin_headers, req_id, comment="Approved")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == LeaveStatus.APPROVED
    assert response.json()["reviewer_id"] == "admin-1"
    assert response.json()["admin_comment"] == "Approved"

    balance = client.get("/api/leave-balance/emp-a", headers=employee_headers).json()
    assert balance["annual"] == 9
    assert balance["sick"] == 10

def test_approval_clamps_balance(client, employee_headers, admin_headers):
    _register(client, employee_headers, "alice@example.com")
    client.patch("/api/leave-balance/emp-a", headers=admin_headers, json={"sick": 2})
    req_id = _create_leave_request(client, employee_headers, leave_type="sick", length_days=5).json()["id"]

    assert _review(client, admin_headers, req_id).status_code == status.HTTP_200_OK
    assert client.get("/api/leave-balance/emp-a", headers=admin_headers).json()["sick"] == 0

def test_second_review_conflicts(client, employee_headers, admin_headers):
    _register(client, employee_headers, "alice@example.com")
    req_id = _create_leave_request(client, employee_headers).json()["id"]
    _review(client, admin_headers, req_id)

    response = _review(client, admin_headers, req_id, decision="reject")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert client.get("/api/leave-balance/emp-a", headers=employee_headers).json()["annual"] == 9
    listed = client.get("/api/leave-requests", headers=employee_headers).json()
    assert listed[0]["status"] == "approved"

def test_employee_cannot_review(client, employee_headers):
    req_id = _create_leave_request(client, employee_headers).json()["id"]
    assert _review(client, employee_headers, req_id).status_code == status.HTTP_403_FORBIDDEN

def test_review_unknown_request(client, admin_headers):
    assert _review(client, admin_headers, "does-not-exist").status_code == status.HTTP_404_NOT_FOUND

def test_cancel_by_other_employee_then_admin(client, employee_headers, other_employee_headers, admin_headers):
    req_id = _create_leave_request(client, employee_headers).json()["id"]

    response = client.delete(f"/api/leave-requests/{req_id}", headers=other_employee_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/api/leave-requests/{req_id}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"deleted": req_id}

    response = client.delete(f"/api/leave-requests/{req_id}", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND

def test_cancel_after_approval_conflicts(client, employee_headers, admin_headers):
    req_id = _create_leave_request(client, employee_headers).json()["id"]
    _review(client, admin_headers, req_id)

    response = client.delete(f"/api/leave-requests/{req_id}", headers=employee_headers)
    assert response.status_code == status.HTTP_409_CONFLICT

def test_list_scoping_and_order(client, employee_headers, other_employee_headers, admin_headers):
    first = _create_leave_request(client, employee_headers).json()["id"]
    second = _create_leave_request(client, employee_headers, leave_type="casual").json()["id"]
    _create_leave_request(client, other_employee_headers)

    mine = client.get("/api/leave-requests", headers=employee_headers, params={"owner_id": "emp-b"}).json()
    assert [r["id"] for r in mine] == [second, first]

    everyone = client.get("/api/leave-requests", headers=admin_headers).json()
    assert len(everyone) == 3

    only_b = client.get("/api/leave-requests", headers=admin_headers, params={"owner_id": "emp-b"}).json()
    assert [r["owner_id"] for r in only_b] == ["emp-b"]

def test_list_status_filter(client, employee_headers, admin_headers):
    approved = _create_leave_request(client, employee_headers).json()["id"]
    _create_leave_request(client, employee_headers)
    _review(client, admin_headers, approved)

    response = client.get("/api/leave-requests", headers=admin_headers, params={"status": "approved"})
    assert [r["id"] for r in response.json()] == [approved]

    response = client.get("/api/leave-requests", headers=admin_headers, params={"status": "bogus"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_stats(client, employee_headers, admin_headers):
    a = _create_leave_request(client, employee_headers).json()["id"]
    b = _create_leave_request(client, employee_headers).json()["id"]
    _create_leave_request(client, employee_headers, leave_type="unpaid")
    _review(client, admin_headers, a)
    _review(client, admin_headers, b, decision="reject")

    assert client.get("/api/stats", headers=employee_headers).status_code == status.HTTP_403_FORBIDDEN
    response = client.get("/api/stats", headers=admin_headers)
    assert response.json() == {"pending": 1, "approved": 1, "rejected": 1, "total": 3}

def test_debit_before_registration_is_kept(client, employee_headers, admin_headers):
    """Requests do not need an account; the balance row is waiting once the owner registers."""
    req_id = _create_leave_request(client, employee_headers).json()["id"]
    assert _review(client, admin_headers, req_id).status_code == status.HTTP_200_OK
    assert client.get("/api/leave-balance/emp-a", headers=employee_headers).status_code == status.HTTP_404_NOT_FOUND

    _register(client, employee_headers, "alice@example.com")
    assert client.get("/api/leave-balance/emp-a", headers=employee_headers).json()["annual"] == 9
