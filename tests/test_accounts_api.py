import pytest
from fastapi import status


def _register(client, headers, email, role="employee", **profile):
    return client.post(
        "/api/accounts/register",
        headers=headers,
        json={"email": email, "role": role, **profile},
    )


def test_register_employee(client, employee_headers):
    response = _register(client, employee_headers, "alice@example.com", full_name="  Alice Doe ", phone="   ")
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["id"] == "emp-a"
    assert data["role"] == "employee"
    assert data["full_name"] == "Alice Doe"
    assert data["phone"] is None


def test_register_twice_conflicts(client, employee_headers):
    assert _register(client, employee_headers, "alice@example.com").status_code == 201
    response = _register(client, employee_headers, "alice@example.com")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["errors"][0]["code"] == "CONFLICT"


def test_register_email_mismatch(client, employee_headers):
    response = _register(client, employee_headers, "mallory@example.com")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["msg"] == "Email mismatch"


def test_employee_cannot_self_register_as_admin(client, employee_headers):
    response = _register(client, employee_headers, "alice@example.com", role="admin")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_policy_admin_registers_as_admin(client, admin_headers):
    response = _register(client, admin_headers, "admin@example.com", role="employee")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["role"] == "admin"


def test_register_requires_credentials(client):
    response = client.post("/api/accounts/register", json={"email": "alice@example.com", "role": "employee"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_rejected(client):
    response = client.get("/api/accounts/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_reports_effective_role(client, employee_headers, admin_headers):
    assert client.get("/api/accounts/me", headers=employee_headers).json()["role"] == "employee"
    assert client.get("/api/accounts/me", headers=admin_headers).json()["role"] == "admin"


def test_list_accounts_admin_only(client, employee_headers, admin_headers):
    _register(client, employee_headers, "alice@example.com")
    _register(client, admin_headers, "admin@example.com")

    assert client.get("/api/accounts", headers=employee_headers).status_code == status.HTTP_403_FORBIDDEN
    response = client.get("/api/accounts", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert {a["id"] for a in response.json()} == {"emp-a", "admin-1"}


def test_read_balance_defaults(client, employee_headers):
    _register(client, employee_headers, "alice@example.com")
    response = client.get("/api/leave-balance/emp-a", headers=employee_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"account_id": "emp-a", "annual": 12, "sick": 10, "casual": 8}


def test_read_balance_of_someone_else(client, employee_headers, other_employee_headers, admin_headers):
    _register(client, employee_headers, "alice@example.com")
    assert client.get("/api/leave-balance/emp-a", headers=other_employee_headers).status_code == 403
    assert client.get("/api/leave-balance/emp-a", headers=admin_headers).status_code == 200


def test_read_balance_unknown_account(client, admin_headers):
    response = client.get("/api/leave-balance/nobody", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_set_balance(client, employee_headers, admin_headers):
    _register(client, employee_headers, "alice@example.com")

    assert client.patch("/api/leave-balance/emp-a", headers=employee_headers, json={"annual": 99}).status_code == 403

    response = client.patch("/api/leave-balance/emp-a", headers=admin_headers, json={"annual": 15})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"account_id": "emp-a", "annual": 15, "sick": 10, "casual": 8}


@pytest.mark.parametrize("body", [{"annual": -3}, {"sick": "ten"}, {"bonus": 1}, {"annual": 10**20}, {"casual": 1e300}])
def test_set_balance_validation(client, employee_headers, admin_headers, body):
    _register(client, employee_headers, "alice@example.com")
    response = client.patch("/api/leave-balance/emp-a", headers=admin_headers, json=body)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["code"] == "VALIDATION_ERROR"
