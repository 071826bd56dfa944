import pytest

from sitefunds.auth.permissions import ROLE_HIERARCHY

COMPANY = {"name": "Northwind Builders", "email": "office@northwind-builders.com", "industry": "construction"}


@pytest.mark.parametrize("role,expected", [("console_manager", 201), ("admin", 403), ("manager", 403), ("viewer", 403)])
def test_company_creation_matrix(client, fake_db, login_as, role, expected):
    login_as(role, user_id="cm-1")
    assert client.post("/api/companies/", json=COMPANY).status_code == expected


def test_console_manager_manages_companies(client, fake_db, login_as):
    login_as("console_manager", user_id="cm-1")

    created = client.post("/api/companies/", json=COMPANY)
    assert created.status_code == 201
    company = created.json()
    assert company["status"] == "active"
    assert company["created_by"] == "cm-1"

    listed = client.get("/api/companies/")
    assert {row["id"] for row in listed.json()} == {"t-1", company["id"]}

    updated = client.put(f"/api/companies/{company['id']}", json={"subscription_plan": "pro"})
    assert updated.status_code == 200
    assert updated.json()["subscription_plan"] == "pro"

    assert client.put("/api/companies/missing", json={"name": "x"}).status_code == 404
    assert client.put(f"/api/companies/{company['id']}", json={}).status_code == 400
    assert [row["action"] for row in fake_db.rows("audit_logs")] == ["company_created", "company_updated"]


def test_company_email_is_validated(client, fake_db, login_as):
    login_as("console_manager")
    assert client.post("/api/companies/", json=dict(COMPANY, email="not-an-email")).status_code == 422


def test_permission_matrix_endpoint(client, fake_db, login_as):
    login_as("manager")

    response = client.get("/api/permissions/")
    assert response.status_code == 200
    body = response.json()
    assert body["roles"] == list(ROLE_HIERARCHY)
    assert body["matrix"]["console_manager"] == ["COMPANY_MANAGEMENT"]
    assert body["capabilities"]["can_manage_users"] == "USER_MANAGEMENT"


@pytest.mark.parametrize("role", ["team_leader", "viewer", "console_manager", "auditor"])
def test_permission_matrix_is_admin_only(client, fake_db, login_as, role):
    login_as(role)
    assert client.get("/api/permissions/").status_code == 403


def test_audit_log_listing(client, fake_db, login_as):
    fake_db.tables["audit_logs"] = [
        {"id": "a-1", "tenant_id": "t-1", "action": "project_created", "entity_type": "project", "entity_id": "p-1",
         "project_id": "p-1", "amount": "10.00", "created_at": "2026-03-01T00:00:00+00:00"},
        {"id": "a-2", "tenant_id": "t-1", "action": "fund_allocated", "entity_type": "fund_allocation",
         "entity_id": "fa-1", "project_id": "p-2", "amount": "5.00", "created_at": "2026-03-02T00:00:00+00:00"},
        {"id": "a-3", "tenant_id": "t-2", "action": "project_created", "entity_type": "project", "entity_id": "p-9",
         "created_at": "2026-03-03T00:00:00+00:00"},
    ]
    login_as("viewer")

    response = client.get("/api/audit-logs/")
    assert [row["id"] for row in response.json()] == ["a-2", "a-1"]
    assert [row["id"] for row in client.get("/api/audit-logs/?project_id=p-1").json()] == ["a-1"]
    assert [row["id"] for row in client.get("/api/audit-logs/?limit=1").json()] == ["a-2"]
    assert client.get("/api/audit-logs/?limit=0").status_code == 422
