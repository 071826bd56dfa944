import pytest


def _seed(fake_db, *, consumed="0", budget="1000.00"):
    fake_db.tables["projects"] = [
        {
            "id": "p-1",
            "tenant_id": "t-1",
            "title": "Riverside Duplex",
            "start_date": "2026-01-05T00:00:00+00:00",
            "end_date": "2026-09-30T00:00:00+00:00",
            "budget": budget,
            "consumed_amount": consumed,
            "manager_id": "u-1",
            "status": "active",
            "deleted_at": None,
        },
        {
            "id": "p-other",
            "tenant_id": "t-2",
            "title": "Elsewhere",
            "start_date": "2026-01-05T00:00:00+00:00",
            "end_date": "2026-09-30T00:00:00+00:00",
            "budget": "10.00",
            "consumed_amount": "0",
            "manager_id": "u-x",
            "status": "active",
            "deleted_at": None,
        },
    ]
    fake_db.tables["users"] = [
        {"id": "u-1", "tenant_id": "t-1", "email": "a@acme.example.com", "role": "admin", "status": "active", "deleted_at": None},
        {"id": "u-2", "tenant_id": "t-1", "email": "b@acme.example.com", "role": "team_leader", "status": "active", "deleted_at": None},
        {"id": "u-x", "tenant_id": "t-2", "email": "x@other.example.com", "role": "admin", "status": "active", "deleted_at": None},
    ]


ALLOCATION = {"project_id": "p-1", "to_user_id": "u-2", "amount": "250.00", "category": "foundation"}


@pytest.mark.parametrize(
    "role,expected",
    [("admin", 201), ("manager", 201), ("team_leader", 201), ("viewer", 403), ("user", 403), ("console_manager", 403)],
)
def test_fund_allocation_matrix(client, fake_db, login_as, role, expected):
    _seed(fake_db)
    login_as(role)
    assert client.post("/api/fund-allocations/", json=ALLOCATION).status_code == expected


def test_fund_allocation_mirrors_transaction_and_consumes_budget(client, fake_db, login_as):
    _seed(fake_db, consumed="100.00")
    login_as("admin")

    response = client.post("/api/fund-allocations/", json=ALLOCATION)
    assert response.status_code == 201
    allocation = response.json()
    assert allocation["from_user_id"] == "u-1"
    assert allocation["status"] == "approved"

    [transaction] = fake_db.rows("transactions")
    assert transaction["type"] == "allocation"
    assert transaction["user_id"] == "u-2"
    assert transaction["allocation_id"] == allocation["id"]
    assert transaction["description"] == "Fund allocation"

    assert fake_db.rows("projects")[0]["consumed_amount"] == "350.00"
    assert [row["action"] for row in fake_db.rows("audit_logs")] == ["fund_allocated"]


def test_fund_allocations_increment_consumed_amount_in_the_database(client, fake_db, login_as):
    _seed(fake_db, consumed="100.00")
    login_as("admin")

    assert client.post("/api/fund-allocations/", json=dict(ALLOCATION, amount="100.00")).status_code == 201
    assert client.post("/api/fund-allocations/", json=dict(ALLOCATION, amount="50.00")).status_code == 201

    assert fake_db.rows("projects")[0]["consumed_amount"] == "250.00"
    assert [params["p_amount"] for _, params in fake_db.rpc_calls] == ["100.00", "50.00"]
    assert all(name == "increment_project_consumed" for name, _ in fake_db.rpc_calls)
    assert ("projects", "update") not in fake_db.calls


def test_fund_allocation_stays_inside_tenant(client, fake_db, login_as):
    _seed(fake_db)
    login_as("admin")

    other_project = dict(ALLOCATION, project_id="p-other")
    assert client.post("/api/fund-allocations/", json=other_project).status_code == 400
    other_user = dict(ALLOCATION, to_user_id="u-x")
    assert client.post("/api/fund-allocations/", json=other_user).status_code == 400
    assert fake_db.rows("fund_allocations") == []


def test_fund_allocation_validates_amount_and_category(client, fake_db, login_as):
    _seed(fake_db)
    login_as("admin")
    assert client.post("/api/fund-allocations/", json=dict(ALLOCATION, amount="0")).status_code == 422
    assert client.post("/api/fund-allocations/", json=dict(ALLOCATION, category="snacks")).status_code == 422


def test_viewer_can_read_allocations(client, fake_db, login_as):
    _seed(fake_db)
    fake_db.tables["fund_allocations"] = [
        {"id": "fa-1", "tenant_id": "t-1", "project_id": "p-1", "from_user_id": "u-1", "to_user_id": "u-2",
         "amount": "5.00", "category": "roofing", "created_at": "2026-02-01T00:00:00+00:00"},
        {"id": "fa-2", "tenant_id": "t-2", "project_id": "p-other", "from_user_id": "u-x", "to_user_id": "u-x",
         "amount": "5.00", "category": "roofing", "created_at": "2026-02-01T00:00:00+00:00"},
    ]
    login_as("user")

    response = client.get("/api/fund-allocations/")
    assert response.status_code == 200
    assert [row["id"] for row in response.json()] == ["fa-1"]


def test_expense_and_revenue_entries(client, fake_db, login_as):
    _seed(fake_db)
    login_as("team_leader", user_id="u-2")

    expense = client.post(
        "/api/transactions/",
        json={"project_id": "p-1", "type": "expense", "amount": "40.00", "category": "plumbing"},
    )
    revenue = client.post(
        "/api/transactions/",
        json={"project_id": "p-1", "type": "revenue", "amount": "90.00", "category": "miscellaneous"},
    )

    assert expense.status_code == 201
    assert revenue.status_code == 201
    assert expense.json()["user_id"] == "u-2"
    assert [row["action"] for row in fake_db.rows("audit_logs")] == ["expense_submitted", "revenue_added"]


def test_viewer_cannot_record_transactions(client, fake_db, login_as):
    _seed(fake_db)
    login_as("viewer")

    for kind in ("expense", "revenue"):
        response = client.post(
            "/api/transactions/",
            json={"project_id": "p-1", "type": kind, "amount": "1.00", "category": "plumbing"},
        )
        assert response.status_code == 403
    assert fake_db.rows("transactions") == []


def test_fund_transfer(client, fake_db, login_as):
    _seed(fake_db)
    login_as("team_leader", user_id="u-2")

    payload = {"project_id": "p-1", "to_user_id": "u-1", "amount": "15.00", "category": "structural", "purpose": "crew"}
    response = client.post("/api/fund-transfers/", json=payload)
    assert response.status_code == 201
    assert response.json()["from_user_id"] == "u-2"
    assert fake_db.rows("audit_logs")[0]["action"] == "fund_transferred"

    to_self = dict(payload, to_user_id="u-2")
    assert client.post("/api/fund-transfers/", json=to_self).status_code == 400


def test_viewer_cannot_transfer_but_can_list(client, fake_db, login_as):
    _seed(fake_db)
    login_as("viewer")
    payload = {"project_id": "p-1", "to_user_id": "u-1", "amount": "15.00", "category": "structural"}
    assert client.post("/api/fund-transfers/", json=payload).status_code == 403
    assert client.get("/api/fund-transfers/").status_code == 200
