def _seed(fake_db):
    fake_db.tables["projects"] = [
        {"id": "p-1", "tenant_id": "t-1", "title": "Riverside Duplex", "budget": "1000.00", "status": "active",
         "start_date": "2026-01-05T00:00:00+00:00", "end_date": "2026-09-30T00:00:00+00:00",
         "manager_id": "u-1", "deleted_at": None},
        {"id": "p-2", "tenant_id": "t-1", "title": "Old Warehouse", "budget": "500.00", "status": "completed",
         "start_date": "2025-01-05T00:00:00+00:00", "end_date": "2025-09-30T00:00:00+00:00",
         "manager_id": "u-1", "deleted_at": None},
        {"id": "p-9", "tenant_id": "t-2", "title": "Other Tenant", "budget": "999.00", "status": "active",
         "start_date": "2026-01-05T00:00:00+00:00", "end_date": "2026-09-30T00:00:00+00:00",
         "manager_id": "u-x", "deleted_at": None},
    ]
    fake_db.tables["transactions"] = [
        {"id": "tx-1", "tenant_id": "t-1", "project_id": "p-1", "type": "allocation", "amount": "600.00"},
        {"id": "tx-2", "tenant_id": "t-1", "project_id": "p-1", "type": "expense", "amount": "250.00"},
        {"id": "tx-3", "tenant_id": "t-1", "project_id": "p-1", "type": "revenue", "amount": "1200.00"},
        {"id": "tx-4", "tenant_id": "t-1", "project_id": "p-2", "type": "transfer", "amount": "75.00"},
        {"id": "tx-5", "tenant_id": "t-2", "project_id": "p-9", "type": "expense", "amount": "999.00"},
    ]


def test_analytics_require_auth(client, fake_db):
    assert client.get("/api/analytics/tenant").status_code == 401
    assert client.get("/api/analytics/project/p-1").status_code == 401


def test_unknown_role_is_blocked_from_analytics(client, fake_db, login_as):
    _seed(fake_db)
    login_as("auditor")
    assert client.get("/api/analytics/tenant").status_code == 403


def test_console_manager_is_not_a_tenant_reader(client, fake_db, login_as):
    _seed(fake_db)
    login_as("console_manager")
    assert client.get("/api/analytics/tenant").status_code == 403


def test_tenant_stats(client, fake_db, login_as):
    _seed(fake_db)
    login_as("viewer")

    response = client.get("/api/analytics/tenant")
    assert response.status_code == 200
    body = response.json()
    assert body["total_budget"] == "1000.00"
    assert body["total_spent"] == "850.00"
    assert body["total_revenue"] == "1200.00"
    assert body["net_profit"] == "350.00"
    assert body["active_projects"] == 1


def test_project_stats_include_budget_variance(client, fake_db, login_as):
    _seed(fake_db)
    login_as("team_leader")

    response = client.get("/api/analytics/project/p-1")
    assert response.status_code == 200
    body = response.json()
    assert body["transaction_count"] == 2
    assert body["total_spent"] == "850.00"
    assert body["budget"]["status"] == "warning"
    assert body["budget"]["spent_percentage"] == "85.00"
    assert body["budget"]["message"].startswith('WARNING: Project "Riverside Duplex"')


def test_project_stats_outside_tenant_is_404(client, fake_db, login_as):
    _seed(fake_db)
    login_as("admin")
    assert client.get("/api/analytics/project/p-9").status_code == 404
