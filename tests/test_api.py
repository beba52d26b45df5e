"""HTTP boundary: status codes, error bodies and Decimal serialization."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal


def _category(client, name="Food"):
    resp = client.post("/categories/", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _expense(client, category_id, amount="10.00", day="2024-05-01", description="Groceries"):
    return client.post(
        "/expenses/",
        json={
            "amount": amount,
            "description": description,
            "category_id": category_id,
            "expense_date": day,
        },
    )


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Expense Tracker API"


def test_create_and_fetch_expense(client):
    cat = _category(client)
    resp = _expense(client, cat["id"], amount="49.99")
    assert resp.status_code == 201
    body = resp.json()
    assert Decimal(body["amount"]) == Decimal("49.99")
    assert body["category_name"] == "Food"

    fetched = client.get(f"/expenses/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["description"] == "Groceries"
    assert resp.headers.get("x-request-id")


def test_not_found_body(client):
    resp = client.get("/expenses/999")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == 404
    assert body["error"] == "NOT_FOUND"
    assert body["path"] == "/expenses/999"
    assert "999" in body["message"]
    assert "timestamp" in body


def test_unknown_route(client):
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.json()["message"] == "No route for GET /nowhere"


def test_validation_errors_are_400_with_details(client):
    cat = _category(client)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    resp = _expense(client, cat["id"], amount="-5", day=tomorrow, description="<b>")
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "VALIDATION_FAILED"
    fields = {d.split(":")[0] for d in body["details"]}
    assert {"amount", "description", "expense_date"} <= fields


def test_budget_exceeded_is_conflict(client):
    cat = _category(client)
    put = client.put(f"/budgets/{cat['id']}/2024-05", json={"monthly_limit": "100.00"})
    assert put.status_code == 200
    assert put.json()["month"] == "2024-05"

    assert _expense(client, cat["id"], amount="60.00").status_code == 201
    resp = _expense(client, cat["id"], amount="40.00")
    assert resp.status_code == 409
    assert resp.json()["error"] == "BUDGET_EXCEEDED"
    assert len(client.get("/expenses/").json()) == 1

    remaining = client.get(f"/budgets/{cat['id']}/2024-05/remaining")
    assert Decimal(remaining.json()["remaining"]) == Decimal("40.00")


def test_budget_errors(client):
    cat = _category(client)
    missing = client.get(f"/budgets/{cat['id']}/2024-05")
    assert missing.status_code == 404
    assert missing.json()["error"] == "BUDGET_NOT_FOUND"

    bad_month = client.get(f"/budgets/{cat['id']}/2024-13")
    assert bad_month.status_code == 400


def test_filter_and_inverted_range(client):
    cat = _category(client)
    _expense(client, cat["id"], amount="5.00", day="2024-01-02")
    _expense(client, cat["id"], amount="50.00", day="2024-01-03", description="Weekly SHOP")

    resp = client.get("/expenses/filter", params={"min_amount": "10", "keyword": "shop"})
    assert resp.status_code == 200
    assert [Decimal(e["amount"]) for e in resp.json()] == [Decimal("50.00")]

    bad = client.get(
        "/expenses/filter", params={"start_date": "2024-02-01", "end_date": "2024-01-01"}
    )
    assert bad.status_code == 400
    assert bad.json()["error"] == "BAD_REQUEST"


def test_category_conflicts(client):
    cat = _category(client)
    dup = client.post("/categories/", json={"name": "Food"})
    assert dup.status_code == 409

    _expense(client, cat["id"])
    in_use = client.delete(f"/categories/{cat['id']}")
    assert in_use.status_code == 409
    assert in_use.json()["error"] == "CONFLICT"


def test_analytics_summary_and_breakdown(client):
    food = _category(client, "Food")
    travel = _category(client, "Travel")
    _expense(client, food["id"], amount="10.00", day="2024-01-05")
    _expense(client, food["id"], amount="20.00", day="2024-02-05")
    _expense(client, travel["id"], amount="45.00", day="2024-02-06", description="Taxi ride")

    summary = client.get("/analytics/summary").json()
    assert summary["total_expenses"] == 3
    assert Decimal(summary["total_amount"]) == Decimal("75.00")
    assert Decimal(summary["average_amount"]) == Decimal("25.00")

    monthly = client.get("/analytics/monthly").json()
    assert [m["month"] for m in monthly] == ["2024-01", "2024-02"]

    breakdown = client.get("/analytics/category-breakdown").json()
    assert [b["category"] for b in breakdown] == ["Travel", "Food"]

    top = client.get("/analytics/top", params={"limit": 1}).json()
    assert [t["description"] for t in top] == ["Taxi ride"]

    mom = client.get("/analytics/month-over-month", params={"month": "2024-02"}).json()
    assert Decimal(mom["growth_percent"]) == Decimal("550.00")


def test_delete_expense(client):
    cat = _category(client)
    created = _expense(client, cat["id"]).json()
    assert client.delete(f"/expenses/{created['id']}").status_code == 204
    assert client.get(f"/expenses/{created['id']}").status_code == 404


def test_huge_amount_bounds_filter_instead_of_failing(client):
    cat = _category(client)
    _expense(client, cat["id"], amount="5.00")

    above = client.get("/expenses/filter", params={"min_amount": "1e30"})
    assert above.status_code == 200
    assert above.json() == []

    below = client.get("/expenses/filter", params={"max_amount": "1e30"})
    assert below.status_code == 200
    assert len(below.json()) == 1


def test_oversized_budget_limit_is_rejected(client):
    cat = _category(client)
    resp = client.put(f"/budgets/{cat['id']}/2024-05", json={"monthly_limit": "1e30"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_FAILED"
    assert client.get("/budgets/").json() == []


def test_daily_trend_window_is_bounded(client):
    resp = client.get("/analytics/daily-trend", params={"days": 1000000000})
    assert resp.status_code == 400
    assert any(d.startswith("days") for d in resp.json()["details"])
    assert client.get("/analytics/daily-trend", params={"days": 3650}).status_code == 200
