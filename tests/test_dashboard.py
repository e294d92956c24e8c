# tests/test_dashboard.py
"""
One student's December: four expenses, two incomes, a food budget and a
laptop goal. The clock is pinned to 2025-12-15 12:00.
"""

import pytest

from conftest import add_expense, add_income, make_category


@pytest.fixture()
def december(client, auth):
    food = make_category(client, auth, "Food")
    bus = make_category(client, auth, "Bus")
    social = make_category(client, auth, "Social")
    job = make_category(client, auth, "Tutoring", kind="income")
    allowance = make_category(client, auth, "Pocket money", kind="income")

    add_expense(client, auth, food, 45.5, "2025-12-01T12:00:00", note="Lunch at campus cafe")
    add_expense(client, auth, bus, 20, "2025-12-02T08:00:00", note="Bus fare")
    add_expense(client, auth, food, 85, "2025-12-03T18:00:00", note="Grocery shopping")
    add_expense(client, auth, social, 120, "2025-12-04T20:00:00", note="Dinner with friends")
    add_income(client, auth, job, 5000, "2025-12-01T09:00:00", description="Part-time salary")
    add_income(client, auth, allowance, 1000, "2025-12-01T10:00:00", description="Allowance")

    r = client.post(
        "/api/budgets",
        json={"category_id": food, "limit_amount": 1500, "period": "monthly"},
        headers=auth,
    )
    assert r.status_code == 201
    r = client.post(
        "/api/goals",
        json={
            "name": "New Laptop",
            "target_amount": 10000,
            "current_amount": 1500,
            "target_date": "2026-06-13",
        },
        headers=auth,
    )
    assert r.status_code == 201
    return {"food": food, "bus": bus, "social": social}


def test_summary(client, auth, december):
    r = client.get("/api/dashboard/summary", headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]

    assert data["overview"] == {
        "total_income": 6000,
        "total_expenses": 270.5,
        "savings": 5729.5,
        "savings_rate": 95.49,
        "transaction_count": 6,
    }
    assert data["expenses"]["count"] == 4
    assert data["expenses"]["average"] == pytest.approx(67.62, abs=0.01)
    assert data["income"] == {"total": 6000, "count": 2, "average": 3000}

    top = [(c["category_name"], c["total"], c["count"]) for c in data["top_categories"]]
    assert top == [("Food", 130.5, 2), ("Social", 120, 1), ("Bus", 20, 1)]
    assert data["top_categories"][0]["percentage"] == 48.24

    assert data["goals"]["total"] == 1
    assert data["goals"]["average_progress"] == 15
    assert data["budget_alerts"]["safe"] == 1
    assert data["period"]["start"] == "2025-12-01T00:00:00"


def test_summary_for_a_new_account_is_all_zero(client, auth):
    data = client.get("/api/dashboard/summary", headers=auth).json()["data"]
    assert data["overview"]["savings_rate"] == 0
    assert data["expenses"]["average"] == 0
    assert data["top_categories"] == []
    assert data["goals"]["average_progress"] == 0


def test_burn_rate(client, auth, december):
    data = client.get("/api/dashboard/burn-rate", headers=auth).json()["data"]

    assert data["period"]["days_elapsed"] == 15
    assert data["period"]["days_remaining"] == 16
    assert data["period"]["total_days"] == 31
    assert data["burn_rate"] == {"daily": 18.03, "weekly": 126.23, "monthly": 270.5}
    assert data["projections"]["projected_monthly_spend"] == 559.03
    assert data["projections"]["remaining_balance"] == 5729.5
    assert data["projections"]["runway_days"] == 317
    assert data["projections"]["runway"] == "317 days"

    series = data["daily_spending"]
    assert len(series) == 15
    assert series[0] == {"day": 1, "amount": 45.5}
    assert series[4] == {"day": 5, "amount": 0}


def test_burn_rate_without_expenses_is_unlimited(client, auth):
    data = client.get("/api/dashboard/burn-rate", headers=auth).json()["data"]
    assert data["projections"]["runway_days"] is None
    assert data["projections"]["runway"] == "Unlimited"


def test_trends_compare_with_last_month(client, auth, december):
    add_expense(client, auth, december["food"], 100, "2025-11-20T12:00:00")
    add_expense(client, auth, december["food"], 40, "2025-05-20T12:00:00")  # before the lookback

    data = client.get("/api/dashboard/trends", headers=auth).json()["data"]
    assert data["comparison"] == {
        "current_month": 270.5,
        "last_month": 100,
        "change": 170.5,
        "change_percentage": 170.5,
        "trend": "increasing",
    }

    months = [(m["year"], m["month"], m["month_name"], m["total"], m["count"]) for m in data["monthly_trends"]]
    assert months == [(2025, 11, "Nov", 100, 1), (2025, 12, "Dec", 270.5, 4)]

    by_category = {c["category_name"]: c for c in data["category_comparison"]}
    assert by_category["Food"]["current_month"] == 130.5
    assert by_category["Food"]["last_month"] == 100
    assert by_category["Food"]["change_percentage"] == 30.5
    assert by_category["Social"]["change_percentage"] == 0
    assert data["category_comparison"][0]["category_name"] == "Food"


def test_recent_transactions_merges_both_ledgers(client, auth):
    food = make_category(client, auth, "Food")
    job = make_category(client, auth, "Tutoring", kind="income")
    for day in (1, 3, 5):
        add_expense(client, auth, food, day, f"2025-12-0{day}T12:00:00")
    for day in (2, 4, 6):
        add_income(client, auth, job, day * 100, f"2025-12-0{day}T12:00:00")

    r = client.get("/api/dashboard/recent-transactions?limit=4", headers=auth)
    assert r.status_code == 200
    feed = r.json()["data"]
    assert r.json()["count"] == 4
    assert [(t["type"], t["date"][:10]) for t in feed] == [
        ("income", "2025-12-06"),
        ("expense", "2025-12-05"),
        ("income", "2025-12-04"),
        ("expense", "2025-12-03"),
    ]
    assert feed[0]["category"] == "Tutoring"


def test_recent_transactions_limit_is_bounded(client, auth):
    assert client.get("/api/dashboard/recent-transactions?limit=0", headers=auth).status_code == 400
    assert client.get("/api/dashboard/recent-transactions?limit=101", headers=auth).status_code == 400


def test_health_score(client, auth, december):
    data = client.get("/api/dashboard/health-score", headers=auth).json()["data"]
    assert data["score"] == 72
    assert data["status"] == "Good"
    factors = {f["factor"]: f for f in data["factors"]}
    assert factors["Savings Rate"]["value"] == "95.49%"
    assert factors["Goal Progress"]["points"] == 3
    assert factors["Tracking Consistency"]["points"] == 4


def test_dashboard_ignores_other_users(client, auth, other_auth, december):
    data = client.get("/api/dashboard/summary", headers=other_auth).json()["data"]
    assert data["overview"]["transaction_count"] == 0
    assert data["goals"]["total"] == 0


def test_health_score_counts_over_limit_budgets_as_missed(client, auth, december):
    # Bus has 20 spent this month against a 10 limit
    r = client.post(
        "/api/budgets",
        json={"category_id": december["bus"], "limit_amount": 10, "period": "monthly"},
        headers=auth,
    )
    assert r.json()["data"]["remaining"] == -10

    data = client.get("/api/dashboard/health-score", headers=auth).json()["data"]
    adherence = {f["factor"]: f for f in data["factors"]}["Budget Adherence"]
    assert adherence["value"] == "50.00%"
    assert adherence["points"] == 12.5
    assert adherence["status"] == "needs improvement"
    assert data["score"] == 59.5
    assert data["status"] == "Fair"


def test_summary_year_to_date_spans_earlier_months(client, auth, december):
    add_expense(client, auth, december["food"], 100, "2025-11-20T12:00:00")
    add_expense(client, auth, december["food"], 999, "2024-12-31T12:00:00")  # last year

    data = client.get("/api/dashboard/summary", headers=auth).json()["data"]
    assert data["overview"]["total_expenses"] == 270.5
    ytd = data["year_to_date"]
    assert ytd["start"] == "2025-01-01T00:00:00"
    assert ytd["total_income"] == 6000
    assert ytd["total_expenses"] == 370.5
    assert ytd["savings"] == 5629.5
    assert ytd["savings_rate"] == pytest.approx(93.83, abs=0.01)
