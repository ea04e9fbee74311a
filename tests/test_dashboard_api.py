from datetime import datetime, timedelta, timezone

from app.modules.coupons.quota import month_window
from app.modules.coupons.rules import utc_now
from app.modules.dashboard.service import month_keys


def test_month_keys_cross_year():
    now = datetime(2026, 2, 10, tzinfo=timezone.utc)
    assert month_keys(now) == ["2025-09", "2025-10", "2025-11", "2025-12", "2026-01", "2026-02"]


def test_agent_dashboard(client, fake_db, agent, other_agent, product):
    start, _ = month_window()
    future = (utc_now() + timedelta(days=1)).isoformat()
    fake_db.add_coupon(product, agent, expires_at=future)
    fake_db.add_coupon(product, agent, status="used", expires_at=future)
    fake_db.add_coupon(product, agent, expires_at=(utc_now() - timedelta(days=1)).isoformat())
    fake_db.add_coupon(product, agent, created_at=(start - timedelta(days=2)).isoformat(), expires_at=future)
    fake_db.add_coupon(product, other_agent, expires_at=future)

    response = client.get("/api/v1/dashboard", headers=agent.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "sales"
    assert "manager" not in body
    view = body["agent"]
    assert view["created_this_month"] == 3
    assert view["active"] == 2
    assert view["used"] == 1
    assert view["quota"]["remaining"] == 0
    assert len(view["recent_coupons"]) == 4


def test_agent_recent_coupons_capped_at_five(client, fake_db, agent, product):
    for _ in range(7):
        fake_db.add_coupon(product, agent)

    view = client.get("/api/v1/dashboard", headers=agent.headers).json()["agent"]

    assert len(view["recent_coupons"]) == 5


def test_manager_dashboard(client, fake_db, manager, agent, other_agent, product):
    future = (utc_now() + timedelta(days=1)).isoformat()
    fake_db.add_coupon(product, agent, expires_at=future)
    fake_db.add_coupon(product, agent, status="used", expires_at=future)
    fake_db.add_coupon(product, other_agent, expires_at=(utc_now() - timedelta(days=1)).isoformat())
    fake_db.add_coupon(product, other_agent, status="used", created_at="2001-01-01T00:00:00+00:00")

    response = client.get("/api/v1/dashboard", headers=manager.headers)

    view = response.json()["manager"]
    assert view["total_coupons"] == 4
    assert view["usage_rate"] == 50.0
    assert view["active_coupons"] == 1
    assert view["active_agents"] == 2
    assert len(view["monthly"]) == 6
    current = view["monthly"][-1]
    assert current["month"] == utc_now().strftime("%Y-%m")
    assert current == {"month": current["month"], "created": 3, "used": 1}


def test_manager_dashboard_empty(client, manager):
    view = client.get("/api/v1/dashboard", headers=manager.headers).json()["manager"]
    assert view["total_coupons"] == 0
    assert view["usage_rate"] == 0.0
