import json

import httpx
import pytest

from app.config import settings
from app.modules.optimize.routes import get_optimize_service
from app.modules.optimize.service import OptimizeService, parse_suggestion
from app.main import app


@pytest.fixture
def ai_answer(client, fake_db, monkeypatch):
    """Route the AI proxy to a MockTransport returning the given payload."""
    monkeypatch.setattr(settings, "ai_proxy_url", "http://ai-proxy.test/v1/chat")
    captured = {}

    def install(payload, status_code=200):
        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(status_code, json=payload)
        transport = httpx.MockTransport(handler)
        app.dependency_overrides[get_optimize_service] = lambda: OptimizeService(fake_db, transport=transport)
        return captured

    return install


def _request(product, agent):
    return {
        "product_id": product["id"],
        "sales_agent_id": agent.id,
        "sales_agent_performance": 12,
        "market_conditions": "Competitors dropped prices by 10% this month",
    }


def test_optimize_discount(client, ai_answer, manager, agent, product):
    captured = ai_answer({"content": '{"discountPercentage": 12.5, "reasoning": "Match competitors"}'})

    response = client.post("/api/v1/optimize/discount", json=_request(product, agent), headers=manager.headers)

    assert response.status_code == 200
    assert response.json() == {"discount_percentage": 12.5, "reasoning": "Match competitors"}
    prompt = captured["body"]["messages"][1]["content"]
    assert "Huawei Fiber Modem" in prompt
    assert "Agent One" in prompt


def test_out_of_range_answer(client, ai_answer, manager, agent, product):
    ai_answer({"content": '{"discountPercentage": 150, "reasoning": "Too much"}'})

    response = client.post("/api/v1/optimize/discount", json=_request(product, agent), headers=manager.headers)

    assert response.status_code == 502


def test_proxy_error(client, ai_answer, manager, agent, product):
    ai_answer({"error": "boom"}, status_code=500)

    response = client.post("/api/v1/optimize/discount", json=_request(product, agent), headers=manager.headers)

    assert response.status_code == 502


def test_agents_cannot_optimize(client, ai_answer, agent, product):
    ai_answer({"content": "{}"})
    response = client.post("/api/v1/optimize/discount", json=_request(product, agent), headers=agent.headers)
    assert response.status_code == 403


def test_short_market_conditions_rejected(client, ai_answer, manager, agent, product):
    body = {**_request(product, agent), "market_conditions": "short"}
    assert client.post("/api/v1/optimize/discount", json=body, headers=manager.headers).status_code == 422


def test_unconfigured_proxy(client, manager, agent, product):
    response = client.post("/api/v1/optimize/discount", json=_request(product, agent), headers=manager.headers)
    assert response.status_code == 503


def test_parse_fenced_answer():
    result = parse_suggestion('```json\n{"discountPercentage": 20, "reasoning": "ok"}\n```')
    assert result.discount_percentage == 20
