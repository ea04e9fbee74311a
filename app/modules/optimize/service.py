import json
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.modules.optimize.schemas import OptimizeDiscountRequest, OptimizeDiscountResponse
from app.modules.products.service import ProductService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an AI assistant helping sales managers determine the optimal discount "
    "percentage for products to increase sales conversion."
)

USER_PROMPT = """Consider the following factors:
- Product: {product_name} (ID {product_id}, price {product_price})
- Sales agent: {agent_name} (ID {sales_agent_id})
- Sales agent recent performance: {sales_agent_performance}
- Current market conditions: {market_conditions}

Based on these factors, suggest a discount percentage (between 0 and 100) that would be most
effective in driving sales conversion, and explain your reasoning.

Answer with JSON only, in this format: {{"discountPercentage": number, "reasoning": string}}"""


def build_messages(request: OptimizeDiscountRequest, product: Dict[str, Any], agent: Dict[str, Any]) -> list:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT.format(
            product_name=product.get("name", "unknown"),
            product_id=request.product_id,
            product_price=product.get("price", "unknown"),
            agent_name=agent.get("full_name") or "unknown",
            sales_agent_id=request.sales_agent_id,
            sales_agent_performance=request.sales_agent_performance,
            market_conditions=request.market_conditions,
        )},
    ]


def parse_suggestion(content: str) -> OptimizeDiscountResponse:
    """Read the model's JSON answer, tolerating a fenced code block around it."""
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("AI answer contains no JSON object")
    data = json.loads(text[start:end + 1])
    return OptimizeDiscountResponse(
        discount_percentage=data["discountPercentage"],
        reasoning=data.get("reasoning") or "",
    )


class OptimizeService:
    def __init__(self, supabase: Client, transport: Optional[httpx.BaseTransport] = None):
        self.supabase = supabase
        self.products = ProductService(supabase)
        self.transport = transport

    def _call_ai(self, messages: list) -> str:
        request_body = {
            "model": settings.ai_proxy_model,
            "messages": messages,
            "temperature": 0.3,
        }
        with httpx.Client(timeout=settings.ai_proxy_timeout_seconds, transport=self.transport) as client:
            response = client.post(settings.ai_proxy_url, json=request_body)
        response.raise_for_status()
        data = response.json()
        content = data.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValueError("AI proxy returned empty content")
        return content

    def optimize_discount(self, request: OptimizeDiscountRequest) -> OptimizeDiscountResponse:
        if not settings.ai_proxy_url:
            raise HTTPException(status_code=503, detail="AI proxy is not configured")

        product = self.products.get_product_row(request.product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        agent_result = self.supabase.table("users")\
            .select("id, full_name")\
            .eq("id", request.sales_agent_id)\
            .maybe_single()\
            .execute()
        if not agent_result or not agent_result.data:
            raise HTTPException(status_code=404, detail="Sales agent not found")

        try:
            content = self._call_ai(build_messages(request, product, agent_result.data))
        except httpx.HTTPError as exc:
            logger.error(f"AI proxy request failed: {exc}")
            raise HTTPException(status_code=502, detail=f"AI proxy error: {exc}")
        except ValueError as exc:
            raise HTTPException(status_code=502, detail=str(exc))

        try:
            return parse_suggestion(content)
        except Exception as exc:
            logger.warning(f"Unusable AI answer: {content!r}")
            raise HTTPException(status_code=502, detail=f"Invalid AI answer: {exc}")
