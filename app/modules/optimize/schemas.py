from pydantic import BaseModel, Field


class OptimizeDiscountRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    sales_agent_id: str = Field(..., min_length=1)
    sales_agent_performance: float = Field(..., ge=0, description="Sales in the last month")
    market_conditions: str = Field(..., min_length=10, description="Competitor pricing and demand")


class OptimizeDiscountResponse(BaseModel):
    discount_percentage: float = Field(..., ge=0, le=100)
    reasoning: str
