from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PublicProduct(BaseModel):
    name: str
    description: Optional[str] = None
    price: float


class PublicCouponResponse(BaseModel):
    code: str
    discount_percent: int
    status: str
    expires_at: Optional[datetime] = None
    seconds_remaining: int
    product: Optional[PublicProduct] = None
