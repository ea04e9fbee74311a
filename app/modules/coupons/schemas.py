from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

CouponStatus = Literal["active", "used", "expired"]


class CouponCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    discount_percent: int = Field(10, ge=1, le=100)
    expires_in_days: int = Field(2, ge=1)
    note: Optional[str] = None


class CouponStatusUpdate(BaseModel):
    status: Literal["used", "expired"]


class CouponResponse(BaseModel):
    id: str
    code: str
    discount_percent: int
    status: CouponStatus
    effective_status: CouponStatus
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    user_id: Optional[str] = None
    agent_name: Optional[str] = None
    note: Optional[str] = ""
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    share_url: str

    class Config:
        from_attributes = True


class QuotaResponse(BaseModel):
    limit: int
    used: int
    remaining: int
    period_start: datetime
    period_end: datetime
    exempt: bool = False


class ExpireOverdueResponse(BaseModel):
    expired: int
    coupon_ids: List[str] = []
