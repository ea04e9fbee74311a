from pydantic import BaseModel
from typing import List, Optional
from app.modules.coupons.schemas import CouponResponse, QuotaResponse


class AgentDashboard(BaseModel):
    created_this_month: int
    active: int
    used: int
    quota: QuotaResponse
    recent_coupons: List[CouponResponse]


class MonthlyPoint(BaseModel):
    month: str  # YYYY-MM
    created: int
    used: int


class ManagerDashboard(BaseModel):
    total_coupons: int
    usage_rate: float
    active_coupons: int
    active_agents: int
    monthly: List[MonthlyPoint]


class DashboardResponse(BaseModel):
    role: str
    agent: Optional[AgentDashboard] = None
    manager: Optional[ManagerDashboard] = None
