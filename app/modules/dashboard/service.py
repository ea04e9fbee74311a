from supabase import Client
from app.modules.coupons import rules
from app.modules.coupons.service import CouponService
from app.modules.dashboard.schemas import (
    AgentDashboard, ManagerDashboard, MonthlyPoint, DashboardResponse
)
from app.core.dependencies import is_manager
from typing import Dict, Any, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

CHART_MONTHS = 6


def month_keys(now: datetime, months: int = CHART_MONTHS) -> List[str]:
    """``YYYY-MM`` keys of the current month and the ``months - 1`` before it, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.coupons = CouponService(supabase)

    def get_dashboard(self, user_data: Dict[str, Any], now: Optional[datetime] = None) -> DashboardResponse:
        try:
            if is_manager(user_data):
                return DashboardResponse(role=user_data["role"], manager=self.manager_dashboard(now))
            return DashboardResponse(role=user_data["role"], agent=self.agent_dashboard(user_data, now))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building dashboard for {user_data['id']}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def agent_dashboard(self, user_data: Dict[str, Any], now: Optional[datetime] = None) -> AgentDashboard:
        now = now or rules.utc_now()
        result = self.supabase.table("coupons")\
            .select("status, expires_at")\
            .eq("user_id", user_data["id"])\
            .execute()
        statuses = [rules.effective_status(c, now) for c in (result.data or [])]
        quota = self.coupons.quota.get_quota(user_data, now)
        return AgentDashboard(
            created_this_month=quota.used,
            active=statuses.count(rules.STATUS_ACTIVE),
            used=statuses.count(rules.STATUS_USED),
            quota=quota,
            recent_coupons=self.coupons.recent_coupons(user_data["id"], 5),
        )

    def manager_dashboard(self, now: Optional[datetime] = None) -> ManagerDashboard:
        now = now or rules.utc_now()
        coupons = self.supabase.table("coupons")\
            .select("status, expires_at, created_at")\
            .execute().data or []
        agents = self.supabase.table("users")\
            .select("id", count="exact")\
            .eq("role", "sales")\
            .execute()

        total = len(coupons)
        used = sum(1 for c in coupons if c.get("status") == rules.STATUS_USED)
        active = sum(1 for c in coupons if rules.effective_status(c, now) == rules.STATUS_ACTIVE)

        keys = month_keys(now)
        monthly = {key: {"created": 0, "used": 0} for key in keys}
        for coupon in coupons:
            created_at = rules.parse_timestamp(coupon.get("created_at"))
            if created_at is None:
                continue
            key = f"{created_at.year:04d}-{created_at.month:02d}"
            if key in monthly:
                monthly[key]["created"] += 1
                if coupon.get("status") == rules.STATUS_USED:
                    monthly[key]["used"] += 1

        return ManagerDashboard(
            total_coupons=total,
            usage_rate=round(used / total * 100, 2) if total else 0.0,
            active_coupons=active,
            active_agents=agents.count if agents.count is not None else len(agents.data or []),
            monthly=[MonthlyPoint(month=k, **v) for k, v in monthly.items()],
        )
