from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.config.permissions_config import ROLE_MANAGER
from app.modules.coupons.rules import utc_now
from app.modules.coupons.schemas import QuotaResponse


def month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """[start of this calendar month, start of next month), in UTC."""
    now = (now or utc_now()).astimezone(timezone.utc)
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


class QuotaService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def count_created_this_month(self, user_id: str, now: Optional[datetime] = None) -> int:
        start, end = month_window(now)
        result = self.supabase.table("coupons")\
            .select("id", count="exact")\
            .eq("user_id", user_id)\
            .gte("created_at", start.isoformat())\
            .lt("created_at", end.isoformat())\
            .execute()
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def get_quota(self, profile: Dict[str, Any], now: Optional[datetime] = None) -> QuotaResponse:
        start, end = month_window(now)
        used = self.count_created_this_month(profile["id"], now)
        limit = profile.get("coupon_limit_per_month") or 0
        exempt = profile.get("role") == ROLE_MANAGER
        return QuotaResponse(
            limit=limit,
            used=used,
            remaining=max(0, limit - used),
            period_start=start,
            period_end=end,
            exempt=exempt,
        )

    def check_quota(self, profile: Dict[str, Any], now: Optional[datetime] = None) -> QuotaResponse:
        """Raise 403 when a sales agent has used up this month's coupons."""
        quota = self.get_quota(profile, now)
        if not quota.exempt and quota.used >= quota.limit:
            raise HTTPException(
                status_code=403,
                detail=f"Monthly coupon limit reached ({quota.used}/{quota.limit})"
            )
        return quota
