from supabase import Client
from app.config import settings
from app.modules.coupons import rules
from app.modules.coupons.quota import QuotaService
from app.modules.coupons.schemas import CouponCreate, CouponResponse, ExpireOverdueResponse
from app.modules.products.service import ProductService
from app.core.dependencies import check_coupon_access, is_manager
from typing import List, Optional, Dict, Any, Iterable
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)


class CouponService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.products = ProductService(supabase)
        self.quota = QuotaService(supabase)

    def _agents_by_ids(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        ids = list({uid for uid in user_ids if uid})
        if not ids:
            return {}
        result = self.supabase.table("users")\
            .select("id, full_name")\
            .in_("id", ids)\
            .execute()
        return {u["id"]: u for u in (result.data or [])}

    def _to_responses(self, rows: List[Dict[str, Any]], now: Optional[datetime] = None) -> List[CouponResponse]:
        now = now or rules.utc_now()
        products = self.products.get_products_by_ids(r.get("product_id") for r in rows)
        agents = self._agents_by_ids(r.get("user_id") for r in rows)
        responses = []
        for row in rows:
            product = products.get(row.get("product_id")) or {}
            agent = agents.get(row.get("user_id")) or {}
            responses.append(CouponResponse(
                **row,
                effective_status=rules.effective_status(row, now),
                product_name=product.get("name"),
                agent_name=agent.get("full_name"),
                share_url=rules.share_url(row["code"]),
            ))
        return responses

    def _code_exists(self, code: str) -> bool:
        result = self.supabase.table("coupons")\
            .select("id")\
            .eq("code", code)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def generate_unique_code(self, product_name: Optional[str], discount_percent: int) -> str:
        for _ in range(settings.coupon_code_max_attempts):
            code = rules.generate_coupon_code(product_name, discount_percent)
            if not self._code_exists(code):
                return code
        logger.error(f"Could not generate a unique coupon code for {product_name!r} at {discount_percent}%")
        raise HTTPException(status_code=500, detail="Failed to generate unique coupon code")

    def create_coupon(
        self,
        coupon_data: CouponCreate,
        user_data: Dict[str, Any],
        now: Optional[datetime] = None
    ) -> CouponResponse:
        """Create a coupon for the caller after the product and quota checks"""
        now = now or rules.utc_now()
        product = self.products.get_product_row(coupon_data.product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        if not product.get("is_active", True):
            raise HTTPException(status_code=400, detail="Coupons can only be created for active products")

        self.quota.check_quota(user_data, now)

        try:
            code = self.generate_unique_code(product.get("name"), coupon_data.discount_percent)
            insert_data = {
                "code": code,
                "discount_percent": coupon_data.discount_percent,
                "status": rules.STATUS_ACTIVE,
                "product_id": product["id"],
                "user_id": user_data["id"],
                "note": coupon_data.note or "",
                "expires_at": (now + timedelta(days=coupon_data.expires_in_days)).isoformat(),
            }
            result = self.supabase.table("coupons").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create coupon")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding coupon: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"User {user_data['id']} created coupon {code}")
        return self._to_responses(result.data, now)[0]

    def list_coupons(
        self,
        user_data: Dict[str, Any],
        statuses: Optional[List[str]] = None,
        agent_ids: Optional[List[str]] = None,
        limit: int = 50,
        offset: int = 0,
        now: Optional[datetime] = None
    ) -> List[CouponResponse]:
        """Managers see every coupon (optionally by agent), agents their own.
        The status filter applies to the effective status."""
        now = now or rules.utc_now()
        try:
            query = self.supabase.table("coupons").select("*")
            if not is_manager(user_data):
                query = query.eq("user_id", user_data["id"])
            elif agent_ids:
                query = query.in_("user_id", agent_ids)
            if statuses:
                query = query.or_(rules.status_filter(statuses, now))
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching coupons: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return self._to_responses(result.data or [], now)

    def recent_coupons(self, user_id: str, count: int = 5) -> List[CouponResponse]:
        result = self.supabase.table("coupons")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("created_at", desc=True)\
            .limit(count)\
            .execute()
        return self._to_responses(result.data or [])

    def get_coupon_row(self, coupon_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("coupons")\
                .select("*")\
                .eq("id", coupon_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Coupon not found")
        return result.data

    def get_coupon_row_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("coupons")\
            .select("*")\
            .eq("code", code)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data

    def get_coupon(self, coupon_id: str, user_data: Dict[str, Any]) -> CouponResponse:
        row = self.get_coupon_row(coupon_id)
        check_coupon_access(row, user_data)
        return self._to_responses([row])[0]

    def update_status(
        self,
        coupon_id: str,
        status: str,
        user_data: Dict[str, Any],
        now: Optional[datetime] = None
    ) -> CouponResponse:
        """Mark a coupon used or expired (active -> used | expired only)"""
        now = now or rules.utc_now()
        row = self.get_coupon_row(coupon_id)
        check_coupon_access(row, user_data)
        if not rules.can_transition(row, status, now):
            raise HTTPException(
                status_code=400,
                detail=f"Cannot mark a coupon that is {rules.effective_status(row, now)} as {status}"
            )
        try:
            result = self.supabase.table("coupons")\
                .update({"status": status})\
                .eq("id", coupon_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Coupon not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating coupon status: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Coupon {coupon_id} marked {status} by {user_data['id']}")
        return self._to_responses(result.data, now)[0]

    def delete_coupon(self, coupon_id: str, user_data: Dict[str, Any]) -> bool:
        row = self.get_coupon_row(coupon_id)
        check_coupon_access(row, user_data)
        try:
            self.supabase.table("coupons")\
                .delete()\
                .eq("id", coupon_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting coupon: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Coupon {coupon_id} deleted by {user_data['id']}")
        return True

    def expire_overdue(self, now: Optional[datetime] = None) -> ExpireOverdueResponse:
        """Persist status=expired on active coupons whose expiry has passed"""
        now = now or rules.utc_now()
        try:
            result = self.supabase.table("coupons")\
                .update({"status": rules.STATUS_EXPIRED})\
                .eq("status", rules.STATUS_ACTIVE)\
                .lt("expires_at", now.isoformat())\
                .execute()
        except Exception as e:
            logger.error(f"Error expiring overdue coupons: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        ids = [r["id"] for r in (result.data or [])]
        if ids:
            logger.info(f"Marked {len(ids)} overdue coupon(s) as expired")
        return ExpireOverdueResponse(expired=len(ids), coupon_ids=ids)
