from supabase import Client
from app.modules.coupons import rules
from app.modules.coupons.service import CouponService
from app.modules.public.schemas import PublicCouponResponse, PublicProduct
from fastapi import HTTPException
from datetime import datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class PublicCouponService:
    """Read-only view of a coupon for the customer-facing page"""

    def __init__(self, supabase: Client):
        self.coupons = CouponService(supabase)

    def get_by_code(self, code: str, now: Optional[datetime] = None) -> PublicCouponResponse:
        now = now or rules.utc_now()
        try:
            coupon = self.coupons.get_coupon_row_by_code(code)
            product = self.coupons.products.get_product_row(coupon["product_id"]) if coupon else None
        except Exception as e:
            logger.error(f"Error fetching coupon {code}: {e}")
            raise HTTPException(status_code=500, detail="Could not load coupon")
        if not coupon:
            raise HTTPException(status_code=404, detail="Coupon not found")

        return PublicCouponResponse(
            code=coupon["code"],
            discount_percent=coupon["discount_percent"],
            status=rules.effective_status(coupon, now),
            expires_at=coupon.get("expires_at"),
            seconds_remaining=rules.seconds_remaining(coupon, now),
            product=PublicProduct(**product) if product else None,
        )
