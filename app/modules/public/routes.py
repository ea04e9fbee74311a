from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.public.schemas import PublicCouponResponse
from app.modules.public.service import PublicCouponService
from supabase import Client

# Mounted twice: /api/v1/public/coupons/{code} and the shareable /coupon/{code}
router = APIRouter(prefix="/public", tags=["public"])
share_router = APIRouter(tags=["public"])


def get_public_service(supabase: Client = Depends(get_supabase)) -> PublicCouponService:
    return PublicCouponService(supabase)


@router.get("/coupons/{code}", response_model=PublicCouponResponse)
async def get_public_coupon(code: str, service: PublicCouponService = Depends(get_public_service)):
    """Coupon as shown to the customer; no authentication"""
    return service.get_by_code(code)


@share_router.get("/coupon/{code}", response_model=PublicCouponResponse)
async def get_shared_coupon(code: str, service: PublicCouponService = Depends(get_public_service)):
    return service.get_by_code(code)
