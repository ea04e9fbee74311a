from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.coupons.schemas import (
    CouponCreate, CouponResponse, CouponStatus, CouponStatusUpdate,
    QuotaResponse, ExpireOverdueResponse
)
from app.modules.coupons.service import CouponService
from app.modules.coupons.quota import QuotaService
from app.modules.coupons import rules
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/coupons", tags=["coupons"])


def get_coupon_service(supabase: Client = Depends(get_supabase)) -> CouponService:
    return CouponService(supabase)


def get_quota_service(supabase: Client = Depends(get_supabase)) -> QuotaService:
    return QuotaService(supabase)


@router.post("", response_model=CouponResponse, status_code=201)
async def create_coupon(
    coupon_data: CouponCreate,
    user_data: Dict = Depends(require_permission("coupons:create")),
    service: CouponService = Depends(get_coupon_service)
):
    """Create a coupon (sales agents are limited per calendar month)"""
    return service.create_coupon(coupon_data, user_data)


@router.get("", response_model=List[CouponResponse])
async def list_coupons(
    status: Optional[List[CouponStatus]] = Query(None),
    agent_id: Optional[List[str]] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("coupons:read")),
    service: CouponService = Depends(get_coupon_service)
):
    """List coupons; agents get their own, managers may filter by agent"""
    return service.list_coupons(user_data, statuses=status, agent_ids=agent_id, limit=limit, offset=offset)


@router.get("/quota", response_model=QuotaResponse)
async def get_quota(
    user_data: Dict = Depends(require_permission("coupons:read")),
    service: QuotaService = Depends(get_quota_service)
):
    """Coupons created this month against the caller's limit"""
    return service.get_quota(user_data)


@router.post("/expire-overdue", response_model=ExpireOverdueResponse)
async def expire_overdue(
    user_data: Dict = Depends(require_permission("coupons:reconcile")),
    service: CouponService = Depends(get_coupon_service)
):
    """Store status=expired for every active coupon past its expiry"""
    return service.expire_overdue()


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: str,
    user_data: Dict = Depends(require_permission("coupons:read")),
    service: CouponService = Depends(get_coupon_service)
):
    return service.get_coupon(coupon_id, user_data)


@router.patch("/{coupon_id}/status", response_model=CouponResponse)
async def update_coupon_status(
    coupon_id: str,
    body: CouponStatusUpdate,
    user_data: Dict = Depends(require_permission("coupons:update")),
    service: CouponService = Depends(get_coupon_service)
):
    """Mark a coupon as used or expired"""
    return service.update_status(coupon_id, body.status, user_data)


@router.post("/{coupon_id}/disable", response_model=CouponResponse)
async def disable_coupon(
    coupon_id: str,
    user_data: Dict = Depends(require_permission("coupons:update")),
    service: CouponService = Depends(get_coupon_service)
):
    """Disable a coupon by marking it expired"""
    return service.update_status(coupon_id, rules.STATUS_EXPIRED, user_data)


@router.delete("/{coupon_id}", status_code=204)
async def delete_coupon(
    coupon_id: str,
    user_data: Dict = Depends(require_permission("coupons:delete")),
    service: CouponService = Depends(get_coupon_service)
):
    service.delete_coupon(coupon_id, user_data)
    return None
