import asyncio
import logging
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.coupons.service import CouponService

logger = logging.getLogger(__name__)


async def expire_overdue_coupons():
    """Persist the expired status of coupons whose expiry has passed."""
    try:
        service = CouponService(get_supabase())
        result = await asyncio.to_thread(service.expire_overdue)
        if not result.expired:
            logger.debug("No overdue coupons found")
    except Exception as e:
        logger.error(f"Error in coupon expiry sweep: {str(e)}")


async def expiry_scheduler_loop():
    """Background task that periodically expires overdue coupons"""
    while True:
        await expire_overdue_coupons()
        await asyncio.sleep(settings.expiry_sweep_interval_seconds)
