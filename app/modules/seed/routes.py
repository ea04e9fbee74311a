from fastapi import APIRouter, Depends, HTTPException
from app.config import settings
from app.database.supabase_client import get_admin_supabase
from app.modules.seed.service import seed_database, SeedError
from supabase import Client
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seed"])


def require_seed_enabled():
    if not settings.seed_endpoint_allowed:
        raise HTTPException(status_code=404, detail="Not Found")


@router.post("/seed-database", dependencies=[Depends(require_seed_enabled)])
async def seed(admin: Client = Depends(get_admin_supabase)):
    """Replace all data with the demo data set (disabled unless SEED_ENDPOINT_ENABLED)"""
    try:
        return seed_database(admin)
    except SeedError as e:
        logger.error(f"Seeding failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
