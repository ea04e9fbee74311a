from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.optimize.schemas import OptimizeDiscountRequest, OptimizeDiscountResponse
from app.modules.optimize.service import OptimizeService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/optimize", tags=["optimize"])


def get_optimize_service(supabase: Client = Depends(get_supabase)) -> OptimizeService:
    return OptimizeService(supabase)


@router.post("/discount", response_model=OptimizeDiscountResponse)
async def optimize_discount(
    request: OptimizeDiscountRequest,
    user_data: Dict = Depends(require_permission("optimize:run")),
    service: OptimizeService = Depends(get_optimize_service)
):
    """Suggest a discount for a product and agent from the AI model"""
    return service.optimize_discount(request)
