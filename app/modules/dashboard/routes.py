from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.dashboard.schemas import DashboardResponse
from app.modules.dashboard.service import DashboardService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("", response_model=DashboardResponse, response_model_exclude_none=True)
async def get_dashboard(
    user_data: Dict = Depends(require_permission("dashboard:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Agent statistics for sales agents, team statistics for managers"""
    return service.get_dashboard(user_data)
