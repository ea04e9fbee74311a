from fastapi import APIRouter, Depends, HTTPException, status
from app.database.supabase_client import get_supabase, get_admin_supabase
from app.modules.users.schemas import (
    UserCreate, UserUpdate, UserResponse, AgentLimitResponse, AgentLimitsUpdate
)
from app.modules.users.service import UserService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(
    supabase: Client = Depends(get_supabase),
    admin: Client = Depends(get_admin_supabase)
) -> UserService:
    return UserService(supabase, admin)


def get_profile_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    user_data: Dict = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    """List auth users with their profiles"""
    return service.list_users()


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    user_data: Dict = Depends(require_permission("users:create")),
    service: UserService = Depends(get_user_service)
):
    """Create a sales agent or manager"""
    return service.create_user(body)


# Declared before /{user_id} so "agents" is not taken for an id
@router.get("/agents/limits", response_model=List[AgentLimitResponse])
async def list_agent_limits(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: UserService = Depends(get_profile_service)
):
    """Monthly coupon limits of every sales agent"""
    return service.list_agent_limits()


@router.put("/agents/limits", response_model=List[AgentLimitResponse])
async def update_agent_limits(
    body: AgentLimitsUpdate,
    user_data: Dict = Depends(require_permission("settings:update")),
    service: UserService = Depends(get_profile_service)
):
    """Bulk update of monthly coupon limits"""
    return service.update_agent_limits(body)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    user_data: Dict = Depends(require_permission("users:update")),
    service: UserService = Depends(get_user_service)
):
    """Update profile fields and optionally reset the password"""
    return service.update_user(user_id, body)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    user_data: Dict = Depends(require_permission("users:delete")),
    service: UserService = Depends(get_user_service)
):
    """Delete user (profile and coupons go by cascade)"""
    if user_id == user_data["id"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    service.delete_user(user_id)
    return None
