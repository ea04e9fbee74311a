from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, get_session_supabase
from app.modules.auth.schemas import LoginRequest, TokenResponse, CurrentUserResponse
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_user, get_current_token, get_user_permissions
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_login_service(
    supabase: Client = Depends(get_supabase),
    session_client: Client = Depends(get_session_supabase)
) -> AuthService:
    return AuthService(supabase, session_client=session_client)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_login_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def me(current_user: Dict = Depends(get_current_user)):
    """Current user, profile and permissions (drives the dashboard navigation)."""
    return CurrentUserResponse(**current_user, permissions=get_user_permissions(current_user))
