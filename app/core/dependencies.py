"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import ROLE_MANAGER, get_role_permissions
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    request: Request,
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the bearer token to the auth user merged with its profile row.

    The profile is looked up once per request and kept on ``request.state``.
    """
    cached = getattr(request.state, "current_user", None)
    if cached is not None:
        return cached
    user_data = auth_service.get_current_user(token)
    try:
        profile = auth_service.get_profile(user_data["id"])
    except Exception as e:
        logger.error(f"Error loading profile for {user_data['id']}: {e}")
        raise HTTPException(status_code=500, detail="Could not load user profile")
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No profile found for this account"
        )
    current = {
        **user_data,
        "full_name": profile.get("full_name"),
        "role": profile.get("role") or "sales",
        "coupon_limit_per_month": profile.get("coupon_limit_per_month") or 0,
    }
    request.state.current_user = current
    return current


def is_manager(user_data: dict) -> bool:
    return user_data.get("role") == ROLE_MANAGER


def get_user_permissions(user_data: dict):
    return get_role_permissions(user_data.get("role"))


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(user_data: dict = Depends(get_current_user)) -> dict:
        if required_permission not in get_user_permissions(user_data):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission


def require_manager(user_data: dict = Depends(get_current_user)) -> dict:
    if not is_manager(user_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only managers can perform this action"
        )
    return user_data


def check_coupon_access(coupon: Dict[str, Any], user_data: dict) -> dict:
    """Allow managers, or the agent who created the coupon."""
    if is_manager(user_data) or coupon.get("user_id") == user_data["id"]:
        return user_data
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only manage coupons you created"
    )
