from supabase import Client
from app.config import settings
from app.database.supabase_client import list_all_auth_users
from app.modules.users.schemas import (
    UserCreate, UserUpdate, UserResponse, AgentLimitResponse, AgentLimitsUpdate
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

MISSING_NAME = "(no name)"


class UserService:
    def __init__(self, supabase: Client, admin: Optional[Client] = None):
        self.supabase = supabase
        self.admin = admin or supabase

    def _merge(self, auth_user, profile: Optional[Dict[str, Any]]) -> UserResponse:
        profile = profile or {}
        return UserResponse(
            id=auth_user.id,
            email=auth_user.email,
            created_at=auth_user.created_at,
            full_name=profile.get("full_name") or MISSING_NAME,
            role=profile.get("role") or "sales",
            coupon_limit_per_month=profile.get("coupon_limit_per_month") or 0,
        )

    def list_users(self) -> List[UserResponse]:
        """Auth users joined with their profile rows"""
        try:
            auth_users = list_all_auth_users(self.admin)
            profiles = self.supabase.table("users").select("*").execute()
            by_id = {p["id"]: p for p in (profiles.data or [])}
            return [self._merge(u, by_id.get(u.id)) for u in auth_users]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_by_id(self, user_id: str) -> UserResponse:
        try:
            auth_response = self.admin.auth.admin.get_user_by_id(user_id)
            if not auth_response or not auth_response.user:
                raise HTTPException(status_code=404, detail="User not found")
            profile = self.supabase.table("users")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            return self._merge(auth_response.user, profile.data if profile else None)
        except HTTPException:
            raise
        except Exception as e:
            if "not found" in str(e).lower():
                raise HTTPException(status_code=404, detail="User not found")
            raise HTTPException(status_code=500, detail=str(e))

    def create_user(self, user_data: UserCreate) -> UserResponse:
        """Create the auth identity, then its profile. Not atomic: a failed
        profile insert deletes the auth user again."""
        try:
            auth_response = self.admin.auth.admin.create_user({
                "email": user_data.email,
                "password": user_data.password,
                "email_confirm": True,
            })
        except Exception as e:
            error_message = str(e)
            logger.warning(f"Error creating auth user {user_data.email}: {error_message}")
            if "already" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=error_message)

        if not auth_response or not auth_response.user:
            raise HTTPException(status_code=500, detail="User was not created")
        auth_user = auth_response.user

        limit = user_data.coupon_limit_per_month
        profile = {
            "id": auth_user.id,
            "full_name": user_data.full_name,
            "role": user_data.role,
            "coupon_limit_per_month": settings.default_coupon_limit if limit is None else limit,
        }
        try:
            result = self.supabase.table("users").insert(profile).execute()
            if not result.data:
                raise RuntimeError("Failed to create user profile")
        except Exception as e:
            logger.error(f"Error creating profile for {user_data.email}, rolling back auth user: {e}")
            try:
                self.admin.auth.admin.delete_user(auth_user.id)
            except Exception as rollback_error:
                logger.error(f"Rollback of auth user {auth_user.id} failed: {rollback_error}")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Created {user_data.role} user {auth_user.id}")
        return self._merge(auth_user, result.data[0])

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update profile fields, then the password (optional). An auth user
        without a profile row gets one created."""
        self.get_user_by_id(user_id)
        try:
            update_data = user_data.model_dump(exclude_none=True, exclude={"password"})
            if update_data:
                result = self.supabase.table("users")\
                    .update(update_data)\
                    .eq("id", user_id)\
                    .execute()
                if not result.data:
                    logger.info(f"User {user_id} has no profile, creating it")
                    self.supabase.table("users").insert({
                        "id": user_id,
                        "role": "sales",
                        "coupon_limit_per_month": settings.default_coupon_limit,
                        **update_data,
                    }).execute()

            if user_data.password:
                self.admin.auth.admin.update_user_by_id(user_id, {"password": user_data.password})

            return self.get_user_by_id(user_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_user(self, user_id: str) -> bool:
        """Delete the auth user; profile and coupons are removed by CASCADE"""
        try:
            self.admin.auth.admin.delete_user(user_id)
            logger.info(f"Deleted user {user_id}")
            return True
        except Exception as e:
            if "not found" in str(e).lower():
                raise HTTPException(status_code=404, detail="User not found")
            logger.error(f"Error deleting user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_agent_limits(self) -> List[AgentLimitResponse]:
        try:
            result = self.supabase.table("users")\
                .select("id, full_name, coupon_limit_per_month")\
                .eq("role", "sales")\
                .order("full_name")\
                .execute()
            return [
                AgentLimitResponse(
                    id=row["id"],
                    full_name=row.get("full_name"),
                    coupon_limit_per_month=row.get("coupon_limit_per_month") or 0,
                )
                for row in (result.data or [])
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_agent_limits(self, limits_data: AgentLimitsUpdate) -> List[AgentLimitResponse]:
        """Set coupon_limit_per_month for several sales agents"""
        agents = {a.id for a in self.list_agent_limits()}
        unknown = [uid for uid in limits_data.limits if uid not in agents]
        if unknown:
            raise HTTPException(status_code=404, detail=f"Unknown sales agent(s): {', '.join(unknown)}")
        try:
            for user_id, limit in limits_data.limits.items():
                self.supabase.table("users")\
                    .update({"coupon_limit_per_month": limit})\
                    .eq("id", user_id)\
                    .execute()
        except Exception as e:
            logger.error(f"Error saving coupon limits: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return self.list_agent_limits()
