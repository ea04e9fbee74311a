from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Dict, Literal
from datetime import datetime

ProfileRole = Literal["sales", "manager"]


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    role: ProfileRole = "sales"
    coupon_limit_per_month: Optional[int] = Field(None, ge=0)


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    role: Optional[ProfileRole] = None
    coupon_limit_per_month: Optional[int] = Field(None, ge=0)
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: str
    role: str
    coupon_limit_per_month: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgentLimitResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    coupon_limit_per_month: int


class AgentLimitsUpdate(BaseModel):
    limits: Dict[str, int]

    @field_validator("limits")
    @classmethod
    def limits_not_negative(cls, value):
        for user_id, limit in value.items():
            if limit < 0:
                raise ValueError(f"Limit for {user_id} must be zero or more")
        return value
