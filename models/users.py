"""User account Pydantic models for request/response validation.

Defines schemas for profile registration and admin user management.
Email validation enforced via EmailStr for security.
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Literal, Optional
from datetime import datetime

Role = Literal["client", "seller", "curator", "admin"]

# Roles a user may pick for themselves; admin is granted, never chosen.
SelfServiceRole = Literal["client", "seller", "curator"]


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    role: SelfServiceRole = "client"


class UserAdminUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    seller_points: Optional[int] = Field(None, ge=0)
    curator_points: Optional[int] = Field(None, ge=0)


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    email_verified: bool = False
    seller_points: int = 0
    curator_points: int = 0
    curator_approved: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SellerStats(BaseModel):
    """Submission counts for a seller dashboard"""
    user_id: str
    total_submissions: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    seller_points: int = 0
