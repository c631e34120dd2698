"""Redeemable product models (items curators buy with points)."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class RedeemableBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    points_cost: int = Field(..., gt=0, description="Curator points needed to redeem one unit")
    stock: int = Field(0, ge=0)
    thumbnail_url: Optional[str] = None
    content_url: Optional[str] = None
    is_active: bool = True


class RedeemableCreate(RedeemableBase):
    pass


class RedeemableUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    points_cost: Optional[int] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    thumbnail_url: Optional[str] = None
    content_url: Optional[str] = None
    is_active: Optional[bool] = None


class RedeemableResponse(RedeemableBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RedemptionResponse(BaseModel):
    id: str
    user_id: str
    redeemable_product_id: str
    points_spent: int
    status: str
    created_at: datetime


class RedeemResult(BaseModel):
    redemption: RedemptionResponse
    points_spent: int
    remaining_points: int
