from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class CustomerReviewBase(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=2000)


class CustomerReviewCreate(CustomerReviewBase):
    product_id: str


class CustomerReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class SellerResponseCreate(BaseModel):
    response: str = Field(..., min_length=1, max_length=2000)


class CustomerReviewResponse(CustomerReviewBase):
    id: str
    product_id: str
    customer_id: str
    seller_response: Optional[str] = None
    seller_response_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
