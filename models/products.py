from pydantic import BaseModel, Field, ConfigDict
from typing import Literal, Optional
from datetime import datetime

ProductCategory = Literal["ebook", "ecourse", "resep_masakan", "jasa_design", "software"]
ProductStatus = Literal["pending", "approved", "rejected"]


class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ProductCategory] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)


class ProductResponse(BaseModel):
    id: str
    seller_id: str
    title: str
    description: str
    category: str
    price: float
    stock: int = 0
    thumbnail_url: Optional[str] = None
    content_url: Optional[str] = None
    status: ProductStatus
    review_score: Optional[float] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubmissionResponse(BaseModel):
    product: ProductResponse
    points_earned: int
