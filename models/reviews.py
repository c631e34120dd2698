from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    product_id: str
    # Count and range are checked by services.scoring so the error kind stays InvalidInput
    scores: list[int]
    comment: Optional[str] = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    curator_id: str
    scores: list[int]
    total_score: int
    average_score: float
    points_earned: int
    comment: Optional[str] = None
    created_at: datetime


class ReviewOutcomeResponse(BaseModel):
    review: ReviewResponse
    product_status: str
    average_score: float
    curator_points_earned: int
    seller_points_earned: int
