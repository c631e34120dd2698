from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProductSales(BaseModel):
    product_id: str
    title: str
    total_sales: int
    revenue: float


class RecentSale(BaseModel):
    order_id: str
    product_id: str
    title: str
    category: str
    amount: float
    created_at: datetime


class SellerSales(BaseModel):
    """Completed orders of a seller's products."""
    seller_id: str
    total_sales: int
    total_revenue: float
    products: list[ProductSales]
    recent_sales: list[RecentSale]


class SellerCustomerReview(BaseModel):
    id: str
    product_id: str
    product_title: str
    customer_id: str
    customer_name: Optional[str] = None
    customer_verified: bool = False
    rating: int
    comment: Optional[str] = None
    seller_response: Optional[str] = None
    seller_response_at: Optional[datetime] = None
    created_at: datetime
