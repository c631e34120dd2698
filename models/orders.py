from pydantic import BaseModel, ConfigDict
from typing import Literal, Optional
from datetime import datetime

PaymentStatus = Literal["pending", "completed", "failed"]


class OrderCreate(BaseModel):
    product_id: str
    payment_method: str = "manual"


class OrderUpdate(BaseModel):
    payment_status: PaymentStatus
    transaction_id: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    product_id: str
    amount: float
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
