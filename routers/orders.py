"""Order endpoints: buying approved products and tracking payment status."""
from typing import Optional

from fastapi import APIRouter, Depends

from models.orders import OrderCreate, OrderResponse, OrderUpdate
from services.access import Action, Actor, ensure_allowed, owns_order
from services.auth import get_current_user
from services.database import get_db
from services.errors import NotFound
from services.orders import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    order: OrderCreate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Buy one unit of an approved product; payment starts as pending."""
    return OrderService(db).purchase(current_user, order.product_id, order.payment_method)


@router.get("", response_model=list[OrderResponse])
def get_orders(
    product_id: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[str] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """List the caller's orders; admins may list anyone's."""
    query = db.table("orders").select("*")
    if current_user.is_admin:
        if customer_id:
            query = query.eq("customer_id", customer_id)
    else:
        query = query.eq("customer_id", current_user.id)

    if product_id:
        query = query.eq("product_id", product_id)
    if payment_status:
        query = query.eq("payment_status", payment_status)

    return query.order("created_at", desc=True).execute().data


@router.get("/check-purchase")
def check_purchase(
    product_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Whether the caller has a completed order for the product (gates customer reviews)."""
    return {"product_id": product_id, "purchased": OrderService(db).has_purchased(current_user.id, product_id)}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    response = db.table("orders").select("*").eq("id", order_id).execute()
    if not response.data:
        raise NotFound("Order not found")
    ensure_allowed(current_user, Action.UPDATE_ORDER, owns_order(response.data[0]))
    return response.data[0]


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: str,
    update: OrderUpdate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Settle a pending order as completed or failed (order owner or admin)."""
    return OrderService(db).update_payment_status(
        current_user, order_id, update.payment_status, update.transaction_id
    )
