"""Seller dashboard endpoints: sales from completed orders and customer reviews.

Security: a seller only sees their own numbers; admins see any seller's.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func

from database_adapter import CustomerReview, Order, Product, User
from models.sellers import SellerCustomerReview, SellerSales
from services.access import Action, Actor, ensure_allowed, is_self
from services.auth import get_current_user
from services.database import get_db
from services.errors import NotFound

router = APIRouter(prefix="/api/sellers", tags=["sellers"])

RECENT_SALES_LIMIT = 10


def _ensure_seller(session, seller_id: str):
    if session.get(User, seller_id) is None:
        raise NotFound("User not found")


@router.get("/{seller_id}/sales", response_model=SellerSales)
def get_seller_sales(
    seller_id: str,
    product_id: Optional[str] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Sales per product and the latest completed orders (the seller or an admin)."""
    ensure_allowed(current_user, Action.VIEW_SELLER_STATS, is_self(seller_id))

    with db.transaction() as session:
        _ensure_seller(session, seller_id)
        filters = [Product.seller_id == seller_id, Order.payment_status == "completed"]
        if product_id:
            filters.append(Product.id == product_id)

        per_product = (
            session.query(Product.id, Product.title, func.count(Order.id), func.sum(Order.amount))
            .join(Order, Order.product_id == Product.id)
            .filter(*filters)
            .group_by(Product.id, Product.title)
            .all()
        )
        recent = (
            session.query(Order, Product.title, Product.category)
            .join(Product, Product.id == Order.product_id)
            .filter(*filters)
            .order_by(Order.created_at.desc())
            .limit(RECENT_SALES_LIMIT)
            .all()
        )

    products = [
        {"product_id": pid, "title": title, "total_sales": count, "revenue": float(revenue or 0)}
        for pid, title, count, revenue in per_product
    ]
    return {
        "seller_id": seller_id,
        "total_sales": sum(p["total_sales"] for p in products),
        "total_revenue": sum(p["revenue"] for p in products),
        "products": products,
        "recent_sales": [
            {
                "order_id": order.id,
                "product_id": order.product_id,
                "title": title,
                "category": category,
                "amount": float(order.amount),
                "created_at": order.created_at,
            }
            for order, title, category in recent
        ],
    }


@router.get("/{seller_id}/customer-reviews", response_model=list[SellerCustomerReview])
def get_seller_customer_reviews(
    seller_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Customer reviews across the seller's products, newest first."""
    ensure_allowed(current_user, Action.VIEW_SELLER_STATS, is_self(seller_id))

    with db.transaction() as session:
        _ensure_seller(session, seller_id)
        rows = (
            session.query(CustomerReview, Product.title, User.name, User.email_verified)
            .join(Product, Product.id == CustomerReview.product_id)
            .outerjoin(User, User.id == CustomerReview.customer_id)
            .filter(Product.seller_id == seller_id)
            .order_by(CustomerReview.created_at.desc())
            .all()
        )
        return [
            {
                "id": review.id,
                "product_id": review.product_id,
                "product_title": title,
                "customer_id": review.customer_id,
                "customer_name": name,
                "customer_verified": bool(verified),
                "rating": review.rating,
                "comment": review.comment,
                "seller_response": review.seller_response,
                "seller_response_at": review.seller_response_at,
                "created_at": review.created_at,
            }
            for review, title, name, verified in rows
        ]
