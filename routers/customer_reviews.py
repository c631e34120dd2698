"""Customer review endpoints.

Buyers rate products they bought (1-5 stars).
Security: a review needs a completed order for the product, and each customer
reviews a product at most once. Only the author edits a review; the author or
an admin deletes it. The product's seller may answer a review.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError

from database_adapter import CustomerReview, Product, row_to_dict, utcnow_naive
from models.customer_reviews import (
    CustomerReviewCreate,
    CustomerReviewResponse,
    CustomerReviewUpdate,
    SellerResponseCreate,
)
from services.access import Action, Actor, ensure_allowed, has_purchased, owns_product, wrote_review
from services.auth import get_current_user
from services.database import get_db
from services.errors import InvalidInput, NotFound
from services.orders import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customer-reviews", tags=["customer-reviews"])


def _get_or_404(db, review_id: str) -> dict:
    response = db.table("customer_reviews").select("*").eq("id", review_id).execute()
    if not response.data:
        raise NotFound("Review not found")
    return response.data[0]


@router.get("", response_model=list[CustomerReviewResponse])
def get_customer_reviews(
    product_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db=Depends(get_db),
):
    """Get customer reviews with optional filters"""
    query = db.table("customer_reviews").select("*")

    if product_id:
        query = query.eq("product_id", product_id)

    if customer_id:
        query = query.eq("customer_id", customer_id)

    return query.order("created_at", desc=True).range(offset, offset + limit - 1).execute().data


@router.get("/{review_id}", response_model=CustomerReviewResponse)
def get_customer_review(review_id: str, db=Depends(get_db)):
    return _get_or_404(db, review_id)


@router.post("", response_model=CustomerReviewResponse, status_code=201)
def create_customer_review(
    review: CustomerReviewCreate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Review a product the caller has bought.

    Completed orders are final, so checking the purchase before the insert
    cannot go stale.
    """
    if not db.table("products").select("id").eq("id", review.product_id).execute().data:
        raise NotFound("Product not found")

    purchased = OrderService(db).has_purchased(current_user.id, review.product_id)
    ensure_allowed(current_user, Action.WRITE_CUSTOMER_REVIEW, has_purchased(purchased))

    duplicate = InvalidInput("You have already reviewed this product")
    with db.transaction() as session:
        existing = (
            session.query(CustomerReview.id)
            .filter(
                CustomerReview.product_id == review.product_id,
                CustomerReview.customer_id == current_user.id,
            )
            .first()
        )
        if existing:
            raise duplicate

        row = CustomerReview(
            product_id=review.product_id,
            customer_id=current_user.id,
            rating=review.rating,
            comment=review.comment,
        )
        session.add(row)
        try:
            session.flush()
        except IntegrityError:
            raise duplicate
        data = row_to_dict(row)

    logger.info(f"Customer {current_user.id} rated product {review.product_id}: {review.rating}")
    return data


@router.put("/{review_id}", response_model=CustomerReviewResponse)
def update_customer_review(
    review_id: str,
    review: CustomerReviewUpdate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Update a review (author only, admins included)."""
    existing = _get_or_404(db, review_id)
    ensure_allowed(current_user, Action.WRITE_CUSTOMER_REVIEW, wrote_review(existing, binds_admin=True))

    update_data = review.model_dump(exclude_unset=True)
    if not update_data:
        return existing
    update_data["updated_at"] = utcnow_naive()
    return db.table("customer_reviews").update(update_data).eq("id", review_id).execute().data[0]


@router.delete("/{review_id}", status_code=204)
def delete_customer_review(
    review_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Delete a review (author or admin)"""
    existing = _get_or_404(db, review_id)
    ensure_allowed(current_user, Action.WRITE_CUSTOMER_REVIEW, wrote_review(existing))

    db.table("customer_reviews").delete().eq("id", review_id).execute()
    logger.info(f"Customer review {review_id} deleted by {current_user.id}")
    return None


@router.put("/{review_id}/response", response_model=CustomerReviewResponse)
def respond_to_customer_review(
    review_id: str,
    body: SellerResponseCreate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Answer a review of one of the caller's products; a second answer replaces the first."""
    existing = _get_or_404(db, review_id)

    with db.transaction() as session:
        product = session.get(Product, existing["product_id"])
        if product is None:
            raise NotFound("Product not found")
        ensure_allowed(current_user, Action.RESPOND_TO_REVIEW, owns_product(row_to_dict(product)))

        row = session.get(CustomerReview, review_id)
        if row is None:
            raise NotFound("Review not found")
        row.seller_response = body.response
        row.seller_response_at = utcnow_naive()
        session.flush()
        return row_to_dict(row)
