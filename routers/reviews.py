"""Curation review endpoints.

A review scores a pending product on eight questions and decides its status;
see services/submissions.py for the transaction it runs.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from database_adapter import ProductReview
from models.reviews import ReviewCreate, ReviewOutcomeResponse, ReviewResponse
from services.access import Action, Actor, permits
from services.auth import get_current_user
from services.database import get_db
from services.submissions import SubmissionWorkflow, review_to_dict

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("", response_model=ReviewOutcomeResponse, status_code=201)
def create_review(
    review: ReviewCreate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Review a pending product (approved curators and admins)."""
    outcome = SubmissionWorkflow(db).review(current_user, review.product_id, review.scores, review.comment)
    return {
        "review": outcome.review,
        "product_status": outcome.status.value,
        "average_score": outcome.average_score,
        "curator_points_earned": outcome.curator_points_earned,
        "seller_points_earned": outcome.seller_points_earned,
    }


@router.get("", response_model=list[ReviewResponse])
def get_reviews(
    product_id: Optional[str] = None,
    curator_id: Optional[str] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """List curation reviews.

    Approved curators and admins see every review; other users only see the
    reviews of products they sell.
    """
    with db.transaction() as session:
        query = session.query(ProductReview)
        if product_id:
            query = query.filter(ProductReview.product_id == product_id)
        if curator_id:
            query = query.filter(ProductReview.curator_id == curator_id)

        if not permits(current_user, Action.VIEW_CURATION_REVIEWS):
            own = db.table("products").select("id").eq("seller_id", current_user.id).execute().data
            query = query.filter(ProductReview.product_id.in_([p["id"] for p in own]))

        rows = query.order_by(ProductReview.created_at.desc()).all()
        return [review_to_dict(row) for row in rows]
