"""Product submission and curation workflow.

A product moves pending -> approved or pending -> rejected exactly once. The
curation review writes four effects in one transaction: the review row, the
product status and score, the curator's points and the seller's points. The
status change is a conditional UPDATE ... WHERE status = 'pending' under a row
lock (or an IMMEDIATE transaction on SQLite), so of two concurrent reviews
only one can win; the other sees InvalidState.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from database_adapter import Product, ProductReview, row_to_dict, utcnow_naive
from services import balances, points, scoring
from services.access import Action, Actor, ensure_allowed
from services.errors import InvalidInput, InvalidState, NotFound

logger = logging.getLogger(__name__)

PRODUCT_CATEGORIES = ("ebook", "ecourse", "resep_masakan", "jasa_design", "software")


class ProductStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class ProductDraft:
    title: str
    description: str
    category: str
    price: Decimal
    stock: int = 0
    thumbnail_url: Optional[str] = None
    content_url: Optional[str] = None


@dataclass
class SubmissionResult:
    product: dict
    seller_points_awarded: int


@dataclass
class ReviewOutcome:
    review: dict
    status: ProductStatus
    average_score: Decimal
    curator_points_earned: int
    seller_points_earned: int


def review_to_dict(review: ProductReview) -> dict:
    data = row_to_dict(review)
    data["scores"] = [data[f"question{i}_score"] for i in range(1, scoring.REVIEW_QUESTION_COUNT + 1)]
    return data


def validate_draft(draft: ProductDraft) -> ProductDraft:
    """Check the fields a submission must carry; raises InvalidInput."""
    if not draft.title or not draft.title.strip():
        raise InvalidInput("Title is required")
    if not draft.description or not draft.description.strip():
        raise InvalidInput("Description is required")
    if draft.category not in PRODUCT_CATEGORIES:
        raise InvalidInput(f"Category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
    try:
        price = Decimal(str(draft.price))
    except (InvalidOperation, ValueError):
        raise InvalidInput("Price must be a number")
    if not price.is_finite() or price < 0:
        raise InvalidInput("Price must be a non-negative number")
    if draft.stock is None or draft.stock < 0:
        raise InvalidInput("Stock must be a non-negative integer")
    draft.price = price
    return draft


class SubmissionWorkflow:
    """Seller submissions and curator reviews of products."""

    def __init__(self, db):
        self.db = db

    def submit(self, actor: Actor, draft: ProductDraft) -> SubmissionResult:
        """Create a pending product and credit the submitting seller."""
        ensure_allowed(actor, Action.SUBMIT_PRODUCT)
        draft = validate_draft(draft)
        awarded = points.seller_points_for("submit")

        with self.db.transaction() as session:
            product = Product(
                seller_id=actor.id,
                title=draft.title.strip(),
                description=draft.description,
                category=draft.category,
                price=draft.price,
                stock=draft.stock,
                thumbnail_url=draft.thumbnail_url,
                content_url=draft.content_url,
                status=ProductStatus.PENDING.value,
            )
            session.add(product)
            if not balances.credit(session, actor.id, balances.SELLER, awarded):
                raise NotFound("Seller not found")
            session.flush()
            created = row_to_dict(product)

        logger.info(f"Product {created['id']} submitted by {actor.id} (+{awarded} seller points)")
        return SubmissionResult(product=created, seller_points_awarded=awarded)

    def review(
        self,
        actor: Actor,
        product_id: str,
        scores: Sequence[int],
        comment: Optional[str] = None,
    ) -> ReviewOutcome:
        """Score a pending product, decide its status and credit both parties."""
        ensure_allowed(actor, Action.REVIEW_PRODUCT)

        # Score validation happens before any storage access
        avg = scoring.average(scores)
        total = scoring.total(scores)
        new_status = ProductStatus.APPROVED if scoring.is_passing(avg) else ProductStatus.REJECTED
        seller_points = points.seller_points_for(new_status.value)

        with self.db.transaction() as session:
            stmt = select(Product).where(Product.id == product_id)
            if self.db.supports_row_locks:
                stmt = stmt.with_for_update()
            product = session.execute(stmt).scalar_one_or_none()

            if product is None:
                raise NotFound("Product not found")
            if product.status != ProductStatus.PENDING.value:
                raise InvalidState("Product has already been reviewed")

            transitioned = session.execute(
                update(Product)
                .where(Product.id == product_id, Product.status == ProductStatus.PENDING.value)
                .values(status=new_status.value, review_score=avg, updated_at=utcnow_naive())
                .execution_options(synchronize_session=False)
            ).rowcount
            if transitioned != 1:
                raise InvalidState("Product has already been reviewed")

            curator_points = points.curator_points_for(product.category)
            review = ProductReview(
                product_id=product_id,
                curator_id=actor.id,
                total_score=total,
                average_score=avg,
                points_earned=curator_points,
                comment=comment,
                **{f"question{i}_score": score for i, score in enumerate(scores, start=1)},
            )
            session.add(review)
            try:
                session.flush()
            except IntegrityError:
                raise InvalidState("Product has already been reviewed")

            if not balances.credit(session, actor.id, balances.CURATOR, curator_points):
                raise NotFound("Curator not found")
            if not balances.credit(session, product.seller_id, balances.SELLER, seller_points):
                # Seller account removed by an admin; the review still stands.
                logger.warning(f"Seller {product.seller_id} of product {product_id} no longer exists")
                seller_points = 0

            review_data = review_to_dict(review)

        logger.info(
            f"Product {product_id} {new_status.value} by {actor.id} "
            f"(average {avg}, +{curator_points} curator, +{seller_points} seller)"
        )
        return ReviewOutcome(
            review=review_data,
            status=new_status,
            average_score=avg,
            curator_points_earned=curator_points,
            seller_points_earned=seller_points,
        )

    def pending_queue(self, actor: Actor, category: Optional[str] = None) -> list[dict]:
        """Products awaiting curation, oldest first."""
        ensure_allowed(actor, Action.VIEW_REVIEW_QUEUE)
        query = self.db.table("products").select("*").eq("status", ProductStatus.PENDING.value)
        if category:
            query = query.eq("category", category)
        return query.order("created_at").execute().data
