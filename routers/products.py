"""Product catalog and submission endpoints.

Sellers submit products (multipart form with optional thumbnail and content
files); products stay pending until a curator reviews them via /api/reviews.
Security: anonymous and client callers only ever see approved products; sellers
also see their own submissions; approved curators and admins see everything.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from database_adapter import CustomerReview, Product, ProductReview
from models.products import ProductResponse, ProductUpdate, SubmissionResponse
from services.access import Action, Actor, ensure_allowed, owns_product, permits
from services.auth import get_current_user, get_current_user_optional
from services.database import get_db
from services.errors import NotFound
from services.storage import CONTENT_FOLDER, THUMBNAIL_FOLDER, StorageError, get_file_storage
from services.submissions import ProductDraft, SubmissionWorkflow, validate_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def _sees_all_products(actor: Optional[Actor]) -> bool:
    # Whoever may work the review queue sees unreviewed products too
    return permits(actor, Action.VIEW_REVIEW_QUEUE)


def _can_view(actor: Optional[Actor], product: dict) -> bool:
    if product.get("status") == "approved":
        return True
    return _sees_all_products(actor) or (actor is not None and product.get("seller_id") == actor.id)


def _upload(storage, upload: Optional[UploadFile], folder: str, resource_type: str) -> Optional[str]:
    """Send an uploaded file to storage; None when no file was sent."""
    if upload is None or not upload.filename:
        return None
    data = upload.file.read()
    if not data:
        return None
    try:
        return storage.upload(data, upload.filename, folder, resource_type)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("", response_model=SubmissionResponse, status_code=201)
def submit_product(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    price: str = Form(...),
    stock: int = Form(0),
    thumbnail: Optional[UploadFile] = File(None),
    content: Optional[UploadFile] = File(None),
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
    storage=Depends(get_file_storage),
):
    """Submit a product for curation (sellers and admins).

    Files are uploaded before the database transaction; a failed upload aborts
    the submission, a stored file is never rolled back.
    """
    ensure_allowed(current_user, Action.SUBMIT_PRODUCT)
    draft = validate_draft(ProductDraft(
        title=title,
        description=description,
        category=category,
        price=price,
        stock=stock,
    ))
    draft.thumbnail_url = _upload(storage, thumbnail, THUMBNAIL_FOLDER, "image")
    draft.content_url = _upload(storage, content, CONTENT_FOLDER, "raw")

    result = SubmissionWorkflow(db).submit(current_user, draft)
    return {"product": result.product, "points_earned": result.seller_points_awarded}


@router.get("", response_model=list[ProductResponse])
def get_products(
    seller_id: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: Optional[Actor] = Depends(get_current_user_optional),
    db=Depends(get_db),
):
    """List products with optional filters.

    Callers who may not see unreviewed products are limited to approved ones,
    except sellers listing their own submissions.
    """
    own_listing = current_user is not None and seller_id == current_user.id
    if not (_sees_all_products(current_user) or own_listing):
        if status and status != "approved":
            return []
        status = "approved"

    query = db.table("products").select("*")
    if seller_id:
        query = query.eq("seller_id", seller_id)
    if status:
        query = query.eq("status", status)
    if category:
        query = query.eq("category", category)

    query = query.order("created_at", desc=True).range(offset, offset + limit - 1)
    return query.execute().data


@router.get("/pending", response_model=list[ProductResponse])
def get_review_queue(
    category: Optional[str] = None,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Products waiting for curation, oldest first (approved curators and admins)."""
    return SubmissionWorkflow(db).pending_queue(current_user, category)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    current_user: Optional[Actor] = Depends(get_current_user_optional),
    db=Depends(get_db),
):
    """Get a single product; unreviewed products read as missing to outsiders."""
    response = db.table("products").select("*").eq("id", product_id).execute()
    if not response.data or not _can_view(current_user, response.data[0]):
        raise NotFound("Product not found")
    return response.data[0]


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    updates: ProductUpdate,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Update listing details (owning seller or admin).

    Status and review score are owned by the curation workflow and cannot be set here.
    """
    existing = db.table("products").select("*").eq("id", product_id).execute()
    if not existing.data:
        raise NotFound("Product not found")
    ensure_allowed(current_user, Action.EDIT_PRODUCT, owns_product(existing.data[0]))

    update_data = updates.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        return existing.data[0]

    response = db.table("products").update(update_data).eq("id", product_id).execute()
    logger.info(f"Product {product_id} updated by {current_user.id}: {sorted(update_data)}")
    return response.data[0]


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    current_user: Actor = Depends(get_current_user),
    db=Depends(get_db),
):
    """Delete a product with its curation and customer reviews (admin only)."""
    ensure_allowed(current_user, Action.DELETE_PRODUCT)

    with db.transaction() as session:
        product = session.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")
        session.query(ProductReview).filter(ProductReview.product_id == product_id).delete()
        session.query(CustomerReview).filter(CustomerReview.product_id == product_id).delete()
        session.delete(product)

    logger.info(f"Product {product_id} deleted by {current_user.id}")
    return None
