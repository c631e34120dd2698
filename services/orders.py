"""Order placement for approved products.

The stock decrement and the order row are written in one transaction; the
decrement is conditional on stock >= 1 so two buyers cannot take the last unit.
"""
import logging
import secrets
import time
from typing import Optional

from sqlalchemy import update

from database_adapter import Order, Product, row_to_dict, utcnow_naive
from services.access import Action, Actor, ensure_allowed, owns_order
from services.errors import InvalidInput, InvalidState, NotFound
from services.submissions import ProductStatus

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "completed", "failed")

# Only pending orders settle; completed and failed are final.
PAYMENT_TRANSITIONS = {"pending": ("completed", "failed")}


def generate_transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


class OrderService:

    def __init__(self, db):
        self.db = db

    def purchase(self, actor: Actor, product_id: str, payment_method: str = "manual") -> dict:
        """Buy one unit of an approved, active product."""
        ensure_allowed(actor, Action.PURCHASE_PRODUCT)

        with self.db.transaction() as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFound("Product not found")
            if product.status != ProductStatus.APPROVED.value or not product.is_active:
                raise InvalidState("Product is not available for purchase")

            taken = session.execute(
                update(Product)
                .where(Product.id == product_id, Product.stock >= 1)
                .values(stock=Product.stock - 1, updated_at=utcnow_naive())
                .execution_options(synchronize_session=False)
            ).rowcount
            if taken != 1:
                raise InvalidState("Product is out of stock")

            order = Order(
                customer_id=actor.id,
                product_id=product_id,
                amount=product.price,
                payment_status="pending",
                payment_method=payment_method,
                transaction_id=generate_transaction_id(),
            )
            session.add(order)
            session.flush()
            data = row_to_dict(order)

        logger.info(f"Order {data['id']} placed by {actor.id} for product {product_id}")
        return data

    def has_purchased(self, customer_id: str, product_id: str) -> bool:
        """Whether the customer holds a completed order for the product."""
        response = (
            self.db.table("orders")
            .select("id")
            .eq("customer_id", customer_id)
            .eq("product_id", product_id)
            .eq("payment_status", "completed")
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def update_payment_status(
        self,
        actor: Actor,
        order_id: str,
        payment_status: str,
        transaction_id: Optional[str] = None,
    ) -> dict:
        """Settle a pending order as completed or failed.

        Completed and failed are final. A failed order gives its unit of stock
        back. Repeating the current status is a no-op.
        """
        if payment_status not in PAYMENT_STATUSES:
            raise InvalidInput(f"Payment status must be one of: {', '.join(PAYMENT_STATUSES)}")

        with self.db.transaction() as session:
            order = session.get(Order, order_id)
            if order is None:
                raise NotFound("Order not found")
            ensure_allowed(actor, Action.UPDATE_ORDER, owns_order(row_to_dict(order)))

            current = order.payment_status
            if payment_status != current:
                if payment_status not in PAYMENT_TRANSITIONS.get(current, ()):
                    raise InvalidState(f"Cannot change payment status from {current} to {payment_status}")

                settled = session.execute(
                    update(Order)
                    .where(Order.id == order_id, Order.payment_status == current)
                    .values(payment_status=payment_status, updated_at=utcnow_naive())
                    .execution_options(synchronize_session=False)
                ).rowcount
                if settled != 1:
                    raise InvalidState("Order payment status changed concurrently")

                if payment_status == "failed":
                    session.execute(
                        update(Product)
                        .where(Product.id == order.product_id)
                        .values(stock=Product.stock + 1, updated_at=utcnow_naive())
                        .execution_options(synchronize_session=False)
                    )

            if transaction_id:
                order.transaction_id = transaction_id
            session.flush()
            session.refresh(order)
            data = row_to_dict(order)

        if payment_status != current:
            logger.info(f"Order {order_id} {current} -> {payment_status} by {actor.id}")
        return data
