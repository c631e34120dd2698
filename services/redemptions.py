"""Redeeming curator points for catalog items.

Stock and points are both taken with guarded decrements in a single
transaction, so a redemption either records the item, the stock change and
the point deduction together, or changes nothing.
"""
import logging

from sqlalchemy import update

from database_adapter import ProductRedemption, RedeemableProduct, row_to_dict, utcnow_naive
from services import balances
from services.access import Action, Actor, ensure_allowed
from services.errors import InvalidState, NotFound

logger = logging.getLogger(__name__)


class RedemptionService:

    def __init__(self, db):
        self.db = db

    def redeem(self, actor: Actor, redeemable_id: str) -> dict:
        """Spend curator points on one unit of a redeemable product.

        Returns the redemption record, the points spent and the remaining balance.
        """
        ensure_allowed(actor, Action.REDEEM_PRODUCT)

        with self.db.transaction() as session:
            item = session.get(RedeemableProduct, redeemable_id)
            if item is None:
                raise NotFound("Redeemable product not found")
            if not item.is_active:
                raise InvalidState("Product is not available for redemption")

            cost = item.points_cost
            if not balances.debit(session, actor.id, balances.CURATOR, cost):
                raise InvalidState("Insufficient curator points")

            taken = session.execute(
                update(RedeemableProduct)
                .where(RedeemableProduct.id == redeemable_id, RedeemableProduct.stock >= 1)
                .values(stock=RedeemableProduct.stock - 1, updated_at=utcnow_naive())
                .execution_options(synchronize_session=False)
            ).rowcount
            if taken != 1:
                raise InvalidState("Redeemable product is out of stock")

            redemption = ProductRedemption(
                user_id=actor.id,
                redeemable_product_id=redeemable_id,
                points_spent=cost,
                status="completed",
            )
            session.add(redemption)
            session.flush()
            remaining = balances.balance(session, actor.id, balances.CURATOR)
            data = row_to_dict(redemption)

        logger.info(f"User {actor.id} redeemed {redeemable_id} for {cost} points ({remaining} left)")
        return {"redemption": data, "points_spent": cost, "remaining_points": remaining}
