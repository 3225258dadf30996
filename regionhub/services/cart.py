# regionhub/services/cart.py
"""Cart aggregation on top of the user's single open order.

The order total is a materialized view: every mutation recomputes it from
the line totals in the same transaction, under the user's cart lock.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from regionhub.models.cart import CartItem, CartItemStatus
from regionhub.models.order import Order, OrderStatus
from regionhub.models.product import Product
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.locks import locks, cart_key

logger = logging.getLogger(__name__)


def _validate_qty(qty):
    if qty is None or isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise ValidationFailed("Invalid quantity", {"qty": "Quantity must be an integer of at least 1"})


def _line_total(unit_price: float, qty: int) -> float:
    return round(unit_price * qty, 2)


def recalculate_total(order: Order) -> float:
    order.total = round(sum(item.line_total for item in order.items), 2)
    return order.total


def open_order(db: Session, user_id: int, for_update: bool = False) -> Optional[Order]:
    query = db.query(Order).filter(Order.user_id == user_id, Order.status == OrderStatus.OPEN)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_cart(db: Session, user_id: int) -> Optional[Order]:
    # Reading never creates an order
    return open_order(db, user_id)


def _own_open_item(db: Session, user_id: int, item_id: int) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user_id).first()
    if not item:
        raise NotFound("Cart item not found")
    if item.order.status != OrderStatus.OPEN:
        raise Conflict(f"Order #{item.order_id} is already {item.order.status.value}, cart is locked")
    return item


def add_item(db: Session, user_id: int, product_id: int, qty: int) -> Tuple[Order, CartItem]:
    _validate_qty(qty)
    # Products of vendors still awaiting approval are not for sale
    product = (db.query(Product)
               .join(Vendor, Vendor.id == Product.vendor_id)
               .filter(Product.id == product_id, Vendor.status == VendorStatus.ACCEPTED)
               .first())
    if not product:
        raise NotFound("Product not found")

    with locks.hold(cart_key(user_id)):
        try:
            order = open_order(db, user_id, for_update=True)
            if order is None:
                order = Order(user_id=user_id, vendor_id=product.vendor_id, status=OrderStatus.OPEN, total=0.0)
                db.add(order)
                db.flush()

            item = next((it for it in order.items if it.product_id == product.id), None)
            if item:
                # Keep the price captured when the line was created
                item.qty += qty
                item.line_total = _line_total(item.unit_price, item.qty)
            else:
                item = CartItem(
                    product_id=product.id,
                    user_id=user_id,
                    qty=qty,
                    unit_price=product.price,
                    line_total=_line_total(product.price, qty),
                    status=CartItemStatus.PROCESSING,
                )
                order.items.append(item)

            recalculate_total(order)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Concurrent cart write for user %s", user_id)
            raise Conflict("The cart was modified concurrently, please retry")
        except SQLAlchemyError:
            db.rollback()
            raise

    db.refresh(order)
    db.refresh(item)
    logger.info("Cart add: user=%s product=%s qty=%s order=%s total=%.2f",
                user_id, product.id, qty, order.id, order.total)
    return order, item


def update_qty(db: Session, user_id: int, item_id: int, qty: int) -> Order:
    _validate_qty(qty)

    with locks.hold(cart_key(user_id)):
        try:
            item = _own_open_item(db, user_id, item_id)
            order = item.order
            item.qty = qty
            item.line_total = _line_total(item.unit_price, qty)
            recalculate_total(order)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    db.refresh(order)
    return order


def remove_item(db: Session, user_id: int, item_id: int) -> Optional[Order]:
    """Delete a line. Returns the order, or None when the emptied order was deleted."""
    with locks.hold(cart_key(user_id)):
        try:
            item = _own_open_item(db, user_id, item_id)
            order = item.order
            order.items.remove(item)
            recalculate_total(order)

            if not order.items or order.total <= 0:
                order_id = order.id
                db.delete(order)
                db.commit()
                logger.info("Cart emptied: order %s deleted", order_id)
                return None

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    db.refresh(order)
    return order
