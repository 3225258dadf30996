# regionhub/services/orders.py
"""Order lifecycle state machine.

    OPEN -> CONFIRMED -> PAID -> SHIPPED -> DELIVERED
    any non-terminal status -> CANCELLED

Each transition runs under the order lock and commits as one unit. Line item
status is a separate field; ``TRANSITIONS`` states which item status (if
any) a transition writes onto the order's lines.
"""
import logging
from collections import defaultdict
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regionhub.models.cart import CartItem, CartItemStatus
from regionhub.models.delivery import AgentStatus, DeliveryAgent
from regionhub.models.order import Order, OrderStatus, TERMINAL_STATUSES
from regionhub.models.product import Product
from regionhub.models.users import Address, User
from regionhub.services import stock
from regionhub.services.cart import open_order
from regionhub.utils.errors import Conflict, Forbidden, InsufficientStock, NotFound
from regionhub.utils.locks import locks, cart_key, order_key, product_key

logger = logging.getLogger(__name__)


class Transition(NamedTuple):
    sources: Tuple[OrderStatus, ...]
    target: OrderStatus
    item_status: Optional[CartItemStatus]


TRANSITIONS = {
    "confirm": Transition((OrderStatus.OPEN,), OrderStatus.CONFIRMED, None),
    "pay": Transition((OrderStatus.CONFIRMED,), OrderStatus.PAID, None),
    # Lines are picked up one by one by the agent after acceptance
    "accept": Transition((OrderStatus.PAID,), OrderStatus.SHIPPED, None),
    "deliver": Transition((OrderStatus.SHIPPED,), OrderStatus.DELIVERED, CartItemStatus.SHIPPED),
    "cancel": Transition(
        (OrderStatus.OPEN, OrderStatus.CONFIRMED, OrderStatus.PAID, OrderStatus.SHIPPED),
        OrderStatus.CANCELLED,
        CartItemStatus.CANCELLED,
    ),
}


def _get_order(db: Session, order_id: int, for_update: bool = False) -> Order:
    query = db.query(Order).filter(Order.id == order_id)
    if for_update:
        query = query.with_for_update()
    order = query.first()
    if not order:
        raise NotFound("Order not found")
    return order


def check_transition(order: Order, name: str) -> Transition:
    transition = TRANSITIONS[name]
    if order.status in TERMINAL_STATUSES:
        raise Conflict(f"Order #{order.id} is already {order.status.value}")
    if order.status not in transition.sources:
        raise Conflict(f"Cannot {name} order #{order.id} in status {order.status.value}")
    return transition


def apply_transition(order: Order, name: str) -> Order:
    transition = check_transition(order, name)
    old_status = order.status
    order.status = transition.target

    if transition.item_status is not None:
        for item in order.items:
            # Cancelled lines stay cancelled unless the whole order is cancelled
            if item.status == CartItemStatus.CANCELLED and transition.item_status != CartItemStatus.CANCELLED:
                continue
            item.status = transition.item_status

    logger.info("Order %s: %s -> %s", order.id, old_status.value, order.status.value)
    return order


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def confirm_order(db: Session, user: User, address_id: Optional[int] = None) -> Order:
    with locks.hold(cart_key(user.id)):
        order = open_order(db, user.id, for_update=True)
        if order is None or not order.items:
            raise NotFound("No active cart found")

        if address_id is not None:
            address = db.get(Address, address_id)
            if not address or address.user_id != user.id:
                raise NotFound("Address not found")
            order.address_id = address.id

        with locks.hold(order_key(order.id)):
            apply_transition(order, "confirm")
            _commit(db)

    db.refresh(order)
    return order


def pay_order(db: Session, user: User, order_id: int) -> Order:
    """CONFIRMED -> PAID, committing the ordered quantities against stock.

    Every product is checked before anything is written: if any line would
    drive derived stock below zero the order stays CONFIRMED and the error
    lists every short product.
    """
    order = _get_order(db, order_id)
    if order.user_id != user.id:
        raise NotFound("Order not found")
    check_transition(order, "pay")
    product_ids = sorted({item.product_id for item in order.items})

    keys = [order_key(order.id)] + [product_key(pid) for pid in product_ids]
    with locks.hold(*keys):
        # Re-read under the locks; another request may have moved the order
        db.expire_all()
        order = _get_order(db, order_id, for_update=True)
        check_transition(order, "pay")
        db.query(Product).filter(Product.id.in_(product_ids)).with_for_update().all()

        requested = defaultdict(int)
        for item in order.items:
            requested[item.product_id] += item.qty

        available = stock.derived_stock_map(db, requested.keys())
        shortages = {}
        for product_id in sorted(requested):
            if available[product_id] < requested[product_id]:
                product = db.get(Product, product_id)
                name = product.name if product else f"#{product_id}"
                shortages[str(product_id)] = (
                    f"Insufficient stock for {name}: available {available[product_id]}, "
                    f"requested {requested[product_id]}"
                )
        if shortages:
            db.rollback()
            logger.warning("Payment of order %s refused, short products: %s", order_id, sorted(shortages))
            raise InsufficientStock("Insufficient stock", shortages)

        apply_transition(order, "pay")
        _commit(db)

    db.refresh(order)
    return order


def require_active_agent(db: Session, agent: User) -> DeliveryAgent:
    """Return the agent's vetting record, refusing accounts an admin has not activated."""
    if (agent.role or "").lower() != "delivery":
        raise Forbidden("Only delivery agents can handle deliveries")
    profile = db.query(DeliveryAgent).filter(DeliveryAgent.user_id == agent.id).first()
    if not profile or profile.status != AgentStatus.ACTIVE:
        raise Forbidden("Delivery account is not activated yet")
    return profile


def accept_order(db: Session, agent: User, order_id: int) -> Order:
    require_active_agent(db, agent)

    with locks.hold(order_key(order_id)):
        order = _get_order(db, order_id, for_update=True)
        check_transition(order, "accept")
        if order.delivery_agent_id is not None:
            raise Conflict(f"Order #{order.id} already has a delivery agent")
        order.delivery_agent_id = agent.id
        apply_transition(order, "accept")
        _commit(db)

    db.refresh(order)
    return order


def deliver_order(db: Session, agent: User, order_id: int) -> Order:
    with locks.hold(order_key(order_id)):
        order = _get_order(db, order_id, for_update=True)
        check_transition(order, "deliver")
        if order.delivery_agent_id != agent.id:
            raise Forbidden("Order is assigned to another delivery agent")
        apply_transition(order, "deliver")
        _commit(db)

    db.refresh(order)
    return order


def cancel_order(db: Session, actor: User, order_id: int) -> Order:
    is_admin = (actor.role or "").lower() == "admin"
    order = _get_order(db, order_id)
    if order.user_id != actor.id and not is_admin:
        raise NotFound("Order not found")

    keys = [order_key(order_id)]
    if order.status == OrderStatus.OPEN:
        keys.append(cart_key(order.user_id))
    with locks.hold(*keys):
        db.expire_all()
        order = _get_order(db, order_id, for_update=True)
        apply_transition(order, "cancel")
        _commit(db)

    db.refresh(order)
    return order


def mark_item_shipped(db: Session, agent: User, item_id: int) -> CartItem:
    require_active_agent(db, agent)
    item = db.get(CartItem, item_id)
    if not item:
        raise NotFound("Cart item not found")

    with locks.hold(order_key(item.order_id)):
        db.expire_all()
        order = _get_order(db, item.order_id, for_update=True)
        if order.delivery_agent_id != agent.id:
            raise Forbidden("Order is assigned to another delivery agent")
        if order.status != OrderStatus.SHIPPED:
            raise Conflict(f"Order #{order.id} is {order.status.value}, items cannot be shipped")
        item = db.get(CartItem, item_id)
        if item.status == CartItemStatus.CANCELLED:
            raise Conflict("Cart item is cancelled")
        item.status = CartItemStatus.SHIPPED
        _commit(db)

    db.refresh(item)
    return item


def get_order(db: Session, viewer: User, order_id: int) -> Order:
    order = _get_order(db, order_id)
    role = (viewer.role or "").lower()
    if role == "admin" or viewer.id in (order.user_id, order.delivery_agent_id):
        return order
    if role == "vendor" and order.vendor and order.vendor.user_id == viewer.id:
        return order
    raise NotFound("Order not found")


def list_user_orders(db: Session, user_id: int) -> List[Order]:
    return (db.query(Order)
            .filter(Order.user_id == user_id, Order.status != OrderStatus.OPEN)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())


def available_orders(db: Session) -> List[Order]:
    # Paid orders waiting for a delivery agent, oldest first
    return (db.query(Order)
            .filter(Order.status == OrderStatus.PAID, Order.delivery_agent_id.is_(None))
            .order_by(Order.created_at.asc(), Order.id.asc())
            .all())


def agent_orders(db: Session, agent_id: int) -> List[Order]:
    return (db.query(Order)
            .filter(Order.delivery_agent_id == agent_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all())
