# regionhub/services/stock.py
"""Stock ledger: append-only entries and the derived on-hand quantity.

Current stock is never stored. It is the sum of the ledger entries of a
product minus the quantities of cart lines whose order reached a sold status.
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regionhub.models.cart import CartItem
from regionhub.models.order import Order, SOLD_STATUSES
from regionhub.models.product import Product
from regionhub.models.stock import StockEntry
from regionhub.utils.errors import InsufficientStock, NotFound, ValidationFailed
from regionhub.utils.locks import locks, product_key

logger = logging.getLogger(__name__)


def ledger_totals(db: Session, product_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(product_ids)
    rows = (db.query(StockEntry.product_id, func.coalesce(func.sum(StockEntry.qty), 0))
            .filter(StockEntry.product_id.in_(ids))
            .group_by(StockEntry.product_id)
            .all())
    totals = {pid: 0 for pid in ids}
    totals.update({pid: int(total) for pid, total in rows})
    return totals


def sold_quantities(db: Session, product_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(product_ids)
    rows = (db.query(CartItem.product_id, func.coalesce(func.sum(CartItem.qty), 0))
            .join(Order, Order.id == CartItem.order_id)
            .filter(CartItem.product_id.in_(ids), Order.status.in_(SOLD_STATUSES))
            .group_by(CartItem.product_id)
            .all())
    sold = {pid: 0 for pid in ids}
    sold.update({pid: int(qty) for pid, qty in rows})
    return sold


def derived_stock_map(db: Session, product_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(product_ids)
    totals = ledger_totals(db, ids)
    sold = sold_quantities(db, ids)
    return {pid: totals[pid] - sold[pid] for pid in ids}


def derived_stock(db: Session, product_id: int) -> int:
    return derived_stock_map(db, [product_id])[product_id]


def append_entry(
    db: Session,
    product: Product,
    qty: int,
    user_id: Optional[int] = None,
    note: Optional[str] = None,
    stock_date: Optional[datetime] = None,
) -> StockEntry:
    """Append a ledger entry. Negative deltas may not push derived stock below zero."""
    if not qty:
        raise ValidationFailed("Invalid stock entry", {"qty": "Quantity must be a non-zero integer"})

    with locks.hold(product_key(product.id)):
        try:
            if qty < 0:
                available = derived_stock(db, product.id)
                if available + qty < 0:
                    raise InsufficientStock(
                        "Stock cannot go negative",
                        {str(product.id): f"{product.name}: available {available}, requested {-qty}"},
                    )
            entry = StockEntry(product_id=product.id, qty=qty, created_by=user_id, note=note)
            if stock_date is not None:
                entry.stock_date = stock_date
            db.add(entry)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
    db.refresh(entry)
    logger.info("Stock ledger: product=%s qty=%+d entry=%s", product.id, qty, entry.id)
    return entry


def history(db: Session, product_id: int):
    if db.get(Product, product_id) is None:
        raise NotFound("Product not found")
    return (db.query(StockEntry)
            .filter(StockEntry.product_id == product_id)
            .order_by(StockEntry.stock_date.desc(), StockEntry.id.desc())
            .all())
