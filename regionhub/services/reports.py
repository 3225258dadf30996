# regionhub/services/reports.py
"""Read-only views joined across orders, cart lines, products and vendors.

Every query ends in a fully specified ORDER BY (ties broken by id) so a
given snapshot and parameters always produce the same result.
"""
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import extract, func, select
from sqlalchemy.orm import Session

from regionhub.models.cart import CartItem
from regionhub.models.complaint import Complaint, ComplaintStatus
from regionhub.models.order import Order, OrderStatus, SOLD_STATUSES
from regionhub.models.product import Category, Gallery, Product
from regionhub.models.review import Review
from regionhub.models.users import User
from regionhub.models.vendor import Vendor
from regionhub.services import stock
from regionhub.utils.errors import NotFound, ValidationFailed


def day_window(date_from: date, date_to: date) -> Tuple[datetime, datetime]:
    """Inclusive window covering both calendar days completely."""
    if date_from is None or date_to is None:
        errors = {}
        if date_from is None:
            errors["date_from"] = "Date from is required"
        if date_to is None:
            errors["date_to"] = "Date to is required"
        raise ValidationFailed("Both from and to dates are required", errors)
    if date_from > date_to:
        raise ValidationFailed("Invalid date window", {"date_from": "Date from must not be after date to"})
    return datetime.combine(date_from, time.min), datetime.combine(date_to, time.max)


def year_window(year: int) -> Tuple[datetime, datetime]:
    return day_window(date(year, 1, 1), date(year, 12, 31))


def first_images(db: Session, product_ids: Iterable[int]) -> Dict[int, str]:
    ids = list(set(product_ids))
    if not ids:
        return {}
    first_ids = (select(func.min(Gallery.id))
                 .where(Gallery.product_id.in_(ids))
                 .group_by(Gallery.product_id))
    rows = db.query(Gallery.product_id, Gallery.photo).filter(Gallery.id.in_(first_ids)).all()
    return {product_id: photo for product_id, photo in rows}


def _revenue():
    return func.coalesce(func.sum(CartItem.line_total), 0.0).label("revenue")


def _quantity():
    return func.coalesce(func.sum(CartItem.qty), 0).label("quantity")


def _sold_lines(db: Session, *columns, start: Optional[datetime] = None, end: Optional[datetime] = None):
    query = (db.query(*columns)
             .select_from(CartItem)
             .join(Order, Order.id == CartItem.order_id)
             .join(Product, Product.id == CartItem.product_id)
             .join(Vendor, Vendor.id == Product.vendor_id)
             .filter(Order.status.in_(SOLD_STATUSES)))
    if start is not None:
        query = query.filter(Order.created_at >= start)
    if end is not None:
        query = query.filter(Order.created_at <= end)
    return query


# -----------------------------
# Vendor revenue
# -----------------------------
def vendor_revenue(db: Session, date_from: date, date_to: date) -> List[dict]:
    start, end = day_window(date_from, date_to)
    revenue, quantity = _revenue(), _quantity()

    vendor_rows = (_sold_lines(db, Vendor.id.label("vendor_id"), Vendor.name, Vendor.email, Vendor.address,
                               Vendor.latitude, Vendor.longitude, revenue, quantity, start=start, end=end)
                   .group_by(Vendor.id, Vendor.name, Vendor.email, Vendor.address, Vendor.latitude, Vendor.longitude)
                   .order_by(revenue.desc(), Vendor.id.asc())
                   .all())

    p_revenue, p_quantity = _revenue(), _quantity()
    product_rows = (_sold_lines(db, Product.vendor_id, Product.id.label("product_id"), Product.name,
                                Product.price, p_quantity, p_revenue, start=start, end=end)
                    .group_by(Product.vendor_id, Product.id, Product.name, Product.price)
                    .order_by(Product.vendor_id.asc(), Product.id.asc())
                    .all())

    products_by_vendor: Dict[int, List[dict]] = {}
    for row in product_rows:
        products_by_vendor.setdefault(row.vendor_id, []).append({
            "product_id": row.product_id,
            "name": row.name,
            "price": row.price,
            "quantity": int(row.quantity),
            "total": round(float(row.revenue), 2),
        })

    return [
        {
            "vendor_id": row.vendor_id,
            "vendor_name": row.name,
            "vendor_email": row.email,
            "vendor_address": row.address,
            "vendor_lat": row.latitude,
            "vendor_lon": row.longitude,
            "total_revenue": round(float(row.revenue), 2),
            "total_quantity": int(row.quantity),
            "products_sold": products_by_vendor.get(row.vendor_id, []),
        }
        for row in vendor_rows
    ]


# -----------------------------
# Top product / top vendor
# -----------------------------
def top_product(db: Session, date_from: date, date_to: date, vendor_id: Optional[int] = None) -> Optional[dict]:
    start, end = day_window(date_from, date_to)
    revenue, quantity = _revenue(), _quantity()
    query = _sold_lines(db, Product.id.label("product_id"), Product.name, Product.price,
                        Vendor.id.label("vendor_id"), Vendor.name.label("vendor_name"), Vendor.address,
                        Vendor.latitude, Vendor.longitude, quantity, revenue, start=start, end=end)
    if vendor_id is not None:
        query = query.filter(Vendor.id == vendor_id)

    row = (query
           .group_by(Product.id, Product.name, Product.price, Vendor.id, Vendor.name, Vendor.address,
                     Vendor.latitude, Vendor.longitude)
           .order_by(quantity.desc(), revenue.desc(), Product.id.asc())
           .first())
    if row is None:
        return None
    return {
        "product_id": row.product_id,
        "product_name": row.name,
        "product_price": row.price,
        "vendor_id": row.vendor_id,
        "vendor_name": row.vendor_name,
        "vendor_address": row.address,
        "vendor_lat": row.latitude,
        "vendor_lon": row.longitude,
        "total_quantity": int(row.quantity),
        "total_revenue": round(float(row.revenue), 2),
    }


def top_vendor(db: Session, date_from: date, date_to: date) -> Optional[dict]:
    start, end = day_window(date_from, date_to)
    revenue, quantity = _revenue(), _quantity()
    row = (_sold_lines(db, Vendor.id.label("vendor_id"), Vendor.name, Vendor.address, Vendor.latitude,
                       Vendor.longitude, quantity, revenue, start=start, end=end)
           .group_by(Vendor.id, Vendor.name, Vendor.address, Vendor.latitude, Vendor.longitude)
           .order_by(quantity.desc(), revenue.desc(), Vendor.id.asc())
           .first())
    if row is None:
        return None

    best = top_product(db, date_from, date_to, vendor_id=row.vendor_id)
    return {
        "vendor_id": row.vendor_id,
        "vendor_name": row.name,
        "vendor_address": row.address,
        "vendor_lat": row.latitude,
        "vendor_lon": row.longitude,
        "total_quantity": int(row.quantity),
        "total_revenue": round(float(row.revenue), 2),
        "most_sold_product": {
            "product_id": best["product_id"],
            "name": best["product_name"],
            "quantity": best["total_quantity"],
            "total": best["total_revenue"],
        },
    }


# -----------------------------
# Vendor dashboards
# -----------------------------
def vendor_top_products(db: Session, vendor_id: int) -> List[dict]:
    revenue, quantity = _revenue(), _quantity()
    rows = (_sold_lines(db, Product.id.label("product_id"), Product.name, Product.price, quantity, revenue)
            .filter(Vendor.id == vendor_id)
            .group_by(Product.id, Product.name, Product.price)
            .order_by(quantity.desc(), Product.id.asc())
            .all())
    images = first_images(db, [r.product_id for r in rows])
    return [
        {
            "product_id": r.product_id,
            "name": r.name,
            "price": r.price,
            "total_quantity": int(r.quantity),
            "total_revenue": round(float(r.revenue), 2),
            "image": images.get(r.product_id),
        }
        for r in rows
    ]


def vendor_sales(db: Session, vendor_id: int, date_from: date, date_to: date) -> List[dict]:
    start, end = day_window(date_from, date_to)
    rows = (_sold_lines(db, CartItem.id.label("item_id"), Order.id.label("order_id"),
                        Order.created_at.label("order_date"), Product.id.label("product_id"),
                        Product.name, CartItem.unit_price, CartItem.qty, CartItem.line_total,
                        start=start, end=end)
            .filter(Vendor.id == vendor_id)
            .order_by(Order.created_at.desc(), CartItem.id.desc())
            .all())
    return [
        {
            "item_id": r.item_id,
            "order_id": r.order_id,
            "order_date": r.order_date,
            "product_id": r.product_id,
            "product_name": r.name,
            "unit_price": r.unit_price,
            "qty": r.qty,
            "line_total": r.line_total,
        }
        for r in rows
    ]


def vendor_monthly_sales(db: Session, vendor_id: int, year: int) -> List[dict]:
    start, end = year_window(year)
    month = extract("month", Order.created_at).label("month")
    revenue, quantity = _revenue(), _quantity()
    rows = (_sold_lines(db, month, quantity, revenue, start=start, end=end)
            .filter(Vendor.id == vendor_id)
            .group_by(month)
            .all())
    by_month = {int(r.month): r for r in rows}

    # Fill missing months with zero sales
    result = []
    for m in range(1, 13):
        row = by_month.get(m)
        result.append({
            "month": m,
            "total_quantity": int(row.quantity) if row else 0,
            "total_revenue": round(float(row.revenue), 2) if row else 0.0,
        })
    return result


# -----------------------------
# Customer histories
# -----------------------------
def user_order_history(db: Session, user_id: int) -> List[dict]:
    rows = (db.query(Order.id.label("order_id"), Order.status.label("order_status"),
                     Order.created_at.label("order_date"), Order.updated_at.label("last_updated"),
                     Order.delivery_agent_id, CartItem.id.label("item_id"), CartItem.status.label("item_status"),
                     CartItem.qty, CartItem.unit_price, CartItem.line_total,
                     Product.id.label("product_id"), Product.name.label("product_name"),
                     Vendor.id.label("vendor_id"), Vendor.name.label("vendor_name"))
            .select_from(CartItem)
            .join(Order, Order.id == CartItem.order_id)
            .join(Product, Product.id == CartItem.product_id)
            .join(Vendor, Vendor.id == Product.vendor_id)
            .filter(Order.user_id == user_id, Order.status != OrderStatus.OPEN)
            .order_by(Order.created_at.desc(), Order.id.desc(), CartItem.id.asc())
            .all())
    images = first_images(db, [r.product_id for r in rows])
    history = []
    for r in rows:
        entry = dict(r._mapping)
        entry["image"] = images.get(r.product_id)
        history.append(entry)
    return history


def user_complaint_history(db: Session, user_id: int) -> List[dict]:
    rows = (db.query(Complaint, CartItem, Product)
            .join(CartItem, CartItem.id == Complaint.cart_item_id)
            .join(Product, Product.id == CartItem.product_id)
            .filter(Complaint.user_id == user_id)
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
            .all())
    images = first_images(db, [product.id for _, _, product in rows])
    return [
        {
            "id": complaint.id,
            "title": complaint.title,
            "content": complaint.content,
            "reply": complaint.reply,
            "status": complaint.status,
            "created_at": complaint.created_at,
            "updated_at": complaint.updated_at,
            "product": {"id": product.id, "name": product.name, "price": product.price,
                        "description": product.description},
            "purchase": {"item_id": item.id, "date": item.created_at, "quantity": item.qty},
            "total": item.line_total,
            "image": images.get(product.id),
        }
        for complaint, item, product in rows
    ]


def admin_complaints(db: Session) -> List[dict]:
    rows = (db.query(Complaint, User, CartItem, Product)
            .join(User, User.id == Complaint.user_id)
            .join(CartItem, CartItem.id == Complaint.cart_item_id)
            .join(Product, Product.id == CartItem.product_id)
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
            .all())
    return [
        {
            "id": complaint.id,
            "title": complaint.title,
            "content": complaint.content,
            "reply": complaint.reply,
            "status": complaint.status,
            "created_at": complaint.created_at,
            "user": {"id": user.id, "name": user.name, "email": user.email},
            "product": {"id": product.id, "name": product.name, "price": product.price},
            "item_id": item.id,
        }
        for complaint, user, item, product in rows
    ]


# -----------------------------
# Stock and product views
# -----------------------------
def stock_left(db: Session, vendor_id: int, product_id: int) -> dict:
    product = db.query(Product).filter(Product.id == product_id, Product.vendor_id == vendor_id).first()
    if not product:
        raise NotFound("Product not found for this vendor")

    total_stock = stock.ledger_totals(db, [product.id])[product.id]
    sold_qty = stock.sold_quantities(db, [product.id])[product.id]
    # Not clamped: a negative value means the product is oversold
    return {
        "product_id": product.id,
        "vendor_id": vendor_id,
        "total_stock": total_stock,
        "sold_qty": sold_qty,
        "stock_left": total_stock - sold_qty,
    }


def rating_summary(db: Session, product_id: int) -> Tuple[float, int]:
    avg, count = (db.query(func.avg(Review.rating), func.count(Review.id))
                  .filter(Review.product_id == product_id)
                  .one())
    return (round(float(avg), 1) if avg is not None else 0.0), int(count)


def complaint_counts(db: Session, product_id: int) -> dict:
    rows = (db.query(Complaint.status, func.count(Complaint.id))
            .join(CartItem, CartItem.id == Complaint.cart_item_id)
            .filter(CartItem.product_id == product_id)
            .group_by(Complaint.status)
            .all())
    counts = {s.value: 0 for s in ComplaintStatus}
    for status, count in rows:
        counts[status.value] = int(count)
    counts["total"] = sum(counts.values())
    return counts


def product_summary(db: Session, product_id: int) -> dict:
    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")

    avg_rating, review_count = rating_summary(db, product.id)
    purchases = (db.query(func.count(CartItem.id))
                 .join(Order, Order.id == CartItem.order_id)
                 .filter(CartItem.product_id == product.id, Order.status.in_(SOLD_STATUSES))
                 .scalar())
    category = db.get(Category, product.category_id) if product.category_id else None
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "details": product.details,
        "offer": product.offer,
        "price": product.price,
        "vendor_id": product.vendor_id,
        "vendor_name": product.vendor.name if product.vendor else None,
        "category": category.name if category else None,
        "image": first_images(db, [product.id]).get(product.id),
        "gallery": [g.photo for g in product.gallery],
        "stock": stock.derived_stock(db, product.id),
        "avg_rating": avg_rating,
        "review_count": review_count,
        "complaints": complaint_counts(db, product.id),
        "purchases": int(purchases or 0),
    }
