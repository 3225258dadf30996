from datetime import date, datetime

import pytest

from conftest import make_product, make_user, make_vendor
from regionhub.models.review import Review
from regionhub.models.stock import StockEntry
from regionhub.services import cart, complaints, orders, reports
from regionhub.utils.errors import NotFound, ValidationFailed

WINDOW = (date(2026, 3, 1), date(2026, 3, 31))


def _paid_order(db, user, lines, created_at):
    for product, qty in lines:
        cart.add_item(db, user.id, product.id, qty)
    order = orders.confirm_order(db, user)
    order = orders.pay_order(db, user, order.id)
    order.created_at = created_at
    db.commit()
    return order


@pytest.fixture
def market(db):
    owners = [make_user(db, f"owner{i}@example.com", role="vendor") for i in range(2)]
    va = make_vendor(db, owners[0], name="Alpha", lat=10.0, lon=10.0)
    vb = make_vendor(db, owners[1], name="Beta", lat=11.0, lon=11.0)
    pa1 = make_product(db, va, "A1", price=10.0, qty=100, photos=["a1-first.jpg", "a1-second.jpg"])
    pa2 = make_product(db, va, "A2", price=20.0, qty=100)
    pb1 = make_product(db, vb, "B1", price=50.0, qty=100)
    buyer = make_user(db, "buyer@example.com")
    return {"va": va, "vb": vb, "pa1": pa1, "pa2": pa2, "pb1": pb1, "buyer": buyer}


def test_vendor_revenue_orders_ties_by_vendor_id(db, market):
    m = market
    # Alpha: 3 x 10 + 1 x 20 = 50, Beta: 1 x 50 = 50
    _paid_order(db, m["buyer"], [(m["pa1"], 3), (m["pa2"], 1)], datetime(2026, 3, 5, 12))
    _paid_order(db, m["buyer"], [(m["pb1"], 1)], datetime(2026, 3, 31, 23, 0))
    # Outside the window
    _paid_order(db, m["buyer"], [(m["pb1"], 4)], datetime(2026, 4, 1, 0, 30))
    # Confirmed but unpaid orders are not revenue
    cart.add_item(db, m["buyer"].id, m["pb1"].id, 7)
    orders.confirm_order(db, m["buyer"])

    rows = reports.vendor_revenue(db, *WINDOW)
    assert [r["vendor_id"] for r in rows] == [m["va"].id, m["vb"].id]
    assert [r["total_revenue"] for r in rows] == [50.0, 50.0]
    assert [p["product_id"] for p in rows[0]["products_sold"]] == [m["pa1"].id, m["pa2"].id]
    assert rows[0]["products_sold"][0]["quantity"] == 3
    assert rows[1]["total_quantity"] == 1

    assert reports.vendor_revenue(db, *WINDOW) == rows


def test_top_product_and_vendor(db, market):
    m = market
    _paid_order(db, m["buyer"], [(m["pa1"], 2), (m["pa2"], 2), (m["pb1"], 1)], datetime(2026, 3, 10))

    best = reports.top_product(db, *WINDOW)
    # Same quantity, higher revenue wins
    assert best["product_id"] == m["pa2"].id
    assert best["total_quantity"] == 2

    vendor = reports.top_vendor(db, *WINDOW)
    assert vendor["vendor_id"] == m["va"].id
    assert vendor["total_quantity"] == 4
    assert vendor["most_sold_product"]["product_id"] == m["pa2"].id

    assert reports.top_product(db, date(2025, 1, 1), date(2025, 1, 31)) is None


def test_window_must_be_ordered(db):
    with pytest.raises(ValidationFailed) as exc:
        reports.vendor_revenue(db, date(2026, 3, 2), date(2026, 3, 1))
    assert "date_from" in exc.value.errors


def test_vendor_dashboard(db, market):
    m = market
    _paid_order(db, m["buyer"], [(m["pa1"], 1), (m["pa2"], 3)], datetime(2026, 2, 14))
    _paid_order(db, m["buyer"], [(m["pa1"], 1)], datetime(2026, 3, 2))

    top = reports.vendor_top_products(db, m["va"].id)
    assert [(t["product_id"], t["total_quantity"]) for t in top] == [(m["pa2"].id, 3), (m["pa1"].id, 2)]
    assert top[1]["image"] == "a1-first.jpg"

    sales = reports.vendor_sales(db, m["va"].id, date(2026, 1, 1), date(2026, 12, 31))
    assert [s["order_date"].month for s in sales] == [3, 2, 2]

    months = reports.vendor_monthly_sales(db, m["va"].id, 2026)
    assert len(months) == 12
    assert months[1] == {"month": 2, "total_quantity": 4, "total_revenue": 70.0}
    assert months[2]["total_revenue"] == 10.0
    assert months[0]["total_quantity"] == 0


def test_stock_left_is_scoped_to_vendor(db, market):
    m = market
    _paid_order(db, m["buyer"], [(m["pa1"], 30)], datetime(2026, 3, 3))

    left = reports.stock_left(db, m["va"].id, m["pa1"].id)
    assert left == {"product_id": m["pa1"].id, "vendor_id": m["va"].id,
                    "total_stock": 100, "sold_qty": 30, "stock_left": 70}
    with pytest.raises(NotFound):
        reports.stock_left(db, m["vb"].id, m["pa1"].id)


def test_stock_left_goes_negative_when_oversold(db, market):
    m = market
    _paid_order(db, m["buyer"], [(m["pa1"], 30)], datetime(2026, 3, 3))
    # A correction written straight to the ledger, past the service guard
    db.add(StockEntry(product_id=m["pa1"].id, qty=-80, note="Write-off"))
    db.commit()

    left = reports.stock_left(db, m["va"].id, m["pa1"].id)
    assert left["total_stock"] == 20
    assert left["sold_qty"] == 30
    assert left["stock_left"] == -10


def test_customer_histories_and_product_summary(db, market):
    m = market
    first = _paid_order(db, m["buyer"], [(m["pa1"], 1)], datetime(2026, 3, 1))
    second = _paid_order(db, m["buyer"], [(m["pa1"], 2), (m["pb1"], 1)], datetime(2026, 3, 9))
    cart.add_item(db, m["buyer"].id, m["pa2"].id, 1)

    history = reports.user_order_history(db, m["buyer"].id)
    assert [h["order_id"] for h in history] == [second.id, second.id, first.id]
    assert history[0]["image"] == "a1-first.jpg"

    item_id = history[-1]["item_id"]
    complaints.file_complaint(db, m["buyer"], item_id, "Bruised", "The fruit arrived badly bruised.")
    filed = reports.user_complaint_history(db, m["buyer"].id)
    assert filed[0]["purchase"]["item_id"] == item_id
    assert filed[0]["product"]["id"] == m["pa1"].id

    for i, rating in enumerate((4, 5, 5)):
        reviewer = make_user(db, f"reviewer{i}@example.com")
        db.add(Review(user_id=reviewer.id, product_id=m["pa1"].id, rating=rating, content="ok"))
    db.commit()

    summary = reports.product_summary(db, m["pa1"].id)
    assert summary["avg_rating"] == 4.7
    assert summary["review_count"] == 3
    assert summary["complaints"] == {"pending": 1, "resolved": 0, "rejected": 0, "total": 1}
    assert summary["purchases"] == 2
    assert summary["stock"] == 97
    assert summary["image"] == "a1-first.jpg"

    empty = reports.product_summary(db, m["pa2"].id)
    assert empty["avg_rating"] == 0.0
    assert empty["purchases"] == 0
