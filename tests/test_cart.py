import threading

import pytest

from conftest import line_totals, make_product, make_user, make_vendor, order_count
from regionhub.models.cart import CartItem
from regionhub.models.order import Order, OrderStatus
from regionhub.models.vendor import VendorStatus
from regionhub.services import cart, orders
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed


def test_cart_scenario_keeps_total_in_sync(db, customer, vendor):
    p = make_product(db, vendor, "P", price=100.0, qty=10)
    q = make_product(db, vendor, "Q", price=50.0, qty=10)

    order, p_line = cart.add_item(db, customer.id, p.id, 2)
    assert order.total == 200.0
    assert order.status == OrderStatus.OPEN
    assert order.vendor_id == vendor.id

    order, q_line = cart.add_item(db, customer.id, q.id, 1)
    assert order.total == 250.0
    assert line_totals(db, order.id) == 250.0

    order = cart.remove_item(db, customer.id, p_line.id)
    assert order.total == 50.0

    assert cart.remove_item(db, customer.id, q_line.id) is None
    assert order_count(db, customer.id) == 0
    assert cart.get_cart(db, customer.id) is None


def test_adding_same_product_merges_line_at_captured_price(db, customer, vendor):
    p = make_product(db, vendor, "P", price=20.0)

    order, first = cart.add_item(db, customer.id, p.id, 1)
    p.price = 35.0
    db.commit()
    order, second = cart.add_item(db, customer.id, p.id, 2)

    assert first.id == second.id
    assert second.qty == 3
    assert second.unit_price == 20.0
    assert second.line_total == 60.0
    assert order.total == 60.0
    assert len(order.items) == 1


def test_total_matches_lines_over_many_mutations(db, customer, vendor):
    products = [make_product(db, vendor, f"P{i}", price=1.25 * (i + 1)) for i in range(4)]
    order = None
    for i, qty in enumerate([3, 1, 4, 1, 5, 9, 2, 6]):
        order, _ = cart.add_item(db, customer.id, products[i % 4].id, qty)
        assert order.total == pytest.approx(line_totals(db, order.id))


def test_update_qty_uses_insertion_price_and_updates_total(db, customer, vendor):
    p = make_product(db, vendor, "P", price=10.0)
    q = make_product(db, vendor, "Q", price=5.0)
    cart.add_item(db, customer.id, p.id, 1)
    order, q_line = cart.add_item(db, customer.id, q.id, 1)

    q.price = 99.0
    db.commit()
    order = cart.update_qty(db, customer.id, q_line.id, 4)

    db.refresh(q_line)
    assert q_line.line_total == 20.0
    assert order.total == 30.0


def test_invalid_quantities_are_rejected(db, customer, vendor):
    p = make_product(db, vendor, "P", price=10.0)
    for bad in (0, -1, None, 1.5):
        with pytest.raises(ValidationFailed) as exc:
            cart.add_item(db, customer.id, p.id, bad)
        assert "qty" in exc.value.errors
    assert order_count(db, customer.id) == 0


def test_unknown_product_and_foreign_item(db, customer, vendor):
    with pytest.raises(NotFound):
        cart.add_item(db, customer.id, 9999, 1)

    p = make_product(db, vendor, "P", price=10.0)
    _, line = cart.add_item(db, customer.id, p.id, 1)
    other = make_user(db, "bob@example.com")
    with pytest.raises(NotFound):
        cart.update_qty(db, other.id, line.id, 2)
    with pytest.raises(NotFound):
        cart.remove_item(db, other.id, line.id)


def test_confirmed_order_is_no_longer_a_cart(db, customer, vendor):
    p = make_product(db, vendor, "P", price=10.0)
    _, line = cart.add_item(db, customer.id, p.id, 1)
    orders.confirm_order(db, customer)

    with pytest.raises(Conflict):
        cart.update_qty(db, customer.id, line.id, 3)

    # A new add starts a fresh open order
    order, _ = cart.add_item(db, customer.id, p.id, 2)
    assert order.status == OrderStatus.OPEN
    assert order.id != line.order_id
    assert order_count(db, customer.id) == 2


def test_products_of_unapproved_vendors_cannot_be_added(db, customer):
    owner = make_user(db, "pending@example.com", role="vendor")
    pending = make_vendor(db, owner, name="Pending", status=VendorStatus.REQUESTED)
    p = make_product(db, pending, "P", price=10.0, qty=5)

    with pytest.raises(NotFound):
        cart.add_item(db, customer.id, p.id, 1)
    assert order_count(db, customer.id) == 0


def test_concurrent_adds_share_one_open_order(session_factory, db, customer, vendor):
    p = make_product(db, vendor, "P", price=10.0, qty=20)
    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def add():
        session = session_factory()
        try:
            barrier.wait()
            cart.add_item(session, customer.id, p.id, 1)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=add) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    db.expire_all()
    open_orders = db.query(Order).filter(Order.user_id == customer.id, Order.status == OrderStatus.OPEN).all()
    assert len(open_orders) == 1
    order = open_orders[0]
    assert order.total == line_totals(db, order.id) == 80.0
    lines = db.query(CartItem).filter(CartItem.order_id == order.id).all()
    assert [line.qty for line in lines] == [workers]
