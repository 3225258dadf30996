import pytest

from conftest import make_product, make_user
from regionhub.models.complaint import ComplaintStatus
from regionhub.services import cart, complaints, orders
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed


@pytest.fixture
def bought_item(db, customer, vendor):
    p = make_product(db, vendor, "P", price=10.0, qty=5)
    _, item = cart.add_item(db, customer.id, p.id, 1)
    orders.confirm_order(db, customer)
    return item


def test_content_length_boundary(db, customer, bought_item):
    with pytest.raises(ValidationFailed) as exc:
        complaints.file_complaint(db, customer, bought_item.id, "Broken", "x" * 19)
    assert list(exc.value.errors) == ["content"]

    complaint = complaints.file_complaint(db, customer, bought_item.id, "Broken", "x" * 20)
    assert complaint.status == ComplaintStatus.PENDING
    assert complaint.reply is None


def test_all_invalid_fields_reported_together(db, customer, bought_item):
    with pytest.raises(ValidationFailed) as exc:
        complaints.file_complaint(db, customer, bought_item.id, "t" * 101, "   short   ")
    assert set(exc.value.errors) == {"title", "content"}

    with pytest.raises(ValidationFailed) as exc:
        complaints.file_complaint(db, customer, bought_item.id, "  ", None)
    assert exc.value.errors == {"title": "Title is required", "content": "Content is required"}


def test_only_own_purchased_lines(db, customer, vendor, bought_item):
    stranger = make_user(db, "stranger@example.com")
    with pytest.raises(NotFound):
        complaints.file_complaint(db, stranger, bought_item.id, "Broken", "x" * 25)

    p = make_product(db, vendor, "Q", price=1.0)
    _, in_cart = cart.add_item(db, customer.id, p.id, 1)
    with pytest.raises(Conflict):
        complaints.file_complaint(db, customer, in_cart.id, "Broken", "x" * 25)


def test_resolve_complaint(db, customer, bought_item):
    complaint = complaints.file_complaint(db, customer, bought_item.id, "Broken", "x" * 30)

    with pytest.raises(ValidationFailed) as exc:
        complaints.resolve_complaint(db, complaint.id, "", None)
    assert set(exc.value.errors) == {"reply", "status"}

    with pytest.raises(ValidationFailed) as exc:
        complaints.resolve_complaint(db, complaint.id, "Sorry", "pending")
    assert list(exc.value.errors) == ["status"]

    with pytest.raises(NotFound):
        complaints.resolve_complaint(db, 999, "Sorry", "resolved")

    resolved = complaints.resolve_complaint(db, complaint.id, "Refund issued", "RESOLVED")
    assert resolved.status == ComplaintStatus.RESOLVED
    assert resolved.reply == "Refund issued"
