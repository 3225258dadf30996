# regionhub/services/complaints.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from regionhub.models.cart import CartItem
from regionhub.models.complaint import Complaint, ComplaintStatus
from regionhub.models.order import OrderStatus
from regionhub.models.users import User
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed, require_fields

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
CONTENT_MIN_LENGTH = 20
REPLY_STATUSES = (ComplaintStatus.RESOLVED, ComplaintStatus.REJECTED)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def validate_complaint(title: Optional[str], content: Optional[str]) -> dict:
    """Return every failing field at once, empty dict when the input is valid."""
    title, content = _clean(title), _clean(content)
    errors = require_fields(title=title, content=content)
    if "title" not in errors and len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title must be at most {TITLE_MAX_LENGTH} characters"
    if "content" not in errors and len(content) < CONTENT_MIN_LENGTH:
        errors["content"] = f"Content must be at least {CONTENT_MIN_LENGTH} characters"
    return errors


def file_complaint(db: Session, user: User, cart_item_id: int, title: str, content: str) -> Complaint:
    errors = validate_complaint(title, content)
    if errors:
        raise ValidationFailed("Invalid complaint", errors)

    item = db.get(CartItem, cart_item_id)
    if not item or item.user_id != user.id:
        raise NotFound("Cart item not found")
    if item.order.status == OrderStatus.OPEN:
        raise Conflict("Items still in the cart cannot be complained about")

    complaint = Complaint(
        user_id=user.id,
        cart_item_id=item.id,
        title=_clean(title),
        content=_clean(content),
        status=ComplaintStatus.PENDING,
    )
    db.add(complaint)
    db.commit()
    db.refresh(complaint)
    logger.info("Complaint %s filed by user %s on item %s", complaint.id, user.id, item.id)
    return complaint


def resolve_complaint(db: Session, complaint_id: int, reply: Optional[str], status: Optional[str]) -> Complaint:
    reply = _clean(reply)
    errors = require_fields(reply=reply, status=status)
    new_status = None
    if "status" not in errors:
        try:
            new_status = ComplaintStatus(str(status).lower())
        except ValueError:
            new_status = None
        if new_status not in REPLY_STATUSES:
            allowed = ", ".join(s.value for s in REPLY_STATUSES)
            errors["status"] = f"Status must be one of: {allowed}"
    if errors:
        raise ValidationFailed("Invalid complaint reply", errors)

    complaint = db.get(Complaint, complaint_id)
    if not complaint:
        raise NotFound("Complaint not found")

    complaint.reply = reply
    complaint.status = new_status
    db.commit()
    db.refresh(complaint)
    logger.info("Complaint %s marked %s", complaint.id, new_status.value)
    return complaint
