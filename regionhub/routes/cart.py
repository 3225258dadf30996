# regionhub/routes/cart.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.order import Order
from regionhub.models.users import User
from regionhub.schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from regionhub.services import cart as cart_service
from regionhub.services.reports import first_images
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.tokenJWT import role_required

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_to_out(db: Session, order: Optional[Order]) -> CartOut:
    # No open order means an empty cart
    if order is None:
        return CartOut(items=[], total=0.0)

    images = first_images(db, [it.product_id for it in order.items])
    items_out = [
        CartItemOut(
            id=it.id,
            product_id=it.product_id,
            name=it.product.name if it.product else "",
            qty=it.qty,
            unit_price=it.unit_price,
            line_total=it.line_total,
            status=it.status.value,
            image=images.get(it.product_id),
        )
        for it in order.items
    ]
    return CartOut(order_id=order.id, vendor_id=order.vendor_id, items=items_out,
                   total=order.total, updated_at=order.updated_at)


@router.get("", response_model=CartOut)
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(role_required("customer"))):
    return _cart_to_out(db, cart_service.get_cart(db, current_user.id))


@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    order, item = cart_service.add_item(db, current_user.id, payload.product_id, payload.qty)

    write_log(db, user_id=current_user.id, action="CART_ADD", resource="cart", resource_id=order.id,
              ip=client_ip(request), meta={"product_id": payload.product_id, "qty": payload.qty,
                                          "item_id": item.id, "total": order.total})
    return _cart_to_out(db, order)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    order = cart_service.update_qty(db, current_user.id, item_id, payload.qty)

    write_log(db, user_id=current_user.id, action="CART_UPDATE", resource="cart", resource_id=order.id,
              ip=client_ip(request), meta={"item_id": item_id, "qty": payload.qty, "total": order.total})
    return _cart_to_out(db, order)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    order = cart_service.remove_item(db, current_user.id, item_id)

    write_log(db, user_id=current_user.id, action="CART_REMOVE", resource="cart",
              resource_id=order.id if order else None, ip=client_ip(request),
              meta={"item_id": item_id, "order_deleted": order is None})
    return _cart_to_out(db, order)
