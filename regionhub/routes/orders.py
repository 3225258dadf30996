# regionhub/routes/orders.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.order import Order
from regionhub.models.users import User
from regionhub.schemas.order import OrderConfirmPayload, OrderResponse
from regionhub.services import orders as order_service
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import ServiceError
from regionhub.utils.notify import notifier, order_status_message
from regionhub.utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/orders", tags=["Orders"])


def order_to_out(order: Order) -> dict:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "vendor_id": order.vendor_id,
        "delivery_agent_id": order.delivery_agent_id,
        "address": order.address.content if order.address else None,
        "status": order.status.value,
        "total": order.total,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "id": it.id,
                "product_id": it.product_id,
                "product_name": it.product.name if it.product else "",
                "qty": it.qty,
                "unit_price": it.unit_price,
                "line_total": it.line_total,
                "status": it.status.value,
            }
            for it in order.items
        ],
    }


def notify_customer(background_tasks: BackgroundTasks, order: Order):
    # Sent after the response; delivery failures only end up in the log
    subject, body = order_status_message(order.id, order.status.value)
    background_tasks.add_task(notifier.send, order.user.email, subject, body)


@router.get("", response_model=List[OrderResponse])
def my_orders(db: Session = Depends(get_db), current_user: User = Depends(role_required("customer"))):
    return [order_to_out(o) for o in order_service.list_user_orders(db, current_user.id)]


# Turn the open cart into a confirmed order
@router.post("/confirm", response_model=OrderResponse)
def confirm_order(
    request: Request,
    payload: OrderConfirmPayload = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    address_id = payload.address_id if payload else None
    order = order_service.confirm_order(db, current_user, address_id=address_id)

    write_log(db, user_id=current_user.id, action="ORDER_CONFIRM", resource="orders", resource_id=order.id,
              ip=client_ip(request), meta={"total": order.total, "items": len(order.items)})
    return order_to_out(order)


@router.post("/{order_id}/pay", response_model=OrderResponse)
def pay_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    try:
        order = order_service.pay_order(db, current_user, order_id)
    except ServiceError as e:
        write_log(db, user_id=current_user.id, action="ORDER_PAY", resource="orders", resource_id=order_id,
                  status="FAIL", ip=client_ip(request), meta={"kind": e.kind, "errors": e.errors})
        raise

    write_log(db, user_id=current_user.id, action="ORDER_PAY", resource="orders", resource_id=order.id,
              ip=client_ip(request), meta={"total": order.total})
    return order_to_out(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.cancel_order(db, current_user, order_id)

    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders", resource_id=order.id,
              ip=client_ip(request))
    if order.user_id != current_user.id:
        notify_customer(background_tasks, order)
    return order_to_out(order)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return order_to_out(order_service.get_order(db, current_user, order_id))
