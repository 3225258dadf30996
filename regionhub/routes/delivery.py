# regionhub/routes/delivery.py
import logging
from typing import Optional, List

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.delivery import AgentStatus, DeliveryAgent
from regionhub.models.users import User
from regionhub.routes.orders import notify_customer, order_to_out
from regionhub.schemas.delivery import DeliveryAgentOut
from regionhub.schemas.order import OrderResponse
from regionhub.services import orders as order_service
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound
from regionhub.utils.storage import save_upload
from regionhub.utils.tokenJWT import role_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["Delivery"])

delivery_agent = role_required("delivery")


class ShippedItemOut(BaseModel):
    id: int
    order_id: int
    status: str


# Ask to be vetted; the proof document is mandatory, the photo optional
@router.post("/request", response_model=DeliveryAgentOut, status_code=status.HTTP_201_CREATED)
def request_activation(
    request: Request,
    proof: UploadFile = File(...),
    photo: Optional[UploadFile] = File(None),
    phone: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(delivery_agent),
):
    if db.query(DeliveryAgent).filter(DeliveryAgent.user_id == current_user.id).first():
        raise Conflict("Delivery request already submitted")

    profile = DeliveryAgent(
        user_id=current_user.id,
        phone=phone or current_user.phone,
        proof=save_upload(proof, field="proof"),
        status=AgentStatus.INACTIVE,
    )
    if photo is not None and photo.filename:
        profile.photo = save_upload(photo, field="photo")

    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Delivery request %s from user %s", profile.id, current_user.id)

    write_log(db, user_id=current_user.id, action="AGENT_REQUEST", resource="delivery_agents",
              resource_id=profile.id, ip=client_ip(request))
    return profile


@router.get("/me", response_model=DeliveryAgentOut)
def my_profile(db: Session = Depends(get_db), current_user: User = Depends(delivery_agent)):
    profile = db.query(DeliveryAgent).filter(DeliveryAgent.user_id == current_user.id).first()
    if not profile:
        raise NotFound("Delivery request not found")
    return profile


# Paid orders nobody has picked up yet
@router.get("/available", response_model=List[OrderResponse])
def available_orders(db: Session = Depends(get_db), current_user: User = Depends(delivery_agent)):
    return [order_to_out(o) for o in order_service.available_orders(db)]


@router.get("/mine", response_model=List[OrderResponse])
def my_deliveries(db: Session = Depends(get_db), current_user: User = Depends(delivery_agent)):
    return [order_to_out(o) for o in order_service.agent_orders(db, current_user.id)]


@router.post("/orders/{order_id}/accept", response_model=OrderResponse)
def accept_order(
    order_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(delivery_agent),
):
    order = order_service.accept_order(db, current_user, order_id)

    write_log(db, user_id=current_user.id, action="ORDER_ACCEPT", resource="orders", resource_id=order.id,
              ip=client_ip(request))
    notify_customer(background_tasks, order)
    return order_to_out(order)


@router.post("/items/{item_id}/shipped", response_model=ShippedItemOut)
def ship_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(delivery_agent),
):
    item = order_service.mark_item_shipped(db, current_user, item_id)

    write_log(db, user_id=current_user.id, action="ITEM_SHIPPED", resource="cart_items", resource_id=item.id,
              ip=client_ip(request), meta={"order_id": item.order_id})
    return {"id": item.id, "order_id": item.order_id, "status": item.status.value}


@router.post("/orders/{order_id}/deliver", response_model=OrderResponse)
def deliver_order(
    order_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(delivery_agent),
):
    order = order_service.deliver_order(db, current_user, order_id)

    write_log(db, user_id=current_user.id, action="ORDER_DELIVER", resource="orders", resource_id=order.id,
              ip=client_ip(request))
    notify_customer(background_tasks, order)
    return order_to_out(order)
