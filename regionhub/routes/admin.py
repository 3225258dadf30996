# regionhub/routes/admin.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.delivery import AgentStatus, DeliveryAgent
from regionhub.models.users import ROLES, User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.schemas.delivery import DeliveryAgentOut
from regionhub.schemas.user import UserResponse
from regionhub.schemas.vendor import VendorOut
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.notify import agent_activated_message, notifier, vendor_accepted_message
from regionhub.utils.tokenJWT import role_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

# Schema for paginated user list response
class PaginatedUsersResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int

class RoleUpdate(BaseModel):
    role: str


# Retrieve a list of users with filtering, sorting, and pagination
@router.get("/users", response_model=PaginatedUsersResponse)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by email or name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "name"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.email.ilike(like) | User.name.ilike(like))
    if role:
        query = query.filter(User.role.ilike(role))

    sort_map = {"id": User.id, "email": User.email, "role": User.role, "name": User.name}
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), User.id.asc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": users, "total": total, "page": page, "page_size": page_size}


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    new_role = payload.role.strip().lower()
    if new_role not in ROLES:
        raise ValidationFailed("Invalid role", {"role": f"Role must be one of: {', '.join(ROLES)}"})

    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    user.role = new_role
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_ROLE", resource="users", resource_id=user.id,
              ip=client_ip(request), meta={"role": new_role})
    return {"message": f"User {user.email} role updated to {user.role}", "id": user.id, "role": user.role}


# Approve a vendor request; the vendor becomes visible in the catalog
@router.post("/vendors/{vendor_id}/accept", response_model=VendorOut)
def accept_vendor(
    vendor_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    vendor = db.get(Vendor, vendor_id)
    if not vendor:
        raise NotFound("Vendor not found")
    if vendor.status == VendorStatus.ACCEPTED:
        raise Conflict("Vendor is already accepted")

    vendor.status = VendorStatus.ACCEPTED
    db.commit()
    db.refresh(vendor)
    logger.info("Vendor %s accepted by admin %s", vendor.id, current_user.id)

    write_log(db, user_id=current_user.id, action="VENDOR_ACCEPT", resource="vendors",
              resource_id=vendor.id, ip=client_ip(request))

    subject, body = vendor_accepted_message(vendor.name)
    background_tasks.add_task(notifier.send, vendor.email, subject, body)
    return vendor


@router.get("/delivery-agents", response_model=List[DeliveryAgentOut])
def list_delivery_agents(
    status_filter: Optional[AgentStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    query = db.query(DeliveryAgent)
    if status_filter is not None:
        query = query.filter(DeliveryAgent.status == status_filter)
    return query.order_by(DeliveryAgent.created_at.desc(), DeliveryAgent.id.desc()).all()


# Activate a vetted delivery agent; only active agents may accept orders
@router.post("/delivery-agents/{agent_id}/accept", response_model=DeliveryAgentOut)
def accept_delivery_agent(
    agent_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    profile = db.get(DeliveryAgent, agent_id)
    if not profile:
        raise NotFound("Delivery agent not found")
    if profile.status == AgentStatus.ACTIVE:
        raise Conflict("Delivery agent is already active")

    profile.status = AgentStatus.ACTIVE
    db.commit()
    db.refresh(profile)
    logger.info("Delivery agent %s activated by admin %s", profile.id, current_user.id)

    write_log(db, user_id=current_user.id, action="AGENT_ACCEPT", resource="delivery_agents",
              resource_id=profile.id, ip=client_ip(request))

    subject, body = agent_activated_message(profile.user.name or profile.user.email)
    background_tasks.add_task(notifier.send, profile.user.email, subject, body)
    return profile
