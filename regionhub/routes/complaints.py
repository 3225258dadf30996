# regionhub/routes/complaints.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.users import User
from regionhub.schemas.complaint import ComplaintCreate, ComplaintOut, ComplaintReply
from regionhub.schemas.reports import AdminComplaintItem, ComplaintHistoryItem
from regionhub.services import complaints as complaint_service
from regionhub.services import reports
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import ValidationFailed
from regionhub.utils.tokenJWT import role_required

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintOut, status_code=status.HTTP_201_CREATED)
def file_complaint(
    payload: ComplaintCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    try:
        complaint = complaint_service.file_complaint(db, current_user, payload.cart_item_id,
                                                     payload.title, payload.content)
    except ValidationFailed as e:
        write_log(db, user_id=current_user.id, action="COMPLAINT_CREATE", resource="complaints",
                  status="FAIL", ip=client_ip(request), meta={"errors": e.errors})
        raise

    write_log(db, user_id=current_user.id, action="COMPLAINT_CREATE", resource="complaints",
              resource_id=complaint.id, ip=client_ip(request), meta={"cart_item_id": complaint.cart_item_id})
    return complaint


@router.get("/mine", response_model=List[ComplaintHistoryItem])
def my_complaints(db: Session = Depends(get_db), current_user: User = Depends(role_required("customer"))):
    return reports.user_complaint_history(db, current_user.id)


@router.get("", response_model=List[AdminComplaintItem])
def all_complaints(db: Session = Depends(get_db), current_user: User = Depends(role_required("admin"))):
    return reports.admin_complaints(db)


@router.post("/{complaint_id}/reply", response_model=ComplaintOut)
def reply_complaint(
    complaint_id: int,
    payload: ComplaintReply,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    complaint = complaint_service.resolve_complaint(db, complaint_id, payload.reply, payload.status)

    write_log(db, user_id=current_user.id, action="COMPLAINT_REPLY", resource="complaints",
              resource_id=complaint.id, ip=client_ip(request), meta={"status": complaint.status.value})
    return complaint
