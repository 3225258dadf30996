# regionhub/schemas/complaint.py
from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from regionhub.models.complaint import ComplaintStatus

# Lengths are checked by the complaint service so all failures come back together
class ComplaintCreate(BaseModel):
    cart_item_id: int
    title: Optional[str] = None
    content: Optional[str] = None

class ComplaintReply(BaseModel):
    reply: Optional[str] = None
    status: Optional[str] = None

class ComplaintOut(BaseModel):
    id: int
    user_id: int
    cart_item_id: int
    title: str
    content: str
    reply: Optional[str] = None
    status: ComplaintStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
