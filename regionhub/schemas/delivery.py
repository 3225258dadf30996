# regionhub/schemas/delivery.py
from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from regionhub.models.delivery import AgentStatus

# Vetting record returned to the agent and to admins
class DeliveryAgentOut(BaseModel):
    id: int
    user_id: int
    phone: Optional[str] = None
    photo: Optional[str] = None
    proof: str
    status: AgentStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
