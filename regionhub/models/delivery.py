# regionhub/models/delivery.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Delivery agents stay inactive until an admin has checked their proof
class AgentStatus(str, enum.Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"

# Vetting record of a delivery account
class DeliveryAgent(Base):
    __tablename__ = "delivery_agents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    phone = Column(String, nullable=True)
    photo = Column(String, nullable=True)
    proof = Column(String, nullable=False) # Stored filename of the identity document
    status = Column(Enum(AgentStatus), default=AgentStatus.INACTIVE, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
