# regionhub/models/complaint.py
import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

class ComplaintStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"

# Ticket filed by a customer against one purchased cart line
class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    cart_item_id = Column(Integer, ForeignKey("cart_items.id"), index=True, nullable=False)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    reply = Column(Text, nullable=True)
    status = Column(Enum(ComplaintStatus), default=ComplaintStatus.PENDING, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    cart_item = relationship("CartItem")
