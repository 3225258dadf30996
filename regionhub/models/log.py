# regionhub/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Audit trail: one row per mutating request (cart, orders, complaints, ...)
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Acting account; empty for anonymous calls such as a failed login
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # e.g. action=ORDER_PAY, resource=orders, resource_id=12
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    resource_id = Column(Integer, nullable=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # Free-form request context (quantities, error kinds, ...)
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)
