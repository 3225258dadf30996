# regionhub/models/order.py
import enum
from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, Index, text, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Order lifecycle states, in progression order
class OrderStatus(str, enum.Enum):
    OPEN = "open"
    CONFIRMED = "confirmed"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

# Statuses in which the order's quantities count as sold against stock
SOLD_STATUSES = (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED)
TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), index=True, nullable=False)
    delivery_agent_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=True)
    address_id = Column(Integer, ForeignKey("addresses.id"), nullable=True)

    # Materialized sum of the line totals, recomputed on every cart mutation
    total = Column(Float, nullable=False, default=0.0)
    status = Column(Enum(OrderStatus), default=OrderStatus.OPEN, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("CartItem", back_populates="order", order_by="CartItem.id",
                         cascade="all, delete-orphan")
    user = relationship("User", foreign_keys=[user_id])
    delivery_agent = relationship("User", foreign_keys=[delivery_agent_id])
    vendor = relationship("Vendor")
    address = relationship("Address")

    __table_args__ = (
        # One open cart per user. Enum columns persist member names.
        Index(
            "uq_orders_open_per_user", "user_id", unique=True,
            sqlite_where=text("status = 'OPEN'"),
            postgresql_where=text("status = 'OPEN'"),
        ),
    )
