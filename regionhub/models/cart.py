# regionhub/models/cart.py
import enum
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Float, Enum, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Line-item status; tracked separately from the parent order status
class CartItemStatus(str, enum.Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"


# Represents a single item (product + quantity) within an order
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False) # Parent order
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False) # Owner of the order
    qty = Column(Integer, CheckConstraint("qty >= 1"), nullable=False, default=1)
    unit_price = Column(Float, nullable=False) # Unit price at the moment of addition
    line_total = Column(Float, nullable=False) # unit_price * qty
    status = Column(Enum(CartItemStatus), default=CartItemStatus.PROCESSING, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        # Unique constraint to prevent duplicate product entries in the same order
        UniqueConstraint("order_id", "product_id", name="uq_cartitem_order_product"),
    )
