# regionhub/schemas/order.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    qty: int
    unit_price: float
    line_total: float
    status: str


# Optional delivery address chosen when the cart is confirmed
class OrderConfirmPayload(BaseModel):
    address_id: Optional[int] = None


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    user_id: int
    vendor_id: int
    delivery_agent_id: Optional[int] = None
    address: Optional[str] = None
    status: str
    total: float
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]
