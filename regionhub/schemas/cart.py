# regionhub/schemas/cart.py
from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    qty: int = 1

# Request schema for updating cart item quantity
class CartUpdateItem(BaseModel):
    qty: int

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    name: str
    qty: int
    unit_price: float
    line_total: float
    status: str
    image: Optional[str] = None

# Response schema for the entire cart summary
class CartOut(BaseModel):
    order_id: Optional[int] = None
    vendor_id: Optional[int] = None
    items: List[CartItemOut]
    total: float
    updated_at: Optional[datetime] = None
