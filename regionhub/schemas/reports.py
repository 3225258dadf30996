# regionhub/schemas/reports.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from regionhub.models.cart import CartItemStatus
from regionhub.models.complaint import ComplaintStatus
from regionhub.models.order import OrderStatus

# Admin revenue per vendor with a per-product breakdown
class ProductSold(BaseModel):
    product_id: int
    name: str
    price: float
    quantity: int
    total: float

class VendorRevenueItem(BaseModel):
    vendor_id: int
    vendor_name: str
    vendor_email: Optional[str] = None
    vendor_address: Optional[str] = None
    vendor_lat: Optional[float] = None
    vendor_lon: Optional[float] = None
    total_revenue: float
    total_quantity: int
    products_sold: List[ProductSold]

# Best sellers in a window
class TopProduct(BaseModel):
    product_id: int
    product_name: str
    product_price: float
    vendor_id: int
    vendor_name: str
    vendor_address: Optional[str] = None
    vendor_lat: Optional[float] = None
    vendor_lon: Optional[float] = None
    total_quantity: int
    total_revenue: float

class MostSoldProduct(BaseModel):
    product_id: int
    name: str
    quantity: int
    total: float

class TopVendor(BaseModel):
    vendor_id: int
    vendor_name: str
    vendor_address: Optional[str] = None
    vendor_lat: Optional[float] = None
    vendor_lon: Optional[float] = None
    total_quantity: int
    total_revenue: float
    most_sold_product: MostSoldProduct

# Vendor dashboard
class VendorTopProduct(BaseModel):
    product_id: int
    name: str
    price: float
    total_quantity: int
    total_revenue: float
    image: Optional[str] = None

class VendorSaleLine(BaseModel):
    item_id: int
    order_id: int
    order_date: datetime
    product_id: int
    product_name: str
    unit_price: float
    qty: int
    line_total: float

class MonthlySales(BaseModel):
    month: int
    total_quantity: int
    total_revenue: float

# Customer history
class OrderHistoryLine(BaseModel):
    order_id: int
    order_status: OrderStatus
    order_date: datetime
    last_updated: Optional[datetime] = None
    delivery_agent_id: Optional[int] = None
    item_id: int
    item_status: CartItemStatus
    qty: int
    unit_price: float
    line_total: float
    product_id: int
    product_name: str
    vendor_id: int
    vendor_name: str
    image: Optional[str] = None

class ComplaintProduct(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = None

class ComplaintPurchase(BaseModel):
    item_id: int
    date: Optional[datetime] = None
    quantity: int

class ComplaintHistoryItem(BaseModel):
    id: int
    title: str
    content: str
    reply: Optional[str] = None
    status: ComplaintStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    product: ComplaintProduct
    purchase: ComplaintPurchase
    total: float
    image: Optional[str] = None

class ComplaintUser(BaseModel):
    id: int
    name: Optional[str] = None
    email: str

class AdminComplaintProduct(BaseModel):
    id: int
    name: str
    price: float

class AdminComplaintItem(BaseModel):
    id: int
    title: str
    content: str
    reply: Optional[str] = None
    status: ComplaintStatus
    created_at: Optional[datetime] = None
    user: ComplaintUser
    product: AdminComplaintProduct
    item_id: int
