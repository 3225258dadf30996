# regionhub/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)

class CategoryOut(ORMBase):
    id: int
    name: str


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    details: Optional[str] = None
    offer: Optional[str] = None
    price: float = Field(ge=0)
    category_id: Optional[int] = None


class ProductCreate(ProductBase):
    pass


# Schema for partial product updates
class ProductEditRequest(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    details: Optional[str] = None
    offer: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = None


class ProductOut(ProductBase):
    id: int
    vendor_id: int
    created_at: Optional[datetime] = None


class GalleryOut(ORMBase):
    id: int
    product_id: int
    photo: str
    created_at: Optional[datetime] = None


class ComplaintCounts(BaseModel):
    pending: int = 0
    resolved: int = 0
    rejected: int = 0
    total: int = 0


# Product page: catalog data plus derived stock, ratings and complaints
class ProductSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    details: Optional[str] = None
    offer: Optional[str] = None
    price: float
    vendor_id: int
    vendor_name: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    gallery: List[str] = []
    stock: int
    avg_rating: float
    review_count: int
    complaints: ComplaintCounts
    purchases: int


class NearbyProduct(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    offer: Optional[str] = None
    price: float
    category: Optional[str] = None
    vendor_id: int
    vendor_name: str
    vendor_address: Optional[str] = None
    distance_km: float
    image: Optional[str] = None
