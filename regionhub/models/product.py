# regionhub/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from regionhub.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)


# Model Product
# A catalog item owned by exactly one vendor. On-hand quantity is not
# stored here; it is derived from the stock ledger and sold cart lines.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), index=True, nullable=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)
    details = Column(String)
    offer = Column(String)

    # Current catalog price; carts capture it at insertion time
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vendor = relationship("Vendor", back_populates="products")
    category = relationship("Category")
    gallery = relationship("Gallery", back_populates="product", order_by="Gallery.id",
                           cascade="all, delete-orphan")


# Product photo; the lowest id is the product's cover image
class Gallery(Base):
    __tablename__ = "galleries"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    photo = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="gallery")
