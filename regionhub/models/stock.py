# regionhub/models/stock.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Append-only stock ledger row. Never updated or deleted.
class StockEntry(Base):
    __tablename__ = "stock_entries"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)

    # Signed quantity delta
    qty = Column(Integer, nullable=False)

    stock_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    note = Column(String, nullable=True)

    product = relationship("Product")
