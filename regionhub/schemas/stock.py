# regionhub/schemas/stock.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


# Ledger entry to append; negative quantities record removals
class StockEntryCreate(BaseModel):
    qty: int
    note: Optional[str] = Field(None, max_length=255)
    stock_date: Optional[datetime] = None


class StockEntryOut(BaseModel):
    id: int
    product_id: int
    qty: int
    stock_date: datetime
    created_by: Optional[int] = None
    note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StockLeft(BaseModel):
    product_id: int
    vendor_id: int
    total_stock: int
    sold_qty: int
    stock_left: int
