# regionhub/schemas/address.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

class AddressCreate(BaseModel):
    content: str = Field(min_length=1)

class AddressOut(BaseModel):
    id: int
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AddressUpdate(AddressCreate):
    pass
