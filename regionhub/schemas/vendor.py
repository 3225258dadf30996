# regionhub/schemas/vendor.py
from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional

from regionhub.models.vendor import VendorStatus

# Multipart fields of a vendor request come in as Form(...) values;
# this schema describes the stored profile returned to clients
class VendorOut(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    address: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo: Optional[str] = None
    proof: Optional[str] = None
    status: VendorStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class VendorUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    pincode: Optional[str] = None

# Raw values; range checks happen in the catalog service so that every
# failing field is reported together
class VendorCoordinates(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None
