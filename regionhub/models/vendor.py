# regionhub/models/vendor.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from regionhub.database import Base

# Approval state gating vendor visibility in the catalog
class VendorStatus(str, enum.Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"

# A shop selling products; coordinates drive distance ranking
class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False) # Owner account
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False)
    address = Column(String, nullable=True)
    pincode = Column(String, nullable=True)

    # Nullable: vendors without coordinates never appear in nearby searches
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    photo = Column(String, nullable=True)
    proof = Column(String, nullable=True) # Stored filename of the proof document
    status = Column(Enum(VendorStatus), default=VendorStatus.REQUESTED, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
    products = relationship("Product", back_populates="vendor")
