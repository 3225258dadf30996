# regionhub/routes/vendors.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.users import User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.schemas.vendor import VendorCoordinates, VendorOut, VendorUpdate
from regionhub.services import catalog
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.storage import save_upload
from regionhub.utils.tokenJWT import get_current_user, role_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendors", tags=["Vendors"])


# Submit a shop for approval; photo and proof document are optional uploads
@router.post("/request", response_model=VendorOut, status_code=status.HTTP_201_CREATED)
def request_vendor(
    request: Request,
    name: str = Form(...),
    email: EmailStr = Form(...),
    address: Optional[str] = Form(None),
    pincode: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    proof: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor")),
):
    if not name.strip():
        raise ValidationFailed("Invalid vendor request", {"name": "Name is required"})
    if db.query(Vendor).filter(Vendor.user_id == current_user.id).first():
        raise Conflict("Vendor profile already exists")

    vendor = Vendor(
        user_id=current_user.id,
        name=name.strip(),
        email=email,
        address=address,
        pincode=pincode,
        status=VendorStatus.REQUESTED,
    )
    if photo is not None and photo.filename:
        vendor.photo = save_upload(photo, field="photo")
    if proof is not None and proof.filename:
        vendor.proof = save_upload(proof, field="proof")

    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    logger.info("Vendor request %s from user %s", vendor.id, current_user.id)

    write_log(db, user_id=current_user.id, action="VENDOR_REQUEST", resource="vendors",
              resource_id=vendor.id, ip=client_ip(request))
    return vendor


# Admins see every status, everyone else only accepted shops
@router.get("", response_model=List[VendorOut])
def list_vendors(
    status_filter: Optional[VendorStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Vendor)
    if (current_user.role or "").lower() != "admin":
        query = query.filter(Vendor.status == VendorStatus.ACCEPTED)
    elif status_filter is not None:
        query = query.filter(Vendor.status == status_filter)
    return query.order_by(Vendor.created_at.desc(), Vendor.id.desc()).all()


@router.get("/me", response_model=VendorOut)
def my_vendor(db: Session = Depends(get_db), current_user: User = Depends(role_required("vendor"))):
    return catalog.vendor_for_user(db, current_user)


@router.patch("/me", response_model=VendorOut)
def update_my_vendor(
    payload: VendorUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor")),
):
    vendor = catalog.vendor_for_user(db, current_user)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(vendor, field, value)
    db.commit()
    db.refresh(vendor)

    write_log(db, user_id=current_user.id, action="VENDOR_UPDATE", resource="vendors",
              resource_id=vendor.id, ip=client_ip(request), meta={"fields": sorted(changes)})
    return vendor


@router.put("/me/coordinates", response_model=VendorOut)
def set_coordinates(
    payload: VendorCoordinates,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor")),
):
    vendor = catalog.vendor_for_user(db, current_user)
    vendor = catalog.set_vendor_coordinates(db, vendor, payload.lat, payload.lon)

    write_log(db, user_id=current_user.id, action="VENDOR_COORDS", resource="vendors",
              resource_id=vendor.id, ip=client_ip(request),
              meta={"lat": vendor.latitude, "lon": vendor.longitude})
    return vendor


@router.get("/{vendor_id}", response_model=VendorOut)
def get_vendor(vendor_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    vendor = db.get(Vendor, vendor_id)
    is_admin = (current_user.role or "").lower() == "admin"
    if not vendor or (vendor.status != VendorStatus.ACCEPTED and not is_admin
                      and vendor.user_id != current_user.id):
        raise NotFound("Vendor not found")
    return vendor
