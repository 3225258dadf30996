# regionhub/routes/addresses.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.order import Order
from regionhub.models.users import Address, User
from regionhub.schemas.address import AddressCreate, AddressOut, AddressUpdate
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/addresses", tags=["Addresses"])


@router.get("", response_model=List[AddressOut])
def list_addresses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return (db.query(Address)
            .filter(Address.user_id == current_user.id)
            .order_by(Address.id.asc())
            .all())


@router.post("", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
def create_address(
    payload: AddressCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = Address(user_id=current_user.id, content=payload.content.strip())
    db.add(address)
    db.commit()
    db.refresh(address)

    write_log(db, user_id=current_user.id, action="ADDRESS_CREATE", resource="addresses",
              resource_id=address.id, ip=client_ip(request))
    return address


@router.patch("/{address_id}", response_model=AddressOut)
def update_address(
    address_id: int,
    payload: AddressUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = db.get(Address, address_id)
    if not address or address.user_id != current_user.id:
        raise NotFound("Address not found")

    if not payload.content.strip():
        raise ValidationFailed("Invalid address", {"content": "Address is required"})
    address.content = payload.content.strip()
    db.commit()
    db.refresh(address)

    write_log(db, user_id=current_user.id, action="ADDRESS_UPDATE", resource="addresses",
              resource_id=address.id, ip=client_ip(request))
    return address

@router.delete("/{address_id}")
def delete_address(
    address_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = db.get(Address, address_id)
    if not address or address.user_id != current_user.id:
        raise NotFound("Address not found")
    # Orders keep pointing at the address they were delivered to
    if db.query(Order.id).filter(Order.address_id == address.id).first():
        raise Conflict("Address is used by an order")

    db.delete(address)
    db.commit()

    write_log(db, user_id=current_user.id, action="ADDRESS_DELETE", resource="addresses",
              resource_id=address_id, ip=client_ip(request))
    return {"message": "Address deleted"}
