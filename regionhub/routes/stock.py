# regionhub/routes/stock.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.users import User
from regionhub.schemas.stock import StockEntryCreate, StockEntryOut, StockLeft
from regionhub.services import catalog, reports, stock
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import InsufficientStock
from regionhub.utils.tokenJWT import role_required

router = APIRouter(tags=["Stock"])


# Append a ledger entry (delivery, correction, loss) for an owned product
@router.post("/products/{product_id}/stock", response_model=StockEntryOut, status_code=status.HTTP_201_CREATED)
def add_stock(
    product_id: int,
    payload: StockEntryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    try:
        entry = stock.append_entry(db, product, payload.qty, user_id=current_user.id,
                                   note=payload.note, stock_date=payload.stock_date)
    except InsufficientStock as e:
        write_log(db, user_id=current_user.id, action="STOCK_ADD", resource="products",
                  resource_id=product.id, status="FAIL", ip=client_ip(request),
                  meta={"qty": payload.qty, "errors": e.errors})
        raise

    write_log(db, user_id=current_user.id, action="STOCK_ADD", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"qty": entry.qty, "entry_id": entry.id})
    return entry


@router.get("/products/{product_id}/stock", response_model=List[StockEntryOut])
def stock_history(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    return stock.history(db, product.id)


@router.get("/vendors/me/stock-left/{product_id}", response_model=StockLeft)
def stock_left(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor")),
):
    vendor = catalog.vendor_for_user(db, current_user)
    return reports.stock_left(db, vendor.id, product_id)
