# regionhub/routes/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.users import User
from regionhub.schemas import reports as report_schemas
from regionhub.services import catalog, reports
from regionhub.utils.tokenJWT import role_required

router = APIRouter(prefix="/reports", tags=["Reports"])

admin_only = role_required("admin")
vendor_only = role_required("vendor")


# -----------------------------
# 1) Admin: revenue and best sellers
# -----------------------------
@router.get("/vendor-revenue", response_model=List[report_schemas.VendorRevenueItem])
def vendor_revenue(
    date_from: date = Query(..., description="First day (YYYY-MM-DD)"),
    date_to: date = Query(..., description="Last day, inclusive (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    return reports.vendor_revenue(db, date_from, date_to)


@router.get("/top-product", response_model=Optional[report_schemas.TopProduct])
def top_product(
    date_from: date = Query(...),
    date_to: date = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    return reports.top_product(db, date_from, date_to)


@router.get("/top-vendor", response_model=Optional[report_schemas.TopVendor])
def top_vendor(
    date_from: date = Query(...),
    date_to: date = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    return reports.top_vendor(db, date_from, date_to)


# -----------------------------
# 2) Vendor dashboard
# -----------------------------
@router.get("/vendor/top-products", response_model=List[report_schemas.VendorTopProduct])
def my_top_products(db: Session = Depends(get_db), current_user: User = Depends(vendor_only)):
    vendor = catalog.vendor_for_user(db, current_user)
    return reports.vendor_top_products(db, vendor.id)


@router.get("/vendor/sales", response_model=List[report_schemas.VendorSaleLine])
def my_sales(
    date_from: date = Query(...),
    date_to: date = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(vendor_only),
):
    vendor = catalog.vendor_for_user(db, current_user)
    return reports.vendor_sales(db, vendor.id, date_from, date_to)


@router.get("/vendor/monthly", response_model=List[report_schemas.MonthlySales])
def my_monthly_sales(
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    current_user: User = Depends(vendor_only),
):
    vendor = catalog.vendor_for_user(db, current_user)
    return reports.vendor_monthly_sales(db, vendor.id, year)


# -----------------------------
# 3) Customer history
# -----------------------------
@router.get("/me/orders", response_model=List[report_schemas.OrderHistoryLine])
def my_order_history(db: Session = Depends(get_db), current_user: User = Depends(role_required("customer"))):
    return reports.user_order_history(db, current_user.id)
