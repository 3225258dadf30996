# regionhub/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.cart import CartItem
from regionhub.models.product import Category, Gallery, Product
from regionhub.models.review import Review
from regionhub.models.stock import StockEntry
from regionhub.models.users import User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.schemas import product as product_schemas
from regionhub.services import catalog, reports
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.storage import delete_upload, save_upload
from regionhub.utils.tokenJWT import role_required

router = APIRouter(tags=["Products"])


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and db.get(Category, category_id) is None:
        raise ValidationFailed("Unknown category", {"category_id": "Category does not exist"})


# =========================
# CATEGORIES
# =========================
@router.get("/categories", response_model=List[product_schemas.CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.name.asc()).all()


@router.post("/categories", response_model=product_schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: product_schemas.CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    name = payload.name.strip()
    if db.query(Category).filter(Category.name == name).first():
        raise Conflict("Category already exists", {"name": "Category already exists"})

    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              resource_id=category.id, ip=client_ip(request), meta={"name": name})
    return category


# =========================
# SEARCH
# =========================
@router.get("/products/nearby", response_model=List[product_schemas.NearbyProduct])
def nearby_products(
    lat: float = Query(...),
    lon: float = Query(...),
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search by product name"),
    radius_km: Optional[float] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    return catalog.nearby_products(db, lat, lon, category=category, q=q, radius_km=radius_km)


# =========================
# PRODUCTS
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor")),
):
    vendor = catalog.vendor_for_user(db, current_user, accepted_only=True)
    _check_category(db, payload.category_id)

    product = Product(vendor_id=vendor.id, **payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"name": product.name})
    return product


@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    changes = payload.model_dump(exclude_unset=True)
    if "category_id" in changes:
        _check_category(db, changes["category_id"])

    # Lines already in carts keep their captured unit price
    for key, value in changes.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"fields": sorted(changes)})
    return product


# Products that ever reached a cart stay, order history and reports point at them
@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    if db.query(CartItem.id).filter(CartItem.product_id == product.id).first():
        raise Conflict("Product is referenced by cart items")

    photos = [g.photo for g in product.gallery]
    db.query(StockEntry).filter(StockEntry.product_id == product.id).delete(synchronize_session=False)
    db.query(Review).filter(Review.product_id == product.id).delete(synchronize_session=False)
    db.delete(product)
    db.commit()
    for photo in photos:
        delete_upload(photo)

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              resource_id=product_id, ip=client_ip(request))
    return {"message": "Product deleted"}


@router.get("/products/{product_id}", response_model=product_schemas.ProductSummary)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return reports.product_summary(db, product_id)


@router.get("/vendors/{vendor_id}/products", response_model=List[product_schemas.ProductOut])
def vendor_products(vendor_id: int, db: Session = Depends(get_db)):
    vendor = db.get(Vendor, vendor_id)
    if not vendor or vendor.status != VendorStatus.ACCEPTED:
        raise NotFound("Vendor not found")
    return (db.query(Product)
            .filter(Product.vendor_id == vendor.id)
            .order_by(Product.id.asc())
            .all())


# =========================
# GALLERY
# =========================
@router.get("/products/{product_id}/gallery", response_model=List[product_schemas.GalleryOut])
def list_gallery(product_id: int, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")
    return product.gallery


@router.post("/products/{product_id}/gallery", response_model=product_schemas.GalleryOut,
             status_code=status.HTTP_201_CREATED)
def upload_photo(
    product_id: int,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    try:
        filename = save_upload(file, field="file")
    finally:
        file.file.close()

    photo = Gallery(product_id=product.id, photo=filename)
    db.add(photo)
    db.commit()
    db.refresh(photo)

    write_log(db, user_id=current_user.id, action="GALLERY_UPLOAD", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"photo": filename})
    return photo


@router.delete("/products/{product_id}/gallery/{photo_id}")
def delete_photo(
    product_id: int,
    photo_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("vendor", "admin")),
):
    product = catalog.owned_product(db, current_user, product_id)
    photo = db.get(Gallery, photo_id)
    if not photo or photo.product_id != product.id:
        raise NotFound("Photo not found")

    filename = photo.photo
    db.delete(photo)
    db.commit()
    delete_upload(filename)

    write_log(db, user_id=current_user.id, action="GALLERY_DELETE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"photo": filename})
    return {"message": "Photo deleted"}
