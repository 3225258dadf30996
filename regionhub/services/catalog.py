# regionhub/services/catalog.py
import logging
import math
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from regionhub.models.product import Category, Product
from regionhub.models.users import User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.services.reports import first_images
from regionhub.utils.errors import Forbidden, NotFound, ValidationFailed
from regionhub.utils.geo import distance_km, valid_coordinates

logger = logging.getLogger(__name__)


def _as_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def check_coordinates(lat, lon) -> tuple:
    """Validate a coordinate pair, reporting each bad field."""
    errors = {}
    lat_f, lon_f = _as_float(lat), _as_float(lon)
    if lat_f is None or not -90.0 <= lat_f <= 90.0:
        errors["lat"] = "Latitude must be a number between -90 and 90"
    if lon_f is None or not -180.0 <= lon_f <= 180.0:
        errors["lon"] = "Longitude must be a number between -180 and 180"
    if errors:
        raise ValidationFailed("Invalid coordinates", errors)
    return lat_f, lon_f


def vendor_for_user(db: Session, user: User, accepted_only: bool = False) -> Vendor:
    vendor = db.query(Vendor).filter(Vendor.user_id == user.id).first()
    if not vendor:
        raise NotFound("Vendor profile not found")
    if accepted_only and vendor.status != VendorStatus.ACCEPTED:
        raise Forbidden("Vendor account is not accepted yet")
    return vendor


def owned_product(db: Session, user: User, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")
    if (user.role or "").lower() != "admin":
        vendor = vendor_for_user(db, user)
        if product.vendor_id != vendor.id:
            raise NotFound("Product not found")
    return product


def set_vendor_coordinates(db: Session, vendor: Vendor, lat, lon) -> Vendor:
    vendor.latitude, vendor.longitude = check_coordinates(lat, lon)
    db.commit()
    db.refresh(vendor)
    logger.info("Vendor %s located at (%.5f, %.5f)", vendor.id, vendor.latitude, vendor.longitude)
    return vendor


def nearby_products(
    db: Session,
    lat: float,
    lon: float,
    category: Optional[str] = None,
    q: Optional[str] = None,
    radius_km: Optional[float] = None,
) -> List[dict]:
    """Products of accepted, located vendors ranked by distance from (lat, lon)."""
    lat, lon = check_coordinates(lat, lon)
    if radius_km is not None and radius_km < 0:
        raise ValidationFailed("Invalid radius", {"radius_km": "Radius must not be negative"})

    query = (db.query(Product)
             .join(Vendor, Vendor.id == Product.vendor_id)
             .options(joinedload(Product.vendor), joinedload(Product.category))
             .filter(Vendor.status == VendorStatus.ACCEPTED,
                     Vendor.latitude.isnot(None),
                     Vendor.longitude.isnot(None)))

    if category:
        cat = db.query(Category).filter(Category.name == category).first()
        if not cat:
            return []
        query = query.filter(Product.category_id == cat.id)
    if q:
        query = query.filter(Product.name.ilike(f"%{q.strip()}%"))

    results = []
    for product in query.all():
        vendor = product.vendor
        # NaN or out of range values stored earlier are skipped as well
        if not valid_coordinates(vendor.latitude, vendor.longitude):
            continue
        distance = distance_km(lat, lon, vendor.latitude, vendor.longitude)
        if radius_km is not None and distance > radius_km:
            continue
        results.append((distance, product))

    results.sort(key=lambda pair: (pair[0], pair[1].id))
    images = first_images(db, [p.id for _, p in results])
    return [
        {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "offer": product.offer,
            "price": product.price,
            "category": product.category.name if product.category else None,
            "vendor_id": product.vendor_id,
            "vendor_name": product.vendor.name,
            "vendor_address": product.vendor.address,
            "distance_km": round(distance, 3),
            "image": images.get(product.id),
        }
        for distance, product in results
    ]
