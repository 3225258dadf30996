import math

import pytest

from conftest import make_category, make_product, make_user, make_vendor
from regionhub.models.vendor import VendorStatus
from regionhub.services import catalog
from regionhub.utils.errors import ValidationFailed
from regionhub.utils.geo import distance_km, valid_coordinates


def test_distance_basics():
    assert distance_km(12.97, 77.59, 12.97, 77.59) == 0
    a = distance_km(52.2297, 21.0122, 50.0647, 19.9450)
    b = distance_km(50.0647, 19.9450, 52.2297, 21.0122)
    assert a == pytest.approx(b)
    # Warsaw to Krakow
    assert a == pytest.approx(252, abs=2)
    # One degree of latitude
    assert distance_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)
    # Antipodes stay finite
    assert distance_km(0, 0, 0, 180) == pytest.approx(math.pi * 6371.0)


@pytest.mark.parametrize("lat, lon, ok", [
    (0.0, 0.0, True),
    (-90.0, 180.0, True),
    (None, 10.0, False),
    (10.0, None, False),
    (91.0, 0.0, False),
    (0.0, -180.5, False),
    (float("nan"), 0.0, False),
])
def test_valid_coordinates(lat, lon, ok):
    assert valid_coordinates(lat, lon) is ok


def test_nearby_excludes_unlocated_and_unaccepted_vendors(db):
    near = make_vendor(db, make_user(db, "near@example.com", role="vendor"), name="Near", lat=0.0, lon=0.0)
    far = make_vendor(db, make_user(db, "far@example.com", role="vendor"), name="Far", lat=1.0, lon=1.0)
    nowhere = make_vendor(db, make_user(db, "nowhere@example.com", role="vendor"), name="Nowhere",
                          lat=None, lon=None)
    pending = make_vendor(db, make_user(db, "pending@example.com", role="vendor"), name="Pending",
                          lat=0.0, lon=0.0, status=VendorStatus.REQUESTED)

    p_far = make_product(db, far, "Far apples")
    p_near_2 = make_product(db, near, "Near pears")
    p_near_1 = make_product(db, near, "Near apples", photos=["pears.jpg"])
    make_product(db, nowhere, "Ghost apples")
    make_product(db, pending, "Pending apples")

    results = catalog.nearby_products(db, 0.0, 0.0)
    assert [r["id"] for r in results] == [p_near_2.id, p_near_1.id, p_far.id]
    assert results[0]["distance_km"] == 0
    assert results[1]["image"] == "pears.jpg"

    huge_radius = catalog.nearby_products(db, 0.0, 0.0, radius_km=100000)
    assert "Ghost apples" not in [r["name"] for r in huge_radius]

    close = catalog.nearby_products(db, 0.0, 0.0, radius_km=10)
    assert {r["vendor_id"] for r in close} == {near.id}

    apples = catalog.nearby_products(db, 0.0, 0.0, q="apples")
    assert [r["id"] for r in apples] == [p_near_1.id, p_far.id]


def test_nearby_category_filter(db, vendor):
    fruit = make_category(db, "Fruit")
    apple = make_product(db, vendor, "Apple", category=fruit)
    make_product(db, vendor, "Spoon")

    assert [r["id"] for r in catalog.nearby_products(db, 12.9, 77.5, category="Fruit")] == [apple.id]
    assert catalog.nearby_products(db, 12.9, 77.5, category="Unknown") == []


def test_nearby_rejects_bad_origin(db):
    with pytest.raises(ValidationFailed) as exc:
        catalog.nearby_products(db, 95.0, 200.0)
    assert set(exc.value.errors) == {"lat", "lon"}


def test_set_vendor_coordinates(db, vendor):
    catalog.set_vendor_coordinates(db, vendor, "48.85", 2.35)
    assert (vendor.latitude, vendor.longitude) == (48.85, 2.35)

    with pytest.raises(ValidationFailed) as exc:
        catalog.set_vendor_coordinates(db, vendor, "north", None)
    assert set(exc.value.errors) == {"lat", "lon"}
    db.refresh(vendor)
    assert vendor.latitude == 48.85
