# regionhub/populate_db.py
"""Seed an empty database with an admin account and a small demo catalog.

Run with ``python -m regionhub.populate_db``. Admin credentials come from
ADMIN_EMAIL / ADMIN_PASSWORD (environment or .env).
"""
import os

from dotenv import load_dotenv

from regionhub.database import SessionLocal, init_db
from regionhub.models.product import Category, Product
from regionhub.models.users import User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.services import stock
from regionhub.utils.hashing import get_password_hash

# Demo data: (category, name, price, opening stock)
CATEGORIES = ["Vegetables", "Dairy", "Bakery"]
DEMO_VENDORS = [
    {
        "email": "farm@regionhub.example.com",
        "name": "Green Valley Farm",
        "address": "12 Orchard Road",
        "pincode": "560001",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "products": [
            ("Vegetables", "Tomatoes 1kg", 40.0, 120),
            ("Vegetables", "Spinach bunch", 25.0, 60),
            ("Dairy", "Fresh milk 1l", 55.0, 80),
        ],
    },
    {
        "email": "bakery@regionhub.example.com",
        "name": "Corner Bakery",
        "address": "3 Market Street",
        "pincode": "560034",
        "latitude": 12.9352,
        "longitude": 77.6245,
        "products": [
            ("Bakery", "Sourdough loaf", 90.0, 30),
            ("Bakery", "Butter croissant", 35.0, 50),
        ],
    },
]
DEMO_PASSWORD = "demo1234"


def _get_or_create_user(session, email, name, role, password):
    user = session.query(User).filter(User.email == email).first()
    if user:
        return user, False
    user = User(email=email, name=name, role=role, password_hash=get_password_hash(password))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user, True


def seed():
    load_dotenv()
    init_db()
    session = SessionLocal()
    try:
        admin_email = os.getenv("ADMIN_EMAIL", "admin@regionhub.example.com").lower()
        admin_password = os.getenv("ADMIN_PASSWORD", "admin1234")
        admin, created = _get_or_create_user(session, admin_email, "Administrator", "admin", admin_password)
        print(f"Admin {admin.email}: {'created' if created else 'already present'}")

        categories = {}
        for name in CATEGORIES:
            category = session.query(Category).filter(Category.name == name).first()
            if not category:
                category = Category(name=name)
                session.add(category)
                session.commit()
            categories[name] = category

        for data in DEMO_VENDORS:
            owner, created = _get_or_create_user(session, data["email"], data["name"], "vendor", DEMO_PASSWORD)
            if not created:
                print(f"Vendor {data['name']} already seeded, skipping")
                continue

            vendor = Vendor(
                user_id=owner.id, name=data["name"], email=owner.email, address=data["address"],
                pincode=data["pincode"], latitude=data["latitude"], longitude=data["longitude"],
                status=VendorStatus.ACCEPTED,
            )
            session.add(vendor)
            session.commit()

            for category_name, product_name, price, opening_stock in data["products"]:
                product = Product(vendor_id=vendor.id, category_id=categories[category_name].id,
                                  name=product_name, price=price)
                session.add(product)
                session.commit()
                stock.append_entry(session, product, opening_stock, user_id=admin.id, note="Opening stock")

            print(f"Vendor {vendor.name}: {len(data['products'])} products")
    finally:
        session.close()


if __name__ == "__main__":
    seed()
