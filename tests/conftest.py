import os
import tempfile

# Point the application at throwaway storage before regionhub is imported
_scratch = tempfile.mkdtemp(prefix="regionhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_scratch}/app.db"
os.environ["UPLOAD_DIR"] = os.path.join(_scratch, "uploads")
os.environ["LOCK_TIMEOUT_SECONDS"] = "5"
os.environ.pop("NOTIFY_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from regionhub.database import Base, get_db, make_engine
from regionhub.main import app
from regionhub.models.cart import CartItem
from regionhub.models.delivery import AgentStatus, DeliveryAgent
from regionhub.models.order import Order
from regionhub.models.product import Category, Gallery, Product
from regionhub.models.users import User
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.services import stock
from regionhub.utils.hashing import get_password_hash
from regionhub.utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# -----------------------------
# Seeding helpers
# -----------------------------
def make_user(db, email, role="customer", name=None, password=PASSWORD):
    user = User(email=email, role=role, name=name or email.split("@")[0],
                password_hash=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_vendor(db, owner, name="Shop", lat=12.97, lon=77.59, status=VendorStatus.ACCEPTED):
    vendor = Vendor(user_id=owner.id, name=name, email=owner.email, address=f"{name} street",
                    latitude=lat, longitude=lon, status=status)
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return vendor


def make_agent(db, email, status=AgentStatus.ACTIVE):
    user = make_user(db, email, role="delivery")
    db.add(DeliveryAgent(user_id=user.id, proof="proof.pdf", status=status))
    db.commit()
    return user


def make_category(db, name):
    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_product(db, vendor, name="Product", price=10.0, qty=0, category=None, photos=()):
    product = Product(vendor_id=vendor.id, name=name, price=price,
                      category_id=category.id if category else None)
    db.add(product)
    db.commit()
    db.refresh(product)
    for photo in photos:
        db.add(Gallery(product_id=product.id, photo=photo))
    db.commit()
    if qty:
        stock.append_entry(db, product, qty)
    return product


def auth_header(user):
    token = create_access_token(data={"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def vendor(db):
    owner = make_user(db, "farm@example.com", role="vendor")
    return make_vendor(db, owner, name="Green Farm")


@pytest.fixture
def agent(db):
    return make_agent(db, "rider@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin")


def line_totals(db, order_id):
    return sum(i.line_total for i in db.query(CartItem).filter(CartItem.order_id == order_id))


def order_count(db, user_id):
    return db.query(Order).filter(Order.user_id == user_id).count()
