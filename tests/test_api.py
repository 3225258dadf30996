from datetime import date, timedelta

from conftest import PASSWORD, auth_header, make_product, make_user
from regionhub.models.log import Log


def _window():
    today = date.today()
    return {"date_from": str(today - timedelta(days=1)), "date_to": str(today + timedelta(days=1))}


def test_register_login_and_me(client):
    resp = client.post("/register", json={"email": "New.User@Example.com", "password": PASSWORD,
                                          "name": "New User"})
    assert resp.status_code == 201
    assert resp.json()["email"] == "new.user@example.com"
    assert resp.json()["role"] == "customer"

    dup = client.post("/register", json={"email": "new.user@example.com", "password": PASSWORD, "name": "X"})
    assert dup.status_code == 409
    assert dup.json()["kind"] == "conflict"

    bad = client.post("/login", json={"email": "new.user@example.com", "password": "wrong-password"})
    assert bad.status_code == 401

    token = client.post("/login", json={"email": "new.user@example.com", "password": PASSWORD}).json()
    me = client.get("/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "New User"


def test_request_validation_uses_error_shape(client, customer):
    resp = client.post("/register", json={"email": "not-an-email", "name": ""})
    body = resp.json()
    assert resp.status_code == 422
    assert body["kind"] == "validation"
    assert {"email", "password", "name"} <= set(body["errors"])

    resp = client.post("/cart/add", json={"product_id": 1, "qty": 0}, headers=auth_header(customer))
    assert resp.status_code == 422
    assert resp.json()["errors"] == {"qty": "Quantity must be an integer of at least 1"}


def test_role_checks(client, customer):
    resp = client.get("/reports/vendor-revenue", params=_window(), headers=auth_header(customer))
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"

    assert client.get("/cart").status_code in (401, 403)


def test_purchase_flow_end_to_end(client, db, customer, vendor, agent, admin):
    seller = auth_header(vendor.user)
    buyer = auth_header(customer)
    rider = auth_header(agent)

    product = client.post("/products", json={"name": "Honey", "price": 12.5}, headers=seller).json()
    resp = client.post(f"/products/{product['id']}/stock", json={"qty": 4, "note": "Harvest"}, headers=seller)
    assert resp.status_code == 201

    cart = client.post("/cart/add", json={"product_id": product["id"], "qty": 3}, headers=buyer).json()
    assert cart["total"] == 37.5

    address = client.post("/addresses", json={"content": "1 Main Street"}, headers=buyer).json()
    order = client.post("/orders/confirm", json={"address_id": address["id"]}, headers=buyer).json()
    assert order["status"] == "confirmed"
    assert order["address"] == "1 Main Street"

    order = client.post(f"/orders/{order['id']}/pay", headers=buyer).json()
    assert order["status"] == "paid"

    left = client.get(f"/vendors/me/stock-left/{product['id']}", headers=seller).json()
    assert left["stock_left"] == 1

    available = client.get("/delivery/available", headers=rider).json()
    assert [o["id"] for o in available] == [order["id"]]

    order = client.post(f"/delivery/orders/{order['id']}/accept", headers=rider).json()
    assert order["status"] == "shipped"
    item = client.post(f"/delivery/items/{order['items'][0]['id']}/shipped", headers=rider).json()
    assert item["status"] == "shipped"
    order = client.post(f"/delivery/orders/{order['id']}/deliver", headers=rider).json()
    assert order["status"] == "delivered"

    revenue = client.get("/reports/vendor-revenue", params=_window(), headers=auth_header(admin)).json()
    assert revenue[0]["vendor_id"] == vendor.id
    assert revenue[0]["total_revenue"] == 37.5

    history = client.get("/reports/me/orders", headers=buyer).json()
    assert history[0]["order_status"] == "delivered"

    db.expire_all()
    actions = {row.action for row in db.query(Log).all()}
    assert {"CART_ADD", "ORDER_CONFIRM", "ORDER_PAY", "ORDER_ACCEPT", "ORDER_DELIVER"} <= actions


def test_payment_failure_is_reported_and_logged(client, db, customer, vendor):
    product = make_product(db, vendor, "Jam", price=5.0, qty=1)
    buyer = auth_header(customer)
    client.post("/cart/add", json={"product_id": product.id, "qty": 2}, headers=buyer)
    order = client.post("/orders/confirm", headers=buyer).json()

    resp = client.post(f"/orders/{order['id']}/pay", headers=buyer)
    assert resp.status_code == 409
    body = resp.json()
    assert body["kind"] == "insufficient_stock"
    assert str(product.id) in body["errors"]

    assert client.get(f"/orders/{order['id']}", headers=buyer).json()["status"] == "confirmed"
    db.expire_all()
    failed = db.query(Log).filter(Log.action == "ORDER_PAY", Log.status == "FAIL").one()
    assert failed.resource_id == order["id"]


def test_complaint_endpoints(client, db, customer, vendor, admin):
    product = make_product(db, vendor, "Cheese", price=8.0, qty=3)
    buyer = auth_header(customer)
    cart = client.post("/cart/add", json={"product_id": product.id, "qty": 1}, headers=buyer).json()
    client.post("/orders/confirm", headers=buyer)
    item_id = cart["items"][0]["id"]

    short = client.post("/complaints", json={"cart_item_id": item_id, "title": "Mould",
                                             "content": "a" * 19}, headers=buyer)
    assert short.status_code == 422
    assert list(short.json()["errors"]) == ["content"]

    created = client.post("/complaints", json={"cart_item_id": item_id, "title": "Mould",
                                               "content": "a" * 20}, headers=buyer)
    assert created.status_code == 201
    complaint_id = created.json()["id"]

    reply = client.post(f"/complaints/{complaint_id}/reply", json={"reply": "Refunded", "status": "resolved"},
                        headers=auth_header(admin))
    assert reply.json()["status"] == "resolved"
    mine = client.get("/complaints/mine", headers=buyer).json()
    assert mine[0]["reply"] == "Refunded"


def test_catalog_endpoints(client, db, vendor, admin):
    resp = client.post("/categories", json={"name": "Dairy"}, headers=auth_header(admin))
    assert resp.status_code == 201
    assert client.post("/categories", json={"name": "Dairy"}, headers=auth_header(admin)).status_code == 409

    product = make_product(db, vendor, "Butter", price=3.0, qty=2)
    upload = client.post(f"/products/{product.id}/gallery", headers=auth_header(vendor.user),
                         files={"file": ("butter.png", b"\x89PNG fake", "image/png")})
    assert upload.status_code == 201
    rejected = client.post(f"/products/{product.id}/gallery", headers=auth_header(vendor.user),
                           files={"file": ("notes.txt", b"hello", "text/plain")})
    assert rejected.status_code == 422

    nearby = client.get("/products/nearby", params={"lat": 12.97, "lon": 77.59}).json()
    assert nearby[0]["id"] == product.id
    assert nearby[0]["image"] == upload.json()["photo"]

    summary = client.get(f"/products/{product.id}").json()
    assert summary["stock"] == 2
    assert summary["avg_rating"] == 0.0


def test_vendor_request_and_acceptance(client, db, admin):
    owner = make_user(db, "baker@example.com", role="vendor")
    resp = client.post("/vendors/request", data={"name": "Bakery", "email": "baker@example.com"},
                       headers=auth_header(owner))
    assert resp.status_code == 201
    vendor_id = resp.json()["id"]
    assert resp.json()["status"] == "requested"

    accepted = client.post(f"/admin/vendors/{vendor_id}/accept", headers=auth_header(admin))
    assert accepted.json()["status"] == "accepted"

    coords = client.put("/vendors/me/coordinates", json={"lat": 100, "lon": 20}, headers=auth_header(owner))
    assert coords.status_code == 422
    assert list(coords.json()["errors"]) == ["lat"]


def test_delivery_agent_vetting(client, db, customer, vendor, admin):
    product = make_product(db, vendor, "Eggs", price=3.0, qty=5)
    buyer = auth_header(customer)
    client.post("/cart/add", json={"product_id": product.id, "qty": 1}, headers=buyer)
    order = client.post("/orders/confirm", headers=buyer).json()
    client.post(f"/orders/{order['id']}/pay", headers=buyer)

    client.post("/register", json={"email": "rider2@example.com", "password": PASSWORD,
                                   "name": "Rider", "role": "delivery"})
    token = client.post("/login", json={"email": "rider2@example.com", "password": PASSWORD}).json()
    rider = {"Authorization": f"Bearer {token['access_token']}"}

    refused = client.post(f"/delivery/orders/{order['id']}/accept", headers=rider)
    assert refused.status_code == 403
    assert refused.json()["kind"] == "forbidden"

    missing_proof = client.post("/delivery/request", data={"phone": "555"}, headers=rider)
    assert missing_proof.status_code == 422
    requested = client.post("/delivery/request", data={"phone": "555"}, headers=rider,
                            files={"proof": ("id.pdf", b"%PDF-1.4", "application/pdf"),
                                   "photo": ("me.jpg", b"jpeg", "image/jpeg")})
    assert requested.status_code == 201
    assert requested.json()["status"] == "inactive"
    assert requested.json()["photo"]
    assert client.post("/delivery/request", headers=rider,
                       files={"proof": ("id.pdf", b"%PDF-1.4", "application/pdf")}).status_code == 409
    assert client.post(f"/delivery/orders/{order['id']}/accept", headers=rider).status_code == 403

    pending = client.get("/admin/delivery-agents", params={"status": "inactive"},
                         headers=auth_header(admin)).json()
    assert [a["id"] for a in pending] == [requested.json()["id"]]
    activated = client.post(f"/admin/delivery-agents/{requested.json()['id']}/accept",
                            headers=auth_header(admin))
    assert activated.json()["status"] == "active"

    accepted = client.post(f"/delivery/orders/{order['id']}/accept", headers=rider)
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "shipped"
    db.expire_all()
    assert db.query(Log).filter(Log.action == "AGENT_ACCEPT").count() == 1


def test_product_deletion(client, db, customer, vendor):
    seller = auth_header(vendor.user)
    unsold = make_product(db, vendor, "Plums", price=2.0, qty=3, photos=["plums.jpg"])
    sold = make_product(db, vendor, "Pears", price=2.0, qty=3)
    client.post("/cart/add", json={"product_id": sold.id, "qty": 1}, headers=auth_header(customer))

    blocked = client.delete(f"/products/{sold.id}", headers=seller)
    assert blocked.status_code == 409
    assert blocked.json()["kind"] == "conflict"

    stranger = make_user(db, "rival@example.com", role="vendor")
    assert client.delete(f"/products/{unsold.id}", headers=auth_header(stranger)).status_code == 404

    assert client.delete(f"/products/{unsold.id}", headers=seller).status_code == 200
    assert client.get(f"/products/{unsold.id}").status_code == 404
    assert client.get(f"/products/{sold.id}").status_code == 200


def test_profile_photo_and_address_update(client, db, customer):
    buyer = auth_header(customer)

    uploaded = client.put("/me/photo", headers=buyer, files={"file": ("me.png", b"\x89PNG", "image/png")})
    assert uploaded.status_code == 200
    first = uploaded.json()["photo"]
    assert first.endswith(".png")
    replaced = client.put("/me/photo", headers=buyer, files={"file": ("me2.png", b"\x89PNG", "image/png")})
    assert replaced.json()["photo"] != first

    assert client.delete("/me/photo", headers=buyer).json()["photo"] is None
    assert client.delete("/me/photo", headers=buyer).status_code == 404

    address = client.post("/addresses", json={"content": "1 Main Street"}, headers=buyer).json()
    updated = client.patch(f"/addresses/{address['id']}", json={"content": " 2 High Street "}, headers=buyer)
    assert updated.json()["content"] == "2 High Street"
    blank = client.patch(f"/addresses/{address['id']}", json={"content": "   "}, headers=buyer)
    assert blank.status_code == 422
    assert list(blank.json()["errors"]) == ["content"]

    other = make_user(db, "carol@example.com")
    foreign = client.patch(f"/addresses/{address['id']}", json={"content": "x"}, headers=auth_header(other))
    assert foreign.status_code == 404
