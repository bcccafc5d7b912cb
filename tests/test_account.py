import pytest
from fastapi.testclient import TestClient

from woodzire.main import app
from woodzire.models.customer import AbandonedCart, EmailPreference


def sign_up(email, password="longpassword"):
    c = TestClient(app)
    c.post("/register", data={"name": "Shopper", "email": email, "password": password})
    assert c.post("/login", data={"email": email, "password": password}).status_code == 200
    return c


@pytest.fixture
def shopper():
    return sign_up("shopper@example.com")


def address(**kw):
    body = {"label": "Home", "full_name": "Ravi Kumar", "phone": "9876543210", "street_address": "4 Park Street",
            "city": "Kolkata", "state": "West Bengal", "postal_code": "700016"}
    body.update(kw)
    return body


# Wishlist

def test_wishlist_add_list_remove(shopper, make_product):
    a, b = make_product(), make_product()
    first = shopper.post("/wishlist", json={"product_id": a.id}).json()
    shopper.post("/wishlist", json={"product_id": b.id})
    listed = shopper.get("/wishlist").json()
    assert [w["product_id"] for w in listed] == [b.id, a.id]
    assert listed[0]["product"]["name"] == b.name

    assert shopper.delete(f"/wishlist/{first['id']}").json()["deleted"] is True
    assert [w["product_id"] for w in shopper.get("/wishlist").json()] == [b.id]


def test_wishlist_rejects_duplicates_and_unknown_products(shopper, make_product):
    p = make_product()
    assert shopper.post("/wishlist", json={"product_id": p.id}).status_code == 201
    assert shopper.post("/wishlist", json={"product_id": p.id}).status_code == 400
    assert shopper.post("/wishlist", json={"product_id": 999}).status_code == 404


def test_wishlist_is_private(shopper, make_product):
    item = shopper.post("/wishlist", json={"product_id": make_product().id}).json()
    other = sign_up("other@example.com")
    assert other.get("/wishlist").json() == []
    assert other.delete(f"/wishlist/{item['id']}").status_code == 404


def test_wishlist_needs_login(client):
    assert client.get("/wishlist").status_code == 401


# Addresses

def test_new_default_address_clears_previous(shopper):
    home = shopper.post("/addresses", json=address(is_default=True)).json()
    office = shopper.post("/addresses", json=address(label="Office", is_default=True)).json()
    listed = shopper.get("/addresses").json()
    assert [a["id"] for a in listed] == [office["id"], home["id"]]
    assert [a["is_default"] for a in listed] == [True, False]

    shopper.put(f"/addresses/{home['id']}", json=address(is_default=True))
    defaults = {a["label"]: a["is_default"] for a in shopper.get("/addresses").json()}
    assert defaults == {"Home": True, "Office": False}


def test_address_validation_and_delete(shopper):
    assert shopper.post("/addresses", json=address(postal_code="12")).status_code == 422
    a = shopper.post("/addresses", json=address()).json()
    assert sign_up("other@example.com").delete(f"/addresses/{a['id']}").status_code == 404
    assert shopper.delete(f"/addresses/{a['id']}").json()["deleted"] is True
    assert shopper.get("/addresses").json() == []


# Email preferences

def test_email_preferences_defaults_and_update(shopper):
    prefs = shopper.get("/me/email-preferences").json()
    assert prefs == {"order_updates": True, "shipping_notifications": True, "promotional_emails": False,
                     "back_in_stock_alerts": True, "newsletter": False}
    r = shopper.put("/me/email-preferences", json={"newsletter": True})
    assert r.json()["newsletter"] is True
    assert r.json()["order_updates"] is True


def test_restock_skips_customers_who_opted_out(admin, shopper, make_product, sent):
    p = make_product(stock_quantity=0)
    shopper.post("/stock-alerts", json={"product_id": p.id, "email": "shopper@example.com"})
    shopper.post("/stock-alerts", json={"product_id": p.id, "email": "wait@example.com"})
    shopper.put("/me/email-preferences", json={"back_in_stock_alerts": False})
    r = admin.post(f"/admin/products/{p.id}/restock", json={"quantity": 2})
    assert r.json()["notified"] == 1
    assert sent.calls[0]["emails"] == ["wait@example.com"]


# Abandoned carts

def test_abandoned_cart_is_priced_and_upserted(client, db, make_product):
    p = make_product(name="Sheesham Bench", price=1000)
    r = client.post("/carts/abandoned", json={"email": "Asha@Example.com",
                                              "items": [{"product_id": p.id, "quantity": 2}]})
    assert r.status_code == 201
    body = r.json()
    assert body["user_email"] == "asha@example.com"
    assert body["total_amount"] == 2000
    assert body["cart_items"][0]["name"] == "Sheesham Bench"

    again = client.post("/carts/abandoned", json={"email": "asha@example.com",
                                                  "items": [{"product_id": p.id, "quantity": 1}]}).json()
    assert again["id"] == body["id"]
    assert again["total_amount"] == 1000
    assert db.query(AbandonedCart).count() == 1


def test_abandoned_cart_rejects_unknown_product(client):
    r = client.post("/carts/abandoned", json={"email": "asha@example.com",
                                              "items": [{"product_id": 999, "quantity": 1}]})
    assert r.status_code == 404


def test_cart_reminder_counts_and_notifies(admin, client, make_product, sent):
    p = make_product(price=1500)
    cart = client.post("/carts/abandoned", json={"email": "asha@example.com",
                                                 "items": [{"product_id": p.id, "quantity": 1}]}).json()
    r = admin.post(f"/admin/abandoned-carts/{cart['id']}/remind")
    assert r.json()["reminder_sent_count"] == 1
    assert r.json()["last_reminder_sent_at"] is not None
    admin.post(f"/admin/abandoned-carts/{cart['id']}/remind")
    assert sent.types == ["cart_reminder", "cart_reminder"]
    assert sent.calls[0]["email"] == "asha@example.com"
    assert sent.calls[0]["total_amount"] == 1500
    assert admin.get("/admin/abandoned-carts").json()[0]["reminder_sent_count"] == 2


def test_checkout_recovers_open_cart(admin, client, make_product, checkout_body):
    p = make_product()
    cart = client.post("/carts/abandoned", json={"email": "asha@example.com",
                                                 "items": [{"product_id": p.id, "quantity": 1}]}).json()
    assert client.post("/checkout", json=checkout_body([{"product_id": p.id, "quantity": 1}])).status_code == 201
    assert admin.get("/admin/abandoned-carts").json() == []
    recovered = admin.get("/admin/abandoned-carts?include_recovered=true").json()
    assert recovered[0]["recovered"] is True
    assert admin.post(f"/admin/abandoned-carts/{cart['id']}/remind").status_code == 400


def test_admin_marks_cart_recovered(admin, client, make_product):
    p = make_product()
    cart = client.post("/carts/abandoned", json={"email": "asha@example.com",
                                                 "items": [{"product_id": p.id, "quantity": 1}]}).json()
    assert admin.post(f"/admin/abandoned-carts/{cart['id']}/recovered").json()["recovered"] is True


def test_abandoned_carts_admin_only(shopper):
    assert shopper.get("/admin/abandoned-carts").status_code == 403


# Email campaigns

def campaign(**kw):
    body = {"subject": "Monsoon sale", "template": "promotional",
            "content": {"headline": "20% off teak", "body": "This week only."}}
    body.update(kw)
    return body


@pytest.fixture
def subscribers(db):
    db.add_all([
        EmailPreference(user_id=101, user_email="promo@example.com", promotional_emails=True, newsletter=False),
        EmailPreference(user_id=102, user_email="news@example.com", promotional_emails=False, newsletter=True),
        EmailPreference(user_id=103, user_email="quiet@example.com", promotional_emails=False, newsletter=False),
    ])
    db.commit()


def test_campaign_reaches_opted_in_audience(admin, subscribers, sent):
    r = admin.post("/admin/campaigns/send", json=campaign())
    assert r.json() == {"sent": True, "total_recipients": 1, "batches": 1}
    assert sent.types == ["campaign"]
    assert sent.calls[0]["recipients"] == ["promo@example.com"]
    assert sent.calls[0]["content"] == {"headline": "20% off teak", "body": "This week only."}

    admin.post("/admin/campaigns/send", json=campaign(template="newsletter"))
    assert sent.calls[1]["recipients"] == ["news@example.com"]
    r = admin.post("/admin/campaigns/send", json=campaign(template="announcement"))
    assert r.json()["total_recipients"] == 3


def test_campaign_test_email_and_empty_audience(admin, sent):
    r = admin.post("/admin/campaigns/send", json=campaign())
    assert r.json()["sent"] is False
    assert sent.calls == []
    r = admin.post("/admin/campaigns/send", json=campaign(test_email="me@woodzire.in"))
    assert r.json()["total_recipients"] == 1
    assert sent.calls[0]["recipients"] == ["me@woodzire.in"]


def test_campaign_recipients_are_batched(admin, db, sent):
    db.add_all([EmailPreference(user_id=i, user_email=f"fan{i}@example.com", promotional_emails=True)
                for i in range(1, 121)])
    db.commit()
    r = admin.post("/admin/campaigns/send", json=campaign())
    assert r.json()["batches"] == 3
    assert [len(c["recipients"]) for c in sent.calls] == [50, 50, 20]


def test_campaigns_admin_only(shopper):
    assert shopper.post("/admin/campaigns/send", json=campaign()).status_code == 403
