def product_body(**kw):
    body = {"name": "Teak Console Table", "price": 15000, "category": "Tables", "stock_quantity": 4,
            "images": ["https://img.test/console-1.jpg", "https://img.test/console-2.jpg"],
            "dimensions": {"width": "120cm", "depth": "40cm"}}
    body.update(kw)
    return body


def test_create_product_derives_unique_slug(admin):
    first = admin.post("/admin/products", json=product_body())
    assert first.status_code == 201
    assert first.json()["slug"] == "teak-console-table"
    second = admin.post("/admin/products", json=product_body())
    assert second.json()["slug"] == "teak-console-table-2"


def test_explicit_duplicate_slug_rejected(admin):
    admin.post("/admin/products", json=product_body(slug="console"))
    assert admin.post("/admin/products", json=product_body(slug="console")).status_code == 400


def test_storefront_hides_inactive(admin, client, make_product):
    make_product(name="Visible")
    make_product(name="Hidden", is_active=False)
    names = [p["name"] for p in client.get("/products").json()]
    assert names == ["Visible"]


def test_search_and_filters(client, make_product):
    make_product(name="Oak Bed", category="Beds", is_featured=True)
    make_product(name="Oak Shelf", category="Storage")
    assert [p["name"] for p in client.get("/products?q=oak&featured=true").json()] == ["Oak Bed"]
    assert [p["name"] for p in client.get("/products?category=Storage").json()] == ["Oak Shelf"]


def test_update_product_partial(admin, make_product):
    p = make_product(price=1000)
    r = admin.put(f"/admin/products/{p.id}", json={"price": 1200, "is_on_sale": True, "discount_percentage": 10})
    body = r.json()
    assert body["price"] == 1200
    assert body["effective_price"] == 1080
    assert body["name"] == p.name


def test_delete_product_needs_confirm(admin, make_product):
    p = make_product()
    assert admin.delete(f"/admin/products/{p.id}").status_code == 400
    assert admin.delete(f"/admin/products/{p.id}?confirm=true").status_code == 200
    assert admin.get(f"/products/{p.slug}").status_code == 404


def test_low_stock_listing(admin, make_product, sent):
    make_product(name="Few", stock_quantity=2)
    make_product(name="Many", stock_quantity=40)
    assert [p["name"] for p in admin.get("/admin/products/low-stock").json()] == ["Few"]
    assert admin.post("/admin/products/low-stock/alert").json() == {"count": 1}
    assert sent.types == ["admin_alert"]


def test_restock_rejects_non_positive(admin, make_product):
    p = make_product()
    assert admin.post(f"/admin/products/{p.id}/restock", json={"quantity": 0}).status_code == 422


def test_categories(admin, client):
    admin.post("/admin/categories", json={"name": "Living Room", "sort_order": 2})
    admin.post("/admin/categories", json={"name": "Bedroom", "sort_order": 1})
    assert [c["slug"] for c in client.get("/categories").json()] == ["bedroom", "living-room"]
    assert admin.post("/admin/categories", json={"name": "Bedroom"}).status_code == 400


def test_bundle_pricing(admin, client, make_product):
    a = make_product(price=1000)
    b = make_product(price=500)
    r = admin.post("/admin/bundles", json={"name": "Study set", "discount_percentage": 10,
                                           "items": [{"product_id": a.id, "quantity": 1},
                                                     {"product_id": b.id, "quantity": 3}]})
    assert r.status_code == 201
    bundle = client.get("/bundles").json()[0]
    assert bundle["original_price"] == 2500
    assert bundle["bundle_price"] == 2250
    assert bundle["savings"] == 250


def test_catalog_admin_requires_role(client):
    client.post("/register", data={"name": "Shopper", "email": "buyer@example.com", "password": "longpassword"})
    client.post("/login", data={"email": "buyer@example.com", "password": "longpassword"})
    assert client.post("/admin/products", json=product_body()).status_code == 403
