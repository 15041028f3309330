from fastapi.testclient import TestClient
from storefront.app.core.config import settings
from storefront.app.services.sessions import get_registry
from storefront.main import app

client = TestClient(app)


def _lines(body):
    return [(ln["productId"], ln["variant"], ln["quantity"]) for ln in body["lines"]]


def test_empty_cart_opens_no_session():
    c = TestClient(app)
    r = c.get("/api/cart")
    assert r.status_code == 200
    assert r.json() == {"lines": [], "totalItems": 0, "totalPrice": "0.00", "currency": settings.currency}
    assert settings.session_cookie_name not in r.cookies
    assert len(get_registry()) == 0


def test_first_add_sets_session_cookie(make_product):
    c = TestClient(app)
    r = c.post("/api/cart/items", json={"productId": make_product().id})
    assert r.status_code == 200
    sid = r.cookies[settings.session_cookie_name]
    assert get_registry().get(sid) is not None


def test_add_remove_clear_flow(make_product):
    tee = make_product(name="Tee", price=10, variants=["M", "L"])

    client.post("/api/cart/items", json={"productId": tee.id, "variant": "M"})
    client.post("/api/cart/items", json={"productId": tee.id, "variant": "M"})
    r = client.post("/api/cart/items", json={"productId": tee.id, "variant": "L"})
    assert r.status_code == 200
    body = r.json()
    assert _lines(body) == [(tee.id, "M", 2), (tee.id, "L", 1)]
    assert body["totalItems"] == 3
    assert body["totalPrice"] == "30.00"
    assert body["lines"][0]["unitPrice"] == "10.00"
    assert body["lines"][0]["lineTotal"] == "20.00"

    r = client.delete(f"/api/cart/items/{tee.id}", params={"variant": "M"})
    assert _lines(r.json()) == [(tee.id, "M", 1), (tee.id, "L", 1)]
    assert r.json()["totalPrice"] == "20.00"

    r = client.delete(f"/api/cart/items/{tee.id}", params={"variant": "M"})
    assert _lines(r.json()) == [(tee.id, "L", 1)]

    # cart survives between requests of the same session
    assert _lines(client.get("/api/cart").json()) == [(tee.id, "L", 1)]

    r = client.delete("/api/cart")
    assert r.status_code == 200
    assert r.json()["lines"] == []
    assert r.json()["totalItems"] == 0


def test_first_variant_is_default(make_product):
    shoe = make_product(name="Shoe", category="Footwear", variants=["40", "41"])
    r = client.post("/api/cart/items", json={"productId": shoe.id})
    assert _lines(r.json()) == [(shoe.id, "40", 1)]


def test_product_without_variants(make_product):
    mug = make_product(name="Mug", price=12.5)
    client.post("/api/cart/items", json={"productId": mug.id})
    r = client.post("/api/cart/items", json={"product_id": mug.id, "variant": ""})
    assert _lines(r.json()) == [(mug.id, None, 2)]
    assert r.json()["totalPrice"] == "25.00"


def test_unknown_variant_is_400(make_product):
    tee = make_product(variants=["M"])
    r = client.post("/api/cart/items", json={"productId": tee.id, "variant": "XXL"})
    assert r.status_code == 400


def test_out_of_stock_is_409(make_product):
    p = make_product(in_stock=False)
    r = client.post("/api/cart/items", json={"productId": p.id})
    assert r.status_code == 409
    assert r.json()["detail"] == "Product is out of stock"
    assert client.get("/api/cart").json()["lines"] == []


def test_unknown_product_is_404():
    assert client.post("/api/cart/items", json={"productId": 4242}).status_code == 404


def test_remove_missing_line_is_noop(make_product):
    p = make_product()
    r = client.delete(f"/api/cart/items/{p.id}")
    assert r.status_code == 200
    assert r.json()["lines"] == []


def test_price_change_does_not_touch_cart(make_product):
    p = make_product(price=10)
    client.post("/api/cart/items", json={"productId": p.id})

    assert client.put(f"/api/products/{p.id}", json={"price": 99}).status_code == 200
    body = client.get("/api/cart").json()
    assert body["totalPrice"] == "10.00"

    # adding again bumps the old line; its snapshot price stays
    body = client.post("/api/cart/items", json={"productId": p.id}).json()
    assert body["totalPrice"] == "20.00"


def test_sessions_have_independent_carts(make_product):
    p = make_product()
    alice, bob = TestClient(app), TestClient(app)

    alice.post("/api/cart/items", json={"productId": p.id})
    alice.post("/api/cart/items", json={"productId": p.id})
    bob.post("/api/cart/items", json={"productId": p.id})

    assert alice.get("/api/cart").json()["totalItems"] == 2
    assert bob.get("/api/cart").json()["totalItems"] == 1


def test_add_then_remove_without_variant_restores_cart(make_product):
    tee = make_product(variants=["S", "M"])
    client.post("/api/cart/items", json={"productId": tee.id})

    r = client.delete(f"/api/cart/items/{tee.id}")
    assert r.status_code == 200
    assert r.json()["lines"] == []
    assert r.json()["totalItems"] == 0


def test_remove_without_variant_leaves_other_variants(make_product):
    tee = make_product(variants=["S", "M"])
    client.post("/api/cart/items", json={"productId": tee.id, "variant": "M"})

    r = client.delete(f"/api/cart/items/{tee.id}")
    assert _lines(r.json()) == [(tee.id, "M", 1)]


def test_rejected_adds_open_no_session(make_product):
    c = TestClient(app)
    gone = make_product(in_stock=False)
    assert c.post("/api/cart/items", json={"productId": gone.id}).status_code == 409
    assert c.post("/api/cart/items", json={"productId": 4242}).status_code == 404
    assert c.delete("/api/cart").status_code == 200
    assert c.delete(f"/api/cart/items/{gone.id}").status_code == 200
    assert len(get_registry()) == 0
    assert settings.session_cookie_name not in c.cookies


def test_client_chosen_session_id_is_not_adopted(make_product):
    p = make_product()
    c = TestClient(app, cookies={settings.session_cookie_name: "0123456789abcdef0123456789abcdef"})

    assert c.get("/api/cart").json()["lines"] == []
    r = c.post("/api/cart/items", json={"productId": p.id})
    sid = r.cookies[settings.session_cookie_name]
    assert sid != "0123456789abcdef0123456789abcdef"
    assert get_registry().get("0123456789abcdef0123456789abcdef") is None
    assert len(get_registry()) == 1
