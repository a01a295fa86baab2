"""
Tests for the per-user cart.
"""
from models.cart import Cart, CartItem


class TestShowCart:

    def test_no_cart_yet(self, client, auth_headers, db):
        resp = client.get("/cart", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["message"] == "Cart is empty"
        assert body["products"] == []
        assert db.query(Cart).count() == 0

    def test_cart_lists_products_with_category(self, client, auth_headers, make_product):
        product = make_product(price=4.0)
        client.post(f"/cart/add/{product['id']}", json={"quantity": 2}, headers=auth_headers)

        cart = client.get("/cart", headers=auth_headers).json()["cart"]
        assert len(cart["products"]) == 1
        line = cart["products"][0]
        assert line["product_id"] == product["id"]
        assert line["quantity"] == 2
        assert line["price"] == 4.0
        assert line["line_total"] == 8.0
        assert line["product"]["category"]["name"] == "Books"
        assert cart["total"] == 8.0


class TestAddProduct:

    def test_add_creates_cart_lazily(self, client, auth_headers, make_product, db):
        product = make_product()
        resp = client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["message"] == "Product added to cart"
        assert db.query(Cart).count() == 1

    def test_repeated_add_overwrites_quantity(self, client, auth_headers, make_product, db):
        product = make_product()
        client.post(f"/cart/add/{product['id']}", json={"quantity": 2}, headers=auth_headers)
        resp = client.post(f"/cart/add/{product['id']}", json={"quantity": 5}, headers=auth_headers)

        lines = resp.json()["cart"]["products"]
        assert len(lines) == 1
        assert lines[0]["quantity"] == 5
        assert db.query(CartItem).one().quantity == 5

    def test_price_is_captured_at_add_time(self, client, auth_headers, make_product):
        product = make_product(price=10.0)
        client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        client.put(f"/products/{product['id']}", data={"price": "99"}, headers=auth_headers)

        line = client.get("/cart", headers=auth_headers).json()["cart"]["products"][0]
        assert line["price"] == 10.0
        assert line["product"]["price"] == 99.0

    def test_re_adding_refreshes_price(self, client, auth_headers, make_product):
        product = make_product(price=10.0)
        client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        client.put(f"/products/{product['id']}", data={"price": "12"}, headers=auth_headers)
        resp = client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        assert resp.json()["cart"]["products"][0]["price"] == 12.0

    def test_quantity_must_be_positive_integer(self, client, auth_headers, make_product):
        product = make_product()
        for bad in (0, -3, 1.5, "many"):
            resp = client.post(f"/cart/add/{product['id']}", json={"quantity": bad}, headers=auth_headers)
            assert resp.status_code == 422, bad

    def test_quantity_beyond_integer_column_rejected(self, client, auth_headers, make_product, db):
        product = make_product()
        resp = client.post(f"/cart/add/{product['id']}", json={"quantity": 10 ** 20}, headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["errors"][0]["loc"] == ["body", "quantity"]
        assert db.query(CartItem).count() == 0

    def test_unknown_product(self, client, auth_headers):
        resp = client.post("/cart/add/999", json={"quantity": 1}, headers=auth_headers)
        assert resp.status_code == 404

    def test_unavailable_product(self, client, auth_headers, make_product):
        product = make_product()
        client.put(f"/products/{product['id']}", data={"is_available": "false"}, headers=auth_headers)
        resp = client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        assert resp.status_code == 422

    def test_carts_are_per_user(self, client, auth_headers, other_headers, make_product):
        product = make_product()
        client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        assert client.get("/cart", headers=other_headers).json()["products"] == []


class TestRemoveAndClear:

    def test_remove_one_product(self, client, auth_headers, make_product):
        keep = make_product(name="Keep me")
        drop = make_product(name="Drop me")
        client.post(f"/cart/add/{keep['id']}", json={"quantity": 1}, headers=auth_headers)
        client.post(f"/cart/add/{drop['id']}", json={"quantity": 1}, headers=auth_headers)

        resp = client.delete(f"/cart/remove/{drop['id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["ok"] is True
        names = [p["name"] for p in client.get("/cart", headers=auth_headers).json()["cart"]["products"]]
        assert names == ["Keep me"]

    def test_remove_absent_product_is_noop(self, client, auth_headers):
        resp = client.delete("/cart/remove/12345", headers=auth_headers)
        assert resp.status_code == 200

    def test_clear_keeps_cart_row(self, client, auth_headers, make_product, db):
        product = make_product()
        client.post(f"/cart/add/{product['id']}", json={"quantity": 2}, headers=auth_headers)

        resp = client.delete("/cart/clear", headers=auth_headers)
        assert resp.status_code == 200
        assert db.query(CartItem).count() == 0
        assert db.query(Cart).count() == 1
        cart = client.get("/cart", headers=auth_headers).json()["cart"]
        assert cart["products"] == []
        assert cart["total"] == 0

    def test_deleting_product_drops_cart_line(self, client, auth_headers, make_product, db):
        product = make_product()
        client.post(f"/cart/add/{product['id']}", json={"quantity": 1}, headers=auth_headers)
        client.delete(f"/products/{product['id']}", headers=auth_headers)
        assert db.query(CartItem).count() == 0
