"""Integration tests for catalog and coupon admin endpoints via TestClient."""


class TestCatalogEndpoints:
    def test_filter_and_sort(self, client, make_product, make_category):
        keyboards = make_category("Keyboards", "keyboards")
        make_product(name="Red Keyboard", price="80.00", category=keyboards)
        make_product(name="Blue Keyboard", price="40.00", category=keyboards)
        make_product(name="Mouse", price="10.00")

        body = client.get("/products", params={"category": "keyboards", "sort": "price-asc"}).json()
        assert [p["name"] for p in body] == ["Blue Keyboard", "Red Keyboard"]

        body = client.get("/products", params={"search": "keyb", "max_price": "50"}).json()
        assert [p["name"] for p in body] == ["Blue Keyboard"]

        body = client.get("/products", params={"sort": "name"}).json()
        assert [p["name"] for p in body] == ["Blue Keyboard", "Mouse", "Red Keyboard"]

    def test_unknown_category_is_empty(self, client, make_product):
        make_product()
        assert client.get("/products", params={"category": "nope"}).json() == []

    def test_featured(self, client, make_product):
        make_product(name="Plain")
        make_product(name="Star", is_featured=True)
        body = client.get("/products", params={"featured": "true"}).json()
        assert [p["name"] for p in body] == ["Star"]

    def test_get_by_slug(self, client, make_product):
        make_product(name="Mouse Pad")
        response = client.get("/products/mouse-pad")
        assert response.status_code == 200
        assert response.json()["name"] == "Mouse Pad"

        assert client.get("/products/missing").status_code == 404

    def test_categories(self, client, make_category):
        make_category("Keyboards", "keyboards")
        make_category("Audio", "audio")
        assert [c["slug"] for c in client.get("/categories").json()] == ["audio", "keyboards"]


class TestCouponAdminEndpoints:
    def test_crud(self, client):
        response = client.post(
            "/admin/coupons",
            json={"code": "summer", "discount_type": "flat", "discount_value": "5", "max_uses": 10},
        )
        assert response.status_code == 201
        coupon = response.json()
        assert coupon["code"] == "SUMMER"
        assert coupon["used_count"] == 0

        response = client.post(
            "/admin/coupons",
            json={"code": "SUMMER", "discount_type": "flat", "discount_value": "5"},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "COUPON_CODE_TAKEN"

        response = client.put(
            f"/admin/coupons/{coupon['id']}",
            json={"code": "SUMMER", "discount_type": "percentage", "discount_value": "20", "is_active": False},
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert [c["code"] for c in client.get("/admin/coupons").json()] == ["SUMMER"]

        assert client.delete(f"/admin/coupons/{coupon['id']}").status_code == 204
        assert client.get("/admin/coupons").json() == []
        assert client.delete(f"/admin/coupons/{coupon['id']}").status_code == 404

    def test_invalid_payload(self, client):
        response = client.post(
            "/admin/coupons",
            json={"code": "BAD", "discount_type": "percentage", "discount_value": "150"},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"
