# tests/test_api.py
from urllib.parse import urlparse

from fastapi.testclient import TestClient

from osaka.main import app

client = TestClient(app)
MIB = 1024 * 1024


def admin_headers():
    token = client.post("/admin/login", json={"password": "test-pass"}).json()["token"]
    return {"X-Admin-Token": token}


def reset():
    h = admin_headers()
    client.post("/admin/reset", headers=h)
    return h


def add_gold_series(h, price=21000):
    client.post("/admin/product-types", json={"name": "Voice Control"}, headers=h)
    r = client.post("/admin/products", json={"category": "32 inch", "model": "Gold Series",
                                             "product_type": "Voice Control", "price": price}, headers=h)
    assert r.status_code == 201
    return r.json()


def test_login_rejects_wrong_password():
    r = client.post("/admin/login", json={"password": "guess"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Incorrect password. Please try again."


def test_admin_routes_need_session():
    assert client.get("/admin/products").status_code == 401
    assert client.get("/admin/products", headers={"X-Admin-Token": "forged"}).status_code == 401


def test_public_routes_are_open():
    assert client.get("/health").json() == {"status": "ok"}
    categories = client.get("/categories").json()
    assert [c["category"] for c in categories] == ["24 inch", "32 inch", "43 inch", "50 inch", "65 inch"]


def test_add_product_then_edit_form_decomposes_name():
    h = reset()
    rows = add_gold_series(h)
    assert rows[0]["name"] == "Gold Series - Voice Control"
    assert rows[0]["size"] == '32"'

    form = client.get(f"/admin/products/{rows[0]['id']}/form", headers=h).json()
    assert (form["model"], form["product_type"]) == ("Gold Series", "Voice Control")


def test_invalid_product_reports_violations_and_writes_nothing():
    h = reset()
    r = client.post("/admin/products", json={"category": "32 inch", "model": "Gold Series", "price": 0},
                    headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["type_required", "price_not_positive"]
    assert client.get("/admin/products", headers=h).json() == []


def test_update_changes_price():
    h = reset()
    pid = add_gold_series(h)[0]["id"]
    r = client.put(f"/admin/products/{pid}", json={"category": "32 inch", "model": "Gold Series",
                                                   "product_type": "Voice Control", "price": 19990}, headers=h)
    assert r.status_code == 200
    assert r.json()[0]["price"] == 19990


def test_toggle_hides_product_from_catalog():
    h = reset()
    product = add_gold_series(h)[0]
    assert [s["category"] for s in client.get("/catalog").json()] == ["32 inch"]

    rows = client.post(f"/admin/products/{product['id']}/toggle", json={"is_active": True}, headers=h).json()
    assert rows[0]["is_active"] is False
    assert client.get("/catalog").json() == []
    assert client.get("/admin/stats", headers=h).json() == {"total": 1, "active": 0, "inactive": 1}


def test_toggle_of_missing_product_is_404():
    h = reset()
    r = client.post("/admin/products/gone/toggle", json={"is_active": True}, headers=h)
    assert r.status_code == 404


def test_delete_needs_confirm():
    h = reset()
    pid = add_gold_series(h)[0]["id"]
    assert client.delete(f"/admin/products/{pid}", headers=h).status_code == 400
    assert len(client.get("/admin/products", headers=h).json()) == 1
    r = client.delete(f"/admin/products/{pid}", params={"confirm": "true"}, headers=h)
    assert r.status_code == 200
    assert r.json() == []


def test_duplicate_type_is_rejected():
    h = reset()
    client.post("/admin/product-types", json={"name": "Android"}, headers=h)
    r = client.post("/admin/product-types", json={"name": "ANDROID"}, headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["type_duplicate"]
    assert len(client.get("/admin/product-types", headers=h).json()) == 1


def test_hero_slides_public_view_sorted_and_active_only():
    h = reset()
    client.post("/admin/hero-slides", json={"title": "Second", "image_url": "/2.jpg", "display_order": 2}, headers=h)
    client.post("/admin/hero-slides", json={"title": "First", "image_url": "/1.jpg", "display_order": 1}, headers=h)
    rows = client.post("/admin/hero-slides", json={"title": "Off", "image_url": "/0.jpg", "display_order": 0,
                                                   "is_active": False}, headers=h).json()
    assert [s["title"] for s in rows] == ["Off", "First", "Second"]
    assert [s["title"] for s in client.get("/hero-slides").json()] == ["First", "Second"]


def test_oversized_upload_rejected():
    h = reset()
    r = client.post("/admin/uploads/hero", files={"file": ("big.jpg", b"0" * (6 * MIB), "image/jpeg")}, headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["file_too_large"]


def test_upload_then_fetch_media():
    h = reset()
    data = b"\x89PNG" + b"0" * (4 * MIB)
    r = client.post("/admin/uploads/product", files={"file": ("tv.png", data, "image/png")}, headers=h)
    assert r.status_code == 200
    url = r.json()["url"]
    assert "/media/product-images/product-" in url

    media = client.get(urlparse(url).path)
    assert media.status_code == 200
    assert media.content == data
    assert media.headers["content-type"] == "image/png"


def test_unknown_upload_kind_is_404():
    h = reset()
    r = client.post("/admin/uploads/banner", files={"file": ("a.png", b"x", "image/png")}, headers=h)
    assert r.status_code == 404


def test_unknown_type_is_rejected():
    h = reset()
    r = client.post("/admin/products", json={"category": "32 inch", "model": "Gold Series",
                                             "product_type": "Nonexistent", "price": 1}, headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["type_unknown"]
    assert client.get("/admin/products", headers=h).json() == []


def test_category_choices_combine_models_and_types():
    h = reset()
    client.post("/admin/product-types", json={"name": "Android"}, headers=h)
    body = client.get("/admin/categories/50 inch/choices", headers=h).json()
    assert body["types"] == ["Android"]
    assert body["combinations"] == [{"model": "Google TV", "product_type": "Android"},
                                    {"model": "4K UHD Smart", "product_type": "Android"}]

    untyped = client.get("/admin/categories/24 inch/choices", headers=h).json()
    assert untyped["types"] == []
    assert {"model": "Smart Frameless", "product_type": ""} in untyped["combinations"]

    r = client.get("/admin/categories/99 inch/choices", headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["category_invalid"]


def test_upload_reads_at_most_one_byte_past_limit(monkeypatch):
    from osaka import storage

    seen = []
    real_check = storage.check_image

    def spy(image):
        seen.append(image.size)
        real_check(image)

    monkeypatch.setattr(storage, "check_image", spy)
    h = reset()
    r = client.post("/admin/uploads/hero", files={"file": ("big.jpg", b"0" * (8 * MIB), "image/jpeg")}, headers=h)
    assert r.status_code == 422
    assert r.json()["violations"] == ["file_too_large"]
    assert seen == [storage.MAX_IMAGE_BYTES + 1]


def test_path_like_filename_cannot_escape_bucket():
    h = reset()
    r = client.post("/admin/uploads/hero",
                    files={"file": ("tv.png/../../product-images/owned", b"\x89PNG", "image/png")}, headers=h)
    assert r.status_code == 200
    path = urlparse(r.json()["url"]).path
    assert path.startswith("/media/hero-images/") and path.endswith(".png")
    assert ".." not in path and path.count("/") == 3
    assert client.get(path).content == b"\x89PNG"
