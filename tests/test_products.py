"""Test product submission and catalog endpoints"""


def _form(**overrides):
    data = {
        "title": "Kursus Desain Logo",
        "description": "Video kursus desain logo untuk UMKM",
        "category": "ecourse",
        "price": "150000",
        "stock": "20",
    }
    data.update(overrides)
    return data


# ============================================================================
# Submission
# ============================================================================

def test_seller_submits_product_with_files(client, test_seller, auth_headers, storage, fetch_user):
    """Seller submission uploads files, creates a pending product and awards 2 points"""
    response = client.post(
        "/api/products",
        data=_form(),
        files={
            "thumbnail": ("cover.png", b"\x89PNG fake", "image/png"),
            "content": ("course.zip", b"PK fake", "application/zip"),
        },
        headers=auth_headers(test_seller),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["points_earned"] == 2
    product = data["product"]
    assert product["status"] == "pending"
    assert product["seller_id"] == test_seller["id"]
    assert product["price"] == 150000.0
    assert product["stock"] == 20
    assert product["thumbnail_url"] == "https://files.test/kurasi/thumbnails/cover.png"
    assert product["content_url"] == "https://files.test/kurasi/content/course.zip"
    assert len(storage.uploads) == 2
    assert fetch_user(test_seller["id"])["seller_points"] == 2


def test_submit_without_files(client, test_seller, auth_headers):
    response = client.post("/api/products", data=_form(), headers=auth_headers(test_seller))
    assert response.status_code == 201
    assert response.json()["product"]["thumbnail_url"] is None


def test_submit_requires_auth(client):
    response = client.post("/api/products", data=_form())
    assert response.status_code == 401


def test_client_cannot_submit(client, test_buyer, auth_headers, storage):
    response = client.post(
        "/api/products",
        data=_form(),
        files={"thumbnail": ("cover.png", b"img", "image/png")},
        headers=auth_headers(test_buyer),
    )
    assert response.status_code == 403
    assert response.json() == {"detail": "Not authorized", "error": "forbidden"}
    assert storage.uploads == []


def test_submit_invalid_category(client, test_seller, auth_headers):
    response = client.post("/api/products", data=_form(category="music"), headers=auth_headers(test_seller))
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_submit_negative_price(client, test_seller, auth_headers):
    response = client.post("/api/products", data=_form(price="-5"), headers=auth_headers(test_seller))
    assert response.status_code == 400


def test_failed_upload_creates_nothing(client, clean_database, test_seller, auth_headers, storage, fetch_user):
    storage.fail = True
    response = client.post(
        "/api/products",
        data=_form(),
        files={"thumbnail": ("cover.png", b"img", "image/png")},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 502
    assert clean_database.table("products").select("id").execute().data == []
    assert fetch_user(test_seller["id"])["seller_points"] == 0


# ============================================================================
# Catalog reads
# ============================================================================

def test_anonymous_catalog_shows_only_approved(client, pending_product, approved_product):
    response = client.get("/api/products")
    assert response.status_code == 200
    ids = [p["id"] for p in response.json()]
    assert ids == [approved_product["id"]]


def test_anonymous_cannot_list_pending(client, pending_product):
    response = client.get("/api/products", params={"status": "pending"})
    assert response.status_code == 200
    assert response.json() == []


def test_seller_lists_own_submissions(client, test_seller, pending_product, approved_product, auth_headers):
    response = client.get(
        "/api/products",
        params={"seller_id": test_seller["id"]},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 200
    assert {p["id"] for p in response.json()} == {pending_product["id"], approved_product["id"]}


def test_catalog_filters_and_pagination(client, make_product):
    for i in range(5):
        make_product(title=f"Ebook {i}", status="approved")
    make_product(title="Software", category="software", status="approved")

    response = client.get("/api/products", params={"category": "ebook", "limit": 2, "offset": 1})
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert all(p["category"] == "ebook" for p in data)


def test_get_product_by_id(client, approved_product):
    response = client.get(f"/api/products/{approved_product['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == approved_product["title"]


def test_pending_product_hidden_from_others(client, pending_product, test_buyer, test_seller, auth_headers):
    assert client.get(f"/api/products/{pending_product['id']}").status_code == 404
    assert client.get(
        f"/api/products/{pending_product['id']}", headers=auth_headers(test_buyer)
    ).status_code == 404
    assert client.get(
        f"/api/products/{pending_product['id']}", headers=auth_headers(test_seller)
    ).status_code == 200


def test_get_missing_product(client):
    response = client.get("/api/products/7d9c6f3e-0000-4000-8000-000000000000")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_review_queue_for_curators(client, test_curator, pending_product, approved_product, auth_headers):
    response = client.get("/api/products/pending", headers=auth_headers(test_curator))
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [pending_product["id"]]


def test_review_queue_denied_to_unapproved_curator(client, pending_curator, auth_headers):
    response = client.get("/api/products/pending", headers=auth_headers(pending_curator))
    assert response.status_code == 403


# ============================================================================
# Edit and delete
# ============================================================================

def test_owner_updates_listing(client, test_seller, pending_product, auth_headers):
    response = client.put(
        f"/api/products/{pending_product['id']}",
        json={"title": "Belajar Python Lanjut", "price": 90000},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Belajar Python Lanjut"
    assert data["price"] == 90000.0
    assert data["status"] == "pending"


def test_status_is_not_editable(client, test_seller, pending_product, auth_headers):
    response = client.put(
        f"/api/products/{pending_product['id']}",
        json={"status": "approved"},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "pending"


def test_other_seller_cannot_update(client, make_user, pending_product, auth_headers):
    other = make_user("seller")
    response = client.put(
        f"/api/products/{pending_product['id']}",
        json={"title": "Hijacked"},
        headers=auth_headers(other),
    )
    assert response.status_code == 403


def test_admin_updates_any_listing(client, test_admin, pending_product, auth_headers):
    response = client.put(
        f"/api/products/{pending_product['id']}",
        json={"stock": 0},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 200
    assert response.json()["stock"] == 0


def test_only_admin_deletes(client, clean_database, test_admin, test_seller, approved_product, auth_headers):
    response = client.delete(f"/api/products/{approved_product['id']}", headers=auth_headers(test_seller))
    assert response.status_code == 403

    response = client.delete(f"/api/products/{approved_product['id']}", headers=auth_headers(test_admin))
    assert response.status_code == 204
    assert clean_database.table("products").select("id").execute().data == []


def test_delete_missing_product(client, test_admin, auth_headers):
    response = client.delete(
        "/api/products/7d9c6f3e-0000-4000-8000-000000000000", headers=auth_headers(test_admin)
    )
    assert response.status_code == 404
