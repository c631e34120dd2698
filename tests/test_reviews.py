"""Test curation review endpoints"""

PASSING_SCORES = [5, 4, 4, 3, 4, 3, 4, 3]  # 30 / 8 = 3.75
FAILING_SCORES = [1, 2, 3, 2, 1, 3, 2, 2]  # 16 / 8 = 2.00


def test_curator_approves_product(client, test_curator, test_seller, pending_product, auth_headers, fetch_user):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": PASSING_SCORES, "comment": "Bagus"},
        headers=auth_headers(test_curator),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["product_status"] == "approved"
    assert data["average_score"] == 3.75
    assert data["curator_points_earned"] == 300
    assert data["seller_points_earned"] == 10
    assert data["review"]["scores"] == PASSING_SCORES
    assert data["review"]["comment"] == "Bagus"
    assert data["review"]["curator_id"] == test_curator["id"]

    assert fetch_user(test_curator["id"])["curator_points"] == 400
    assert fetch_user(test_seller["id"])["seller_points"] == 10


def test_curator_rejects_product(client, test_curator, pending_product, auth_headers, fetch_product):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": FAILING_SCORES},
        headers=auth_headers(test_curator),
    )
    assert response.status_code == 201
    assert response.json()["product_status"] == "rejected"
    assert response.json()["seller_points_earned"] == 5
    assert fetch_product(pending_product["id"])["status"] == "rejected"


def test_already_reviewed_is_conflict(client, test_curator, approved_product, auth_headers):
    response = client.post(
        "/api/reviews",
        json={"product_id": approved_product["id"], "scores": PASSING_SCORES},
        headers=auth_headers(test_curator),
    )
    assert response.status_code == 409
    assert response.json() == {"detail": "Product has already been reviewed", "error": "invalid_state"}


def test_wrong_number_of_scores(client, test_curator, pending_product, auth_headers):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": [4, 4, 4]},
        headers=auth_headers(test_curator),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_score_out_of_range(client, test_curator, pending_product, auth_headers):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": [4, 4, 4, 4, 4, 4, 4, 9]},
        headers=auth_headers(test_curator),
    )
    assert response.status_code == 400


def test_seller_cannot_review(client, test_seller, pending_product, auth_headers):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": PASSING_SCORES},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 403


def test_unapproved_curator_cannot_review(client, pending_curator, pending_product, auth_headers, fetch_product):
    response = client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": PASSING_SCORES},
        headers=auth_headers(pending_curator),
    )
    assert response.status_code == 403
    assert fetch_product(pending_product["id"])["status"] == "pending"


def test_review_missing_product(client, test_curator, auth_headers):
    response = client.post(
        "/api/reviews",
        json={"product_id": "7d9c6f3e-0000-4000-8000-000000000000", "scores": PASSING_SCORES},
        headers=auth_headers(test_curator),
    )
    assert response.status_code == 404


def test_list_reviews_by_product(client, test_curator, make_product, auth_headers):
    first = make_product(title="Satu")
    second = make_product(title="Dua")
    for product in (first, second):
        client.post(
            "/api/reviews",
            json={"product_id": product["id"], "scores": PASSING_SCORES},
            headers=auth_headers(test_curator),
        )

    response = client.get("/api/reviews", params={"product_id": first["id"]}, headers=auth_headers(test_curator))
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["product_id"] == first["id"]
    assert data[0]["total_score"] == 30


def test_seller_sees_only_reviews_of_own_products(
    client, test_curator, test_seller, make_user, make_product, auth_headers
):
    other_seller = make_user("seller")
    mine = make_product()
    theirs = make_product(seller_id=other_seller["id"])
    for product in (mine, theirs):
        client.post(
            "/api/reviews",
            json={"product_id": product["id"], "scores": PASSING_SCORES},
            headers=auth_headers(test_curator),
        )

    response = client.get("/api/reviews", headers=auth_headers(test_seller))
    assert response.status_code == 200
    assert [r["product_id"] for r in response.json()] == [mine["id"]]


def test_list_reviews_requires_auth(client):
    assert client.get("/api/reviews").status_code == 401


def test_unapproved_curator_sees_only_own_product_reviews(
    client, test_curator, pending_curator, pending_product, auth_headers
):
    client.post(
        "/api/reviews",
        json={"product_id": pending_product["id"], "scores": FAILING_SCORES},
        headers=auth_headers(test_curator),
    )

    response = client.get("/api/reviews", headers=auth_headers(pending_curator))
    assert response.status_code == 200
    assert response.json() == []

    response = client.get("/api/reviews", headers=auth_headers(test_curator))
    assert [r["product_id"] for r in response.json()] == [pending_product["id"]]
