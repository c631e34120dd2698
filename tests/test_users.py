"""Test user account endpoints"""
import uuid


def _dev_headers(user_id):
    return {"Authorization": f"dev-token-{user_id}"}


# ============================================================================
# Registration
# ============================================================================

def test_register_seller_profile(client):
    user_id = str(uuid.uuid4())
    response = client.put(
        f"/api/users/{user_id}",
        json={"name": "Siti Rahma", "email": "siti@example.com", "role": "seller"},
        headers=_dev_headers(user_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == user_id
    assert data["role"] == "seller"
    assert data["seller_points"] == 0
    assert data["email_verified"] is False


def test_register_curator_starts_unapproved(client):
    user_id = str(uuid.uuid4())
    response = client.put(
        f"/api/users/{user_id}",
        json={"name": "Budi", "email": "budi@example.com", "role": "curator"},
        headers=_dev_headers(user_id),
    )
    assert response.status_code == 200
    assert response.json()["curator_approved"] is False


def test_cannot_self_assign_admin(client):
    user_id = str(uuid.uuid4())
    response = client.put(
        f"/api/users/{user_id}",
        json={"name": "Mallory", "email": "mallory@example.com", "role": "admin"},
        headers=_dev_headers(user_id),
    )
    assert response.status_code == 422


def test_cannot_register_for_another_identity(client):
    response = client.put(
        f"/api/users/{uuid.uuid4()}",
        json={"name": "Eve", "email": "eve@example.com"},
        headers=_dev_headers(str(uuid.uuid4())),
    )
    assert response.status_code == 403


def test_register_requires_auth(client):
    response = client.put(f"/api/users/{uuid.uuid4()}", json={"name": "Anon", "email": "anon@example.com"})
    assert response.status_code == 401


def test_reregistering_keeps_role(client, test_seller, auth_headers):
    response = client.put(
        f"/api/users/{test_seller['id']}",
        json={"name": "Renamed Seller", "email": test_seller["email"], "role": "curator"},
        headers=auth_headers(test_seller),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed Seller"
    assert response.json()["role"] == "seller"


def test_email_change_resets_verification(client, clean_database, make_user, auth_headers):
    user = make_user("client", email_verified=True)
    response = client.put(
        f"/api/users/{user['id']}",
        json={"name": user["name"], "email": "baru@example.com"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert response.json()["email_verified"] is False


def test_duplicate_email_rejected(client, test_seller):
    user_id = str(uuid.uuid4())
    response = client.put(
        f"/api/users/{user_id}",
        json={"name": "Copycat", "email": test_seller["email"]},
        headers=_dev_headers(user_id),
    )
    assert response.status_code == 400


def test_invalid_email_rejected(client):
    user_id = str(uuid.uuid4())
    response = client.put(
        f"/api/users/{user_id}",
        json={"name": "Typo", "email": "not-an-email"},
        headers=_dev_headers(user_id),
    )
    assert response.status_code == 422


def test_unregistered_identity_cannot_use_protected_endpoints(client):
    response = client.get("/api/orders", headers=_dev_headers(str(uuid.uuid4())))
    assert response.status_code == 401


# ============================================================================
# Reads
# ============================================================================

def test_user_reads_own_profile(client, test_buyer, auth_headers):
    response = client.get(f"/api/users/{test_buyer['id']}", headers=auth_headers(test_buyer))
    assert response.status_code == 200
    assert response.json()["email"] == test_buyer["email"]


def test_user_cannot_read_other_profile(client, test_buyer, test_seller, auth_headers):
    response = client.get(f"/api/users/{test_seller['id']}", headers=auth_headers(test_buyer))
    assert response.status_code == 403


def test_admin_lists_users_by_role(client, test_admin, test_seller, test_curator, auth_headers):
    response = client.get("/api/users/", params={"role": "seller"}, headers=auth_headers(test_admin))
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [test_seller["id"]]


def test_non_admin_cannot_list_users(client, test_seller, auth_headers):
    assert client.get("/api/users/", headers=auth_headers(test_seller)).status_code == 403


def test_seller_stats(client, test_seller, make_product, auth_headers):
    make_product()
    make_product(status="approved")
    make_product(status="approved")
    make_product(status="rejected")

    response = client.get(f"/api/users/{test_seller['id']}/stats", headers=auth_headers(test_seller))
    assert response.status_code == 200
    assert response.json() == {
        "user_id": test_seller["id"],
        "total_submissions": 4,
        "pending": 1,
        "approved": 2,
        "rejected": 1,
        "seller_points": 0,
    }


def test_stats_of_other_seller_forbidden(client, test_seller, make_user, auth_headers):
    other = make_user("seller")
    response = client.get(f"/api/users/{test_seller['id']}/stats", headers=auth_headers(other))
    assert response.status_code == 403


# ============================================================================
# Admin management
# ============================================================================

def test_admin_changes_role_and_points(client, test_admin, test_buyer, auth_headers):
    response = client.patch(
        f"/api/users/{test_buyer['id']}",
        json={"role": "seller", "seller_points": 15},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "seller"
    assert response.json()["seller_points"] == 15


def test_admin_cannot_set_negative_points(client, test_admin, test_curator, auth_headers):
    response = client.patch(
        f"/api/users/{test_curator['id']}", json={"curator_points": -5}, headers=auth_headers(test_admin)
    )
    assert response.status_code == 422


def test_role_change_resets_curator_approval(client, test_admin, test_curator, auth_headers):
    response = client.patch(
        f"/api/users/{test_curator['id']}", json={"role": "seller"}, headers=auth_headers(test_admin)
    )
    assert response.json()["curator_approved"] is False


def test_non_admin_cannot_patch_users(client, test_seller, auth_headers):
    response = client.patch(
        f"/api/users/{test_seller['id']}", json={"seller_points": 9999}, headers=auth_headers(test_seller)
    )
    assert response.status_code == 403


def test_admin_deletes_user(client, clean_database, test_admin, test_buyer, auth_headers):
    response = client.delete(f"/api/users/{test_buyer['id']}", headers=auth_headers(test_admin))
    assert response.status_code == 204
    assert clean_database.table("users").select("id").eq("id", test_buyer["id"]).execute().data == []


def test_admin_cannot_delete_self(client, test_admin, auth_headers):
    response = client.delete(f"/api/users/{test_admin['id']}", headers=auth_headers(test_admin))
    assert response.status_code == 403


def test_delete_missing_user(client, test_admin, auth_headers):
    response = client.delete(f"/api/users/{uuid.uuid4()}", headers=auth_headers(test_admin))
    assert response.status_code == 404
