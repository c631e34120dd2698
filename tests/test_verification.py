"""Test email verification with one-time codes"""
import re
from datetime import timedelta

from database_adapter import utcnow_naive


def _sent_code(notifier):
    return re.search(r"\b(\d{6})\b", notifier.sent[-1]["body"]).group(1)


def test_request_and_verify_code(client, test_buyer, auth_headers, notifier, fetch_user):
    headers = auth_headers(test_buyer)
    response = client.post("/api/verification/otp", headers=headers)

    assert response.status_code == 200
    assert response.json()["email"] == test_buyer["email"]
    assert notifier.sent[-1]["recipient"] == test_buyer["email"]

    response = client.post("/api/verification/otp/verify", json={"code": _sent_code(notifier)}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"verified": True}
    assert fetch_user(test_buyer["id"])["email_verified"] is True


def test_wrong_code_rejected(client, test_buyer, auth_headers, notifier, fetch_user):
    headers = auth_headers(test_buyer)
    client.post("/api/verification/otp", headers=headers)
    wrong = "000000" if _sent_code(notifier) != "000000" else "111111"

    response = client.post("/api/verification/otp/verify", json={"code": wrong}, headers=headers)
    assert response.status_code == 400
    assert fetch_user(test_buyer["id"])["email_verified"] is False


def test_new_code_replaces_old(client, clean_database, test_buyer, auth_headers, notifier):
    headers = auth_headers(test_buyer)
    client.post("/api/verification/otp", headers=headers)
    client.post("/api/verification/otp", headers=headers)

    codes = clean_database.table("verification_codes").select("*").eq("identifier", test_buyer["email"]).execute()
    assert len(codes.data) == 1
    assert codes.data[0]["code"] == _sent_code(notifier)


def test_expired_code_rejected_and_spent(client, clean_database, test_buyer, auth_headers, notifier):
    headers = auth_headers(test_buyer)
    client.post("/api/verification/otp", headers=headers)
    code = _sent_code(notifier)
    clean_database.table("verification_codes").update(
        {"expires_at": utcnow_naive() - timedelta(minutes=1)}
    ).eq("identifier", test_buyer["email"]).execute()

    response = client.post("/api/verification/otp/verify", json={"code": code}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Verification code has expired"
    assert clean_database.table("verification_codes").select("id").execute().data == []


def test_already_verified(client, make_user, auth_headers):
    user = make_user("client", email_verified=True)
    response = client.post("/api/verification/otp", headers=auth_headers(user))
    assert response.status_code == 409


def test_code_must_be_six_characters(client, test_buyer, auth_headers):
    response = client.post("/api/verification/otp/verify", json={"code": "12"}, headers=auth_headers(test_buyer))
    assert response.status_code == 422
