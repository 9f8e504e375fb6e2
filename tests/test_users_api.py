import uuid

from fastapi.testclient import TestClient

from .conftest import headers_for


def test_register_user(client: TestClient):
    user_id = str(uuid.uuid4())
    response = client.post("/api/v1/users", json={"user_id": user_id, "display_name": "Alex Rao"})
    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == user_id
    assert data["role"] == "student"
    assert data["total_credits"] == 0
    assert data["avatar_url"] == "https://ui-avatars.com/api/?name=Alex%20Rao&background=random"


def test_register_twice_conflicts(client: TestClient):
    payload = {"user_id": str(uuid.uuid4()), "display_name": "Alex Rao"}
    client.post("/api/v1/users", json=payload)
    response = client.post("/api/v1/users", json=payload)
    assert response.status_code == 409


def test_me_requires_identity(client: TestClient, student):
    assert client.get("/api/v1/users/me").status_code == 401
    assert client.get("/api/v1/users/me", headers={"X-User-Id": str(uuid.uuid4())}).status_code == 401

    response = client.get("/api/v1/users/me", headers=headers_for(student))
    assert response.status_code == 200
    assert response.json()["display_name"] == "Sam Student"


def test_update_profile(client: TestClient, student):
    response = client.patch(
        "/api/v1/users/me",
        json={"display_name": "Samira", "bio": "Likes robots"},
        headers=headers_for(student),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["display_name"] == "Samira"
    assert data["bio"] == "Likes robots"


def test_promote_with_secret(client: TestClient, student):
    url = f"/api/v1/users/{student.user_id}/promote"

    response = client.post(url, json={"secret_key": "wrong"})
    assert response.status_code == 401

    response = client.post(url, json={"secret_key": "let-me-organize"})
    assert response.status_code == 200
    assert response.json()["role"] == "organizer"

    # One-way and repeatable.
    response = client.post(url, json={"secret_key": "let-me-organize"})
    assert response.status_code == 200
    assert response.json()["role"] == "organizer"


def test_promote_unknown_user(client: TestClient):
    response = client.post(f"/api/v1/users/{uuid.uuid4()}/promote", json={"secret_key": "let-me-organize"})
    assert response.status_code == 404


def test_credit_history_is_private(client: TestClient, organizer, student):
    client.post(
        "/api/v1/ledger/bonuses",
        json={"user_id": str(student.user_id), "amount": 4, "reason": "Tidy workspace"},
        headers=headers_for(organizer),
    )
    url = f"/api/v1/users/{student.user_id}/credits"

    own = client.get(url, headers=headers_for(student))
    assert own.status_code == 200
    assert [(entry["amount"], entry["reason"]) for entry in own.json()] == [(4, "Tidy workspace")]
    assert own.json()[0]["issuer"]["display_name"] == "Olivia Organizer"

    assert client.get(url, headers=headers_for(organizer)).status_code == 200

    other = client.get(f"/api/v1/users/{organizer.user_id}/credits", headers=headers_for(student))
    assert other.status_code == 403
