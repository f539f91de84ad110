from fastapi.testclient import TestClient

from empowerlink.models.user import User


def register_user(client: TestClient, email: str, password: str, user_type: str = "vendor") -> dict:
    payload = {
        "email": email,
        "password": password,
        "first_name": "Priya",
        "last_name": "Gupta",
        "location": "Pune",
        "user_type": user_type,
    }
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login(client: TestClient, email: str, password: str) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def submit_passport(client: TestClient, token: str) -> dict:
    files = {
        "document_front": ("front.png", b"front-bytes", "image/png"),
        "document_back": ("back.png", b"back-bytes", "image/png"),
    }
    response = client.post(
        "/verifications",
        data={"document_type": "passport"},
        files=files,
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def admin_id(database) -> int:
    with database.session() as session:
        return session.query(User.id).filter(User.email == "admin@example.com").scalar()


def test_health_and_request_id(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


def test_auth_register_and_login(client: TestClient):
    user = register_user(client, "vendor1@example.com", "Password123!")
    assert user["role"] == "member"
    assert user["user_type"] == "vendor"
    assert login(client, "vendor1@example.com", "Password123!")

    duplicate = client.post(
        "/auth/register",
        json={
            "email": "vendor1@example.com",
            "password": "Password123!",
            "first_name": "Priya",
            "last_name": "Gupta",
            "user_type": "vendor",
        },
    )
    assert duplicate.status_code == 400


def test_admin_accounts_cannot_self_register(client: TestClient):
    response = client.post(
        "/auth/register",
        json={
            "email": "sneaky@example.com",
            "password": "Password123!",
            "first_name": "Sneaky",
            "last_name": "User",
            "user_type": "admin",
        },
    )
    assert response.status_code == 422


def test_bad_credentials_and_bad_token(client: TestClient):
    response = client.post("/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    assert response.status_code == 401

    response = client.get("/verifications", headers=auth_headers("not-a-token"))
    assert response.status_code == 401


def test_verification_review_flow(client: TestClient, database):
    register_user(client, "ngo1@example.com", "Password123!", user_type="ngo")
    token = login(client, "ngo1@example.com", "Password123!")
    created = submit_passport(client, token)
    assert created["status"] == "pending"
    assert created["document_type"] == "passport"
    assert created["document_front_ref"]
    assert created["document_back_ref"]

    admin_token = login(client, "admin@example.com", "Admin1234!")
    listed = client.get("/verifications", headers=auth_headers(admin_token))
    assert listed.status_code == 200
    assert listed.json()[0]["id"] == created["id"]
    assert listed.json()[0]["subject"]["email"] == "ngo1@example.com"

    refused = client.patch(
        f"/verifications/{created['id']}",
        json={"status": "rejected", "review_notes": ""},
        headers=auth_headers(admin_token),
    )
    assert refused.status_code == 400
    assert refused.json()["detail"] == "Review notes are required for rejection."

    current = client.get(f"/verifications/{created['id']}", headers=auth_headers(admin_token))
    assert current.json()["status"] == "pending"

    rejected = client.patch(
        f"/verifications/{created['id']}",
        json={"status": "rejected", "review_notes": "blurry image", "reviewed_by": 424242},
        headers=auth_headers(admin_token),
    )
    assert rejected.status_code == 200, rejected.text
    body = rejected.json()
    assert body["status"] == "rejected"
    assert body["review_notes"] == "blurry image"
    assert body["reviewed_by"] == admin_id(database)


def test_subjects_cannot_review(client: TestClient):
    register_user(client, "vendor2@example.com", "Password123!")
    token = login(client, "vendor2@example.com", "Password123!")
    created = submit_passport(client, token)

    response = client.patch(
        f"/verifications/{created['id']}",
        json={"status": "approved"},
        headers=auth_headers(token),
    )
    assert response.status_code == 403

    anonymous = client.patch(f"/verifications/{created['id']}", json={"status": "approved"})
    assert anonymous.status_code == 401

    missing = client.patch(
        "/verifications/9999",
        json={"status": "approved"},
        headers=auth_headers(login(client, "admin@example.com", "Admin1234!")),
    )
    assert missing.status_code == 404


def test_listing_is_scoped_per_subject(client: TestClient):
    register_user(client, "vendor3@example.com", "Password123!")
    register_user(client, "corp3@example.com", "Password123!", user_type="corporate")
    vendor_token = login(client, "vendor3@example.com", "Password123!")
    corp_token = login(client, "corp3@example.com", "Password123!")
    mine = submit_passport(client, vendor_token)
    theirs = submit_passport(client, corp_token)

    listed = client.get("/verifications", headers=auth_headers(vendor_token))
    assert [item["id"] for item in listed.json()] == [mine["id"]]

    hidden = client.get(f"/verifications/{theirs['id']}", headers=auth_headers(vendor_token))
    assert hidden.status_code == 404

    assert client.get("/verifications").status_code == 401


def test_submission_requires_login_and_content(client: TestClient):
    response = client.post(
        "/verifications",
        data={"document_type": "passport"},
        files={"document_front": ("front.png", b"bytes", "image/png")},
    )
    assert response.status_code == 401

    register_user(client, "vendor4@example.com", "Password123!")
    token = login(client, "vendor4@example.com", "Password123!")
    empty = client.post(
        "/verifications",
        data={"document_type": "passport"},
        files={"document_front": ("front.png", b"", "image/png")},
        headers=auth_headers(token),
    )
    assert empty.status_code == 400


def test_admin_user_deletion_flow(client: TestClient):
    user = register_user(client, "vendor5@example.com", "Password123!")
    token = login(client, "vendor5@example.com", "Password123!")
    admin_token = login(client, "admin@example.com", "Admin1234!")

    assert client.delete(f"/admin/users/{user['id']}").status_code == 401
    assert client.delete(f"/admin/users/{user['id']}", headers=auth_headers(token)).status_code == 403

    response = client.delete(f"/admin/users/{user['id']}", headers=auth_headers(admin_token))
    assert response.status_code == 200
    assert response.json() == {
        "message": "User deleted successfully.",
        "user_id": user["id"],
        "audit_recorded": True,
    }

    again = client.delete(f"/admin/users/{user['id']}", headers=auth_headers(admin_token))
    assert again.status_code == 404

    audit = client.get("/admin/audit", params={"action": "user_deleted"}, headers=auth_headers(admin_token))
    assert audit.status_code == 200
    entries = audit.json()
    assert len(entries) == 1
    assert entries[0]["target_id"] == str(user["id"])

    assert client.get("/admin/audit", headers=auth_headers(token)).status_code == 401


def test_rejected_submission_stores_no_documents(client: TestClient):
    register_user(client, "vendor6@example.com", "Password123!")
    token = login(client, "vendor6@example.com", "Password123!")
    stored_before = sorted(client.app.state.storage.fallback_dir.iterdir())

    response = client.post(
        "/verifications",
        data={"document_type": "passport"},
        files={
            "document_front": ("front.png", b"unique-front-bytes", "image/png"),
            "document_back": ("back.png", b"", "image/png"),
        },
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert sorted(client.app.state.storage.fallback_dir.iterdir()) == stored_before


def test_audit_filter_by_actor_zero_matches_nothing(client: TestClient, database):
    user = register_user(client, "vendor7@example.com", "Password123!")
    admin_token = login(client, "admin@example.com", "Admin1234!")
    assert client.delete(f"/admin/users/{user['id']}", headers=auth_headers(admin_token)).status_code == 200

    unfiltered = client.get("/admin/audit", headers=auth_headers(admin_token))
    assert [entry["actor_id"] for entry in unfiltered.json()] == [admin_id(database)]

    filtered = client.get("/admin/audit", params={"actor_id": 0}, headers=auth_headers(admin_token))
    assert filtered.status_code == 200
    assert filtered.json() == []
