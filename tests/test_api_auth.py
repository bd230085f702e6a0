"""Tests for the auth and user administration endpoints."""

from sqlmodel import select

from app.models.user import User


class TestLocalAccounts:
    def test_signup_login_verify(self, client):
        signup = client.post(
            "/api/auth/signup",
            json={"email": "cleo@example.com", "password": "s3cret!", "role": "admin"},
        )
        assert signup.status_code == 201
        assert signup.json()["message"] == "User created"
        assert signup.json()["data"]["role"] == "user"
        assert "password_hash" not in signup.json()["data"]

        login = client.post(
            "/api/auth/login",
            json={"email": "cleo@example.com", "password": "s3cret!"},
        )
        assert login.status_code == 200
        token = login.json()["data"]["token"]
        assert login.cookies.get("auth_token") == token

        verify = client.get(
            "/api/auth/verify", headers={"Authorization": f"Bearer {token}"}
        )
        assert verify.json()["data"]["valid"] is True
        assert verify.json()["data"]["user"]["email"] == "cleo@example.com"

    def test_duplicate_email(self, client, customer):
        response = client.post(
            "/api/auth/signup",
            json={"email": customer.email, "password": "another1"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists"

    def test_wrong_password(self, client):
        client.post(
            "/api/auth/signup",
            json={"email": "dan@example.com", "password": "right-one"},
        )

        response = client.post(
            "/api/auth/login",
            json={"email": "dan@example.com", "password": "wrong-one"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid credentials"

    def test_verify_without_token(self, client):
        response = client.get("/api/auth/verify")

        assert response.status_code == 200
        assert response.json()["data"] == {"valid": False, "user": None}

    def test_verify_garbage_token(self, client):
        response = client.get(
            "/api/auth/verify", headers={"Authorization": "Bearer garbage"}
        )

        assert response.json()["data"]["valid"] is False

    def test_logout_clears_cookie(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert "auth_token" in response.headers["set-cookie"]


class TestIdentitySync:
    def test_sync_creates_user(self, client, session, idp_headers):
        headers = idp_headers("idp-eve", "eve@example.com", given_name="Eve")

        response = client.post("/api/auth/sync-user", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Eve"
        user = session.exec(select(User).where(User.email == "eve@example.com")).one()
        assert user.external_id == "idp-eve"

    def test_sync_without_email(self, client, idp_headers):
        response = client.post("/api/auth/sync-user", headers=idp_headers("idp-anon"))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_me_and_profile(self, client, customer_headers):
        me = client.get("/api/auth/me", headers=customer_headers)
        assert me.json()["data"]["email"] == "ada@example.com"

        updated = client.put(
            "/api/auth/profile",
            json={"first_name": "  Augusta ", "last_name": "King", "phone": "  "},
            headers=customer_headers,
        )
        assert updated.status_code == 200
        data = updated.json()["data"]
        assert data["first_name"] == "Augusta"
        assert data["phone"] is None

    def test_profile_requires_names(self, client, customer_headers):
        response = client.put(
            "/api/auth/profile",
            json={"first_name": " ", "last_name": "King"},
            headers=customer_headers,
        )

        assert response.status_code == 400


class TestUserAdmin:
    def test_list_and_promote(self, client, admin_headers, customer):
        listed = client.get("/api/users", headers=admin_headers)
        assert listed.status_code == 200
        assert {u["email"] for u in listed.json()["data"]} == {
            "admin@example.com",
            "ada@example.com",
        }

        response = client.patch(
            f"/api/users/{customer.id}/role",
            json={"role": "admin"},
            headers=admin_headers,
        )
        assert response.json()["data"]["role"] == "admin"

    def test_unknown_role(self, client, admin_headers, customer):
        response = client.patch(
            f"/api/users/{customer.id}/role",
            json={"role": "owner"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_requires_local_token(self, client, customer_headers):
        response = client.get("/api/users", headers=customer_headers)

        assert response.status_code == 401

    def test_unknown_user(self, client, admin_headers):
        response = client.get("/api/users/999", headers=admin_headers)

        assert response.status_code == 404

    def test_filter_by_role(self, client, admin_headers, customer):
        response = client.get("/api/users?role=admin", headers=admin_headers)

        assert [u["email"] for u in response.json()["data"]] == ["admin@example.com"]
