import pytest

import models
from auth import authenticate, create_access_token, verify_password
from conftest import DEMO_ADMIN, PASSWORD, headers_for
from create_admin import seed_admin
from errors import InvalidArgument
from users import create_user, get_user_by_email, normalize_email, validate_registration


def register(client, name="Foo Bar", email="Foo@Bar.com", password="secret-pass"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


class TestRegistration:

    def test_register_normalizes_email(self, client, db):
        response = register(client)

        assert response.status_code == 201
        assert response.json()["message"] == "User created successfully"
        user = get_user_by_email(db, "FOO@bar.COM")
        assert user.email == "foo@bar.com"
        assert user.role == models.RoleEnum.USER
        assert verify_password("secret-pass", user.password_hash)

    def test_duplicate_email_is_case_insensitive(self, client):
        assert register(client).status_code == 201
        response = register(client, email="foo@BAR.com")
        assert response.status_code == 400
        assert response.json()["detail"] == "An account with this email already exists"

    @pytest.mark.parametrize("name,email,password", [
        ("F", "foo@bar.com", "secret-pass"),
        ("Foo", "not-an-email", "secret-pass"),
        ("Foo", "foo@bar.com", "short"),
    ])
    def test_validation(self, name, email, password):
        with pytest.raises(InvalidArgument):
            validate_registration(name, email, password)

    def test_create_user_rejects_existing_address(self, db, author):
        with pytest.raises(InvalidArgument):
            create_user(db, "Alice Again", "ALICE@example.com", "hash")

    def test_normalize_email(self):
        assert normalize_email("  Foo@Bar.COM ") == "foo@bar.com"


class TestLogin:

    def test_login_with_different_case(self, client):
        register(client)

        response = client.post("/login", data={"email": "foo@bar.com", "password": "secret-pass"})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Welcome User Foo Bar"
        assert data["token_type"] == "bearer"
        assert "access_token" in response.cookies

    def test_cookie_authenticates_follow_up_requests(self, client):
        register(client)
        client.post("/login", data={"email": "FOO@BAR.COM", "password": "secret-pass"})

        response = client.get("/me")

        assert response.status_code == 200
        assert response.json()["email"] == "foo@bar.com"

    def test_wrong_password(self, client, author):
        response = client.post("/login", data={"email": author.email, "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid email or password"}
        assert "access_token" not in response.cookies

    def test_login_without_password(self, client, author):
        response = client.post("/login", data={"email": author.email})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidArgument"

    def test_unknown_email(self, client):
        response = client.post("/login", data={"email": "ghost@example.com", "password": PASSWORD})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, author):
        client.post("/login", data={"email": author.email, "password": PASSWORD})
        client.post("/logout")
        assert client.get("/me").status_code == 401


class TestStaticPrincipals:

    def test_static_principal_checked_first(self, db):
        actor = authenticate(db, "demo@blogify.com", "demo-password", [DEMO_ADMIN])
        assert actor.role == models.RoleEnum.ADMIN
        assert actor.id is None

    def test_static_principal_wrong_password(self, db):
        assert authenticate(db, "demo@blogify.com", "guess", [DEMO_ADMIN]) is None

    def test_no_static_principals_configured(self, db):
        assert authenticate(db, "demo@blogify.com", "demo-password", []) is None

    def test_demo_admin_can_moderate(self, client, author, make_post):
        post = make_post(author)
        login = client.post("/login", data={"email": "Demo@Blogify.com", "password": "demo-password"})
        assert login.json()["message"] == "Welcome Admin Demo Administrator"

        response = client.patch(f"/admin/posts/{post.id}", json={"status": "REJECTED"})

        assert response.status_code == 200
        assert response.json()["post"]["status"] == "REJECTED"


class TestCurrentActor:

    def test_me(self, client, author, author_headers):
        response = client.get("/me", headers=author_headers)
        assert response.json() == {"id": author.id, "name": "Alice Author",
                                   "email": "alice@example.com", "role": "USER"}

    def test_invalid_token(self, client):
        response = client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_token_for_deleted_user(self, client, db, author):
        headers = headers_for(author)
        db.delete(author)
        db.commit()
        assert client.get("/me", headers=headers).status_code == 401

    def test_token_without_subject(self, client):
        token = create_access_token({"id": 1})
        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestAdminAccounts:

    def test_admin_registers_admin(self, client, db, admin_headers):
        response = client.post("/auth/register-admin",
                               json={"name": "Second Admin", "email": "Second@Example.com",
                                     "password": "another-pass"},
                               headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["role"] == "ADMIN"
        assert get_user_by_email(db, "second@example.com").role == models.RoleEnum.ADMIN

    def test_user_cannot_register_admin(self, client, author_headers):
        response = client.post("/auth/register-admin",
                               json={"name": "Sneaky", "email": "sneaky@example.com",
                                     "password": "another-pass"},
                               headers=author_headers)
        assert response.status_code == 403

    def test_seed_admin_is_idempotent(self, db):
        first = seed_admin(db, email="Root@Blogify.com", password="root-pass", name="Root")
        second = seed_admin(db, email="other@blogify.com", password="other-pass", name="Other")

        assert first.id == second.id
        assert first.email == "root@blogify.com"
        assert db.query(models.User).count() == 1
