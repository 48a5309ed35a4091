import pytest

from api import create_app
from utils.exceptions import ConfigurationError

from tests.helpers import REFRESH_URL, register_and_login, set_cookies

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
LOGOUT_URL = "/api/v1/auth/logout"
ME_URL = "/api/v1/auth/me"

CREDS = {"email": "a@x.com", "password": "Passw0rd1"}


def replay_refresh(app, token):
    """POST to the refresh endpoint from a cookie-less client holding only `token`."""
    return app.test_client(use_cookies=False).post(REFRESH_URL, headers={"Cookie": f"refreshToken={token}"})


class TestRegister:
    def test_created(self, client):
        resp = client.post(REGISTER_URL, json=CREDS)
        body = resp.get_json()
        assert resp.status_code == 201
        assert body["message"] == "User registered successfully"
        assert body["user_id"]
        assert "Set-Cookie" not in resp.headers

    def test_duplicate_email(self, client):
        client.post(REGISTER_URL, json=CREDS)
        resp = client.post(REGISTER_URL, json=CREDS)
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "CONFLICT"

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"email": "not-an-email", "password": "Passw0rd1"}, "email"),
            ({"email": "a@x.com", "password": "short1A"}, "password"),
            ({"email": "a@x.com", "password": "alllowercase1"}, "password"),
            ({"email": "a@x.com", "password": "NoDigitsHere"}, "password"),
            ({"email": "a@x.com", "password": "A1" + "a" * 127}, "password"),
            ({"password": "Passw0rd1"}, "email"),
        ],
    )
    def test_validation(self, client, payload, field):
        resp = client.post(REGISTER_URL, json=payload)
        body = resp.get_json()
        assert resp.status_code == 422
        assert body["error"] == "VALIDATION_ERROR"
        assert field in body["details"]

    def test_unknown_fields_are_ignored(self, client):
        resp = client.post(REGISTER_URL, json={**CREDS, "is_admin": True})
        assert resp.status_code == 201


class TestLogin:
    def test_sets_cookies_not_body_tokens(self, client):
        resp = register_and_login(client)
        body = resp.get_json()
        cookies = set_cookies(resp)

        assert body == {"message": "Login successful", "user_id": body["user_id"]}
        access, access_header = cookies["token"]
        refresh, refresh_header = cookies["refreshToken"]
        assert access not in resp.get_data(as_text=True)
        assert refresh not in resp.get_data(as_text=True)

        assert "HttpOnly" in access_header
        assert "SameSite=Strict" in access_header
        assert "Max-Age=900" in access_header
        assert "Path=/;" in access_header or access_header.endswith("Path=/")
        assert "Secure" not in access_header

        assert "HttpOnly" in refresh_header
        assert "SameSite=Strict" in refresh_header
        assert "Max-Age=604800" in refresh_header
        assert f"Path={REFRESH_URL}" in refresh_header
        assert len(refresh) == 80

    def test_cookies_are_secure_in_production(self):
        app = create_app("prod", JWT_SECRET="prod-secret-that-is-long-enough-for-hs256", DATABASE_URL="sqlite://")
        with app.app_context():
            client = app.test_client()
            resp = register_and_login(client)
            for _, header in set_cookies(resp).values():
                assert "Secure" in header

    def test_invalid_credentials_are_generic(self, client):
        client.post(REGISTER_URL, json=CREDS)
        wrong_password = client.post(LOGIN_URL, json={"email": "a@x.com", "password": "Wrong0ne1"})
        unknown_email = client.post(LOGIN_URL, json={"email": "b@x.com", "password": "Passw0rd1"})
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.get_json() == unknown_email.get_json()
        assert wrong_password.get_json()["error"] == "INVALID_CREDENTIALS"
        assert "Set-Cookie" not in wrong_password.headers

    def test_missing_fields(self, client):
        resp = client.post(LOGIN_URL, json={"email": "a@x.com"})
        assert resp.status_code == 422
        assert "password" in resp.get_json()["details"]


class TestRefresh:
    def test_rotates_cookies(self, client):
        login = register_and_login(client)
        resp = client.post(REFRESH_URL)
        assert resp.status_code == 200
        assert resp.get_json()["user_id"] == login.get_json()["user_id"]

        old = set_cookies(login)
        new = set_cookies(resp)
        assert new["refreshToken"][0] != old["refreshToken"][0]
        assert new["token"][0]
        assert f"Path={REFRESH_URL}" in new["refreshToken"][1]

    def test_reusing_rotated_token_fails_and_clears_cookies(self, app, client):
        login = register_and_login(client)
        original = set_cookies(login)["refreshToken"][0]
        assert client.post(REFRESH_URL).status_code == 200

        resp = replay_refresh(app, original)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "INVALID_REFRESH_TOKEN"
        cleared = set_cookies(resp)
        assert cleared["token"][0] == ""
        assert cleared["refreshToken"][0] == ""
        assert f"Path={REFRESH_URL}" in cleared["refreshToken"][1]

    def test_missing_cookie(self, client):
        resp = client.post(REFRESH_URL)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Refresh token is required"

    def test_refresh_keeps_session_alive(self, client):
        register_and_login(client)
        for _ in range(3):
            assert client.post(REFRESH_URL).status_code == 200
        assert client.get(ME_URL).status_code == 200


class TestLogout:
    def test_logout_revokes_and_clears(self, app, client):
        register_and_login(client)
        rotated = client.post(REFRESH_URL)
        newest = set_cookies(rotated)["refreshToken"][0]

        resp = client.post(LOGOUT_URL)
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logout successful"}
        cleared = set_cookies(resp)
        assert cleared["token"][0] == "" and cleared["refreshToken"][0] == ""

        assert replay_refresh(app, newest).status_code == 401
        assert client.get(ME_URL).status_code == 401

    def test_logout_requires_authentication(self, client):
        resp = client.post(LOGOUT_URL)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"


class TestMe:
    def test_me(self, auth_client):
        resp = auth_client.get(ME_URL)
        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["email"] == "a@x.com"
        assert "password_hash" not in data
        assert "refresh_token_hash" not in data

    def test_bearer_header(self, app, auth_client, manager):
        user = manager.users.find_by_email("a@x.com")
        token = manager.access_tokens.issue(user.id)
        resp = app.test_client(use_cookies=False).get(ME_URL, headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

    def test_invalid_token(self, app):
        resp = app.test_client(use_cookies=False).get(ME_URL, headers={"Cookie": "token=garbage"})
        assert resp.status_code == 401

    def test_bearer_header_used_when_cookie_is_stale(self, app, manager):
        client = app.test_client(use_cookies=False)
        client.post(REGISTER_URL, json=CREDS)
        user = manager.users.find_by_email("a@x.com")
        token = manager.access_tokens.issue(user.id)
        headers = {"Cookie": "token=expired-or-garbage", "Authorization": f"Bearer {token}"}
        assert client.get(ME_URL, headers=headers).status_code == 200

    def test_user_is_loaded_through_the_repository(self, auth_client, manager, monkeypatch):
        monkeypatch.setattr(manager.users, "find_by_id", lambda user_id: None)
        resp = auth_client.get(ME_URL)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"


def test_app_refuses_to_start_without_secret():
    with pytest.raises(ConfigurationError):
        create_app("testing", JWT_SECRET=None)


def test_auth_rate_limit():
    app = create_app("testing", RATELIMIT_ENABLED=True, RATELIMIT_AUTH=2)
    with app.app_context():
        client = app.test_client()
        for _ in range(2):
            assert client.post(LOGIN_URL, json=CREDS).status_code == 401
        resp = client.post(LOGIN_URL, json=CREDS)
        assert resp.status_code == 429
        assert resp.get_json()["error"] == "RATE_LIMITED"
