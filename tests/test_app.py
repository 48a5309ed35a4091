from flask import abort

from api import create_app
from utils.ratelimit import RateLimiter


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": "ok", "version": "1.0.0"}


def test_root(client):
    assert client.get("/").get_json()["health"] == "/api/v1/health"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"


def test_wrong_method(client):
    resp = client.get("/api/v1/auth/login")
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "METHOD_NOT_ALLOWED"


def test_oversized_body(client):
    resp = client.post("/api/v1/auth/register", data="x" * 20000, content_type="application/json")
    assert resp.status_code == 413


class TestRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = RateLimiter(limit=2, window=60)
        assert limiter.allow("1.2.3.4", now=0)
        assert limiter.allow("1.2.3.4", now=1)
        assert not limiter.allow("1.2.3.4", now=2)
        assert limiter.allow("5.6.7.8", now=2)

    def test_window_slides(self):
        limiter = RateLimiter(limit=1, window=60)
        assert limiter.allow("k", now=0)
        assert not limiter.allow("k", now=59)
        assert limiter.allow("k", now=60)

    def test_reset(self):
        limiter = RateLimiter(limit=1, window=60)
        limiter.allow("k", now=0)
        limiter.reset()
        assert limiter.allow("k", now=1)

    def test_idle_clients_are_forgotten(self):
        limiter = RateLimiter(limit=5, window=1)
        for i in range(1000):
            limiter.allow(f"10.0.{i // 256}.{i % 256}", now=0)
        assert len(limiter.hits) == 1000
        assert limiter.allow("x", now=100)
        assert list(limiter.hits) == ["x"]


def test_unmapped_http_errors_keep_their_name(app):
    app.add_url_rule("/forbidden", "forbidden", lambda: abort(403))
    resp = app.test_client().get("/forbidden")
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "FORBIDDEN"


def test_preflight_requests_do_not_use_the_global_budget():
    app = create_app("testing", RATELIMIT_ENABLED=True, RATELIMIT_GLOBAL=1)
    with app.app_context():
        client = app.test_client()
        preflight = {"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"}
        for _ in range(3):
            assert client.options("/api/v1/health", headers=preflight).status_code == 200
        assert client.get("/api/v1/health").status_code == 200
        assert client.get("/api/v1/health").status_code == 429
