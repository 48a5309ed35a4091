from __future__ import annotations
from functools import wraps
from flask import request, g, abort, current_app


def get_session_manager():
    return current_app.extensions["session_manager"]


def _access_tokens_from_request():
    """Candidate access tokens: the cookie first, then a Bearer header."""
    tokens = []
    cookie = request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"])
    if cookie:
        tokens.append(cookie)
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        tokens.append(auth.split(" ", 1)[1].strip())
    return tokens


def _authenticated_user_id():
    manager = get_session_manager()
    for token in _access_tokens_from_request():
        user_id = manager.authenticate(token)
        if user_id:
            return user_id
    return None


def jwt_required():
    """Require a valid access token (cookie, or Bearer header for API clients)."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user_id = _authenticated_user_id()
            if not user_id:
                abort(401, description="Unauthorized")

            user = get_session_manager().users.find_by_id(user_id)
            if not user:
                abort(401, description="Unauthorized")
            g.current_user = user
            g.current_user_id = user.id
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def client_key() -> str:
    return request.remote_addr or "unknown"


def check_rate_limit(name: str):
    """abort(429) when the named limiter refuses this client."""
    if not current_app.config.get("RATELIMIT_ENABLED", True):
        return
    limiter = current_app.extensions["rate_limiters"][name]
    if not limiter.allow(client_key()):
        if name == "auth":
            abort(429, description="Too many authentication attempts, please try again after 15 minutes.")
        abort(429, description="Too many requests, please try again later.")


def rate_limited(name: str):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            check_rate_limit(name)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
