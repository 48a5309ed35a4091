"""
Cookie transport for the token pair.

Both cookies are HttpOnly and SameSite=Strict, Secure when AUTH_COOKIE_SECURE
is set. The refresh cookie is scoped to the refresh endpoint so browsers never
attach it to ordinary API calls.
"""
from flask import current_app


def _flags():
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", False)),
        "samesite": "Strict",
    }


def set_session_cookies(response, pair):
    config = current_app.config
    settings = current_app.extensions["session_manager"].settings
    response.set_cookie(
        config["ACCESS_COOKIE_NAME"],
        pair.access_token,
        max_age=int(settings.access_lifetime.total_seconds()),
        path="/",
        **_flags(),
    )
    response.set_cookie(
        config["REFRESH_COOKIE_NAME"],
        pair.refresh_token,
        max_age=int(settings.refresh_lifetime.total_seconds()),
        path=config["REFRESH_COOKIE_PATH"],
        **_flags(),
    )
    return response


def clear_session_cookies(response):
    config = current_app.config
    response.delete_cookie(config["ACCESS_COOKIE_NAME"], path="/", **_flags())
    response.delete_cookie(config["REFRESH_COOKIE_NAME"], path=config["REFRESH_COOKIE_PATH"], **_flags())
    return response
