"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Tokens travel only in HttpOnly cookies (see api/cookies.py); response bodies
carry a message and the user id, never a token.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserOutSchema
from utils.decorators import jwt_required, rate_limited, get_session_manager
from .cookies import set_session_cookies, clear_session_cookies

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


@bp.post("/register")
@rate_limited("auth")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string, format: email }
            password: { type: string, minLength: 8, maxLength: 128 }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_register_schema.load(payload)

    user_id = get_session_manager().register(data["email"], data["password"])
    return jsonify({"message": "User registered successfully", "user_id": user_id}), 201


@bp.post("/login")
@rate_limited("auth")
def login():
    """
    Login: sets the access and refresh token cookies
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (tokens are set as HttpOnly cookies)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    pair = get_session_manager().login(data["email"], data["password"])
    response = jsonify({"message": "Login successful", "user_id": pair.user_id})
    set_session_cookies(response, pair)
    return response, 200


@bp.post("/refresh")
@rate_limited("auth")
def refresh():
    """
    Rotate the refresh token cookie and issue a new access token cookie.
    The old refresh token stops working immediately.
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (new cookies set)
      401:
        description: Missing, stale or revoked refresh token; cookies cleared
    """
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    pair = get_session_manager().refresh(token)
    response = jsonify({"message": "Token refreshed successfully", "user_id": pair.user_id})
    set_session_cookies(response, pair)
    return response, 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the refresh token and clears both cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    get_session_manager().logout(g.current_user_id)
    response = jsonify({"message": "Logout successful"})
    clear_session_cookies(response)
    return response, 200


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200
