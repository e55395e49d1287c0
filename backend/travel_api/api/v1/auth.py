"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, g, request

from travel_api.api.deps import get_auth_service, json_response, require_auth, timing
from travel_api.schemas import (
    LoginSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    TokenResponseSchema,
    WhoAmISchema,
)
from travel_api.services.auth.dto import LoginIn, RefreshIn, RegisterIn, RevokeIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
register_response_schema = RegisterResponseSchema()
token_schema = TokenResponseSchema()
whoami_schema = WhoAmISchema()


@bp.post("/register")
@timing
def register():
    """Register a new user and return its identifier."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    out = get_auth_service().register(RegisterIn(**payload))
    body = {"data": register_response_schema.dump(out)}
    return json_response(body, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token and return the new pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    get_auth_service().revoke(RevokeIn(refresh_token=data["refresh_token"]))
    return "", 204


@bp.get("/me")
@require_auth
@timing
def whoami():
    """Return the authenticated user profile."""

    user = get_auth_service().get_user(g.user_id)
    return json_response({"data": whoami_schema.dump(user)})
