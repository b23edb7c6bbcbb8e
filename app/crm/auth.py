from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from flask import Blueprint, current_app, g, jsonify, request

from app.crm.db import get_store
from app.crm.models import User
from app.crm.rbac import require_auth
from app.crm.utils import ValidationError, json_body, validation_response

bp = Blueprint("auth", __name__)

_JWT_ALGORITHM = "HS256"


def issue_token(user: User) -> str:
    """
    Signed token carrying the public user fields (never the password).
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = dict(user.to_public_dict())
    payload["iat"] = now
    payload["exp"] = now + timedelta(hours=int(current_app.config["JWT_EXPIRES_HOURS"]))
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=_JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    try:
        return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[_JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization") or ""
    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def load_current_user() -> None:
    """
    Loads g.current_user (token claims) from the Authorization header.
    Also assigns a simple per-request request_id (for log correlation).

    g.auth_state is one of "anonymous", "invalid", "ok"; rbac turns it into
    401/403.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    token = _bearer_token()
    if not token:
        g.auth_state = "anonymous"
        return
    claims = decode_token(token)
    if claims is None:
        g.auth_state = "invalid"
        return
    g.current_user = claims
    g.auth_state = "ok"


@bp.post("/login")
def login_post():
    payload = json_body()
    username = str(payload.get("username") or "").strip()
    password = str(payload.get("password") or "")

    errs: list[ValidationError] = []
    if not username:
        errs.append(ValidationError("username", "Username is required."))
    if not password:
        errs.append(ValidationError("password", "Password is required."))
    if errs:
        return validation_response(errs)

    user = get_store().get_user_by_username(username)
    if not user or user.password != password:
        current_app.logger.warning(
            "Login failed (username=%s request_id=%s)", username, getattr(g, "request_id", None)
        )
        return jsonify({"message": "Invalid credentials"}), 401

    current_app.logger.info("Login ok (user_id=%s)", user.id)
    return jsonify({"user": user.to_public_dict(), "token": issue_token(user)})


@bp.post("/logout")
def logout():
    # Tokens are stateless; the client discards its copy.
    return jsonify({"message": "Logged out successfully"})


@bp.get("/me")
@require_auth
def me():
    return jsonify(g.current_user)
