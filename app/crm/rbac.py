from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g

from app.crm.constants import ROLE_ADMIN


def current_user_id() -> int | None:
    user = getattr(g, "current_user", None)
    if not user:
        return None
    try:
        return int(user["id"])
    except (KeyError, TypeError, ValueError):
        return None


def user_is_admin(user: dict[str, Any] | None) -> bool:
    return bool(user) and user.get("role") == ROLE_ADMIN


def _check_authenticated() -> None:
    state = getattr(g, "auth_state", "anonymous")
    # No token → 401; bad/expired token → 403.
    if state == "anonymous":
        abort(401, description="Unauthorized: No token provided")
    if state != "ok":
        abort(403, description="Forbidden: Invalid token")


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        _check_authenticated()
        return fn(*args, **kwargs)

    return wrapped


def require_admin(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        _check_authenticated()
        if not user_is_admin(getattr(g, "current_user", None)):
            abort(403, description="Forbidden: Admin access required")
        return fn(*args, **kwargs)

    return wrapped
