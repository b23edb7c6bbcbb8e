from __future__ import annotations

import logging
from typing import Any

from app.crm.constants import ROLE_STANDARD, USER_ROLES
from app.crm.models import User, UserCustomerPermission, UserPatch
from app.crm.storage import MemStorage
from app.crm.utils import ValidationError, clean_str, parse_optional_int

logger = logging.getLogger(__name__)


class DuplicateUsername(ValueError):
    pass


def validate_user_payload(payload: dict[str, Any], *, partial: bool = False) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if not partial:
        if not clean_str(payload.get("username")):
            errs.append(ValidationError("username", "Username is required."))
        if not payload.get("password"):
            errs.append(ValidationError("password", "Password is required."))
        if not clean_str(payload.get("fullName")):
            errs.append(ValidationError("fullName", "Full name is required."))
    role = payload.get("role")
    if role and (not isinstance(role, str) or role not in USER_ROLES):
        errs.append(ValidationError("role", f"Role must be one of: {', '.join(sorted(USER_ROLES))}."))
    return errs


def user_patch_from_payload(payload: dict[str, Any]) -> UserPatch:
    password = payload.get("password")
    return UserPatch(
        username=clean_str(payload.get("username")),
        password=str(password) if password else None,
        full_name=clean_str(payload.get("fullName")),
        role=clean_str(payload.get("role")),
    )


def _ensure_username_free(store: MemStorage, username: str, *, user_id: int | None = None) -> None:
    existing = store.get_user_by_username(username)
    if existing is not None and existing.id != user_id:
        raise DuplicateUsername("Username already exists")


def create_user(store: MemStorage, payload: dict[str, Any]) -> User:
    username = clean_str(payload.get("username")) or ""
    _ensure_username_free(store, username)
    u = store.create_user(
        username=username,
        password=str(payload.get("password")),
        full_name=clean_str(payload.get("fullName")) or "",
        role=clean_str(payload.get("role")) or ROLE_STANDARD,
    )
    logger.info("user.create id=%s username=%s role=%s", u.id, u.username, u.role)
    return u


def update_user(store: MemStorage, user_id: int, payload: dict[str, Any]) -> User | None:
    patch = user_patch_from_payload(payload)
    if patch.username:
        _ensure_username_free(store, patch.username, user_id=user_id)
    u = store.update_user(user_id, patch)
    if u is not None:
        # Field names only; the password value is never logged.
        logger.info("user.update id=%s fields=%s", user_id, sorted(patch.changes()))
    return u


def grant_customer_access(store: MemStorage, user: User, payload: dict[str, Any]) -> UserCustomerPermission | None:
    """
    Returns None when the customer does not exist.
    Raises ValueError when customerId is missing or not a number.
    """
    customer_id = parse_optional_int(payload.get("customerId"))
    if customer_id is None:
        raise ValueError("customerId is required.")
    if store.get_customer(customer_id) is None:
        return None
    perm = store.create_user_customer_permission(user_id=user.id, customer_id=customer_id)
    logger.info("permission.create id=%s user_id=%s customer_id=%s", perm.id, user.id, customer_id)
    return perm
