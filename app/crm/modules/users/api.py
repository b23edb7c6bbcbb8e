from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from app.crm.db import get_store
from app.crm.modules.users.service import (
    DuplicateUsername,
    create_user,
    grant_customer_access,
    update_user,
    validate_user_payload,
)
from app.crm.rbac import current_user_id, require_admin, require_auth
from app.crm.utils import ValidationError, json_body, validation_response

bp = Blueprint("users", __name__)


def _not_found():
    return jsonify({"message": "User not found"}), 404


@bp.get("/users")
@require_auth
def users_list():
    return jsonify([u.to_public_dict() for u in get_store().list_users()])


@bp.get("/users/<int:user_id>")
@require_auth
def user_detail(user_id: int):
    u = get_store().get_user(user_id)
    if not u:
        return _not_found()
    return jsonify(u.to_public_dict())


@bp.post("/users")
@require_admin
def users_new_post():
    payload = json_body()
    errs = validate_user_payload(payload)
    if errs:
        return validation_response(errs)
    try:
        u = create_user(get_store(), payload)
    except DuplicateUsername as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(u.to_public_dict()), 201


@bp.patch("/users/<int:user_id>")
@require_admin
def user_update(user_id: int):
    payload = json_body()
    errs = validate_user_payload(payload, partial=True)
    if errs:
        return validation_response(errs)
    try:
        u = update_user(get_store(), user_id, payload)
    except DuplicateUsername as e:
        return jsonify({"message": str(e)}), 400
    if not u:
        return _not_found()
    return jsonify(u.to_public_dict())


@bp.delete("/users/<int:user_id>")
@require_admin
def user_delete(user_id: int):
    if current_user_id() == user_id:
        return jsonify({"message": "Cannot delete your own account"}), 400
    if not get_store().delete_user(user_id):
        return _not_found()
    current_app.logger.info("user.delete id=%s", user_id)
    return jsonify({"message": "User deleted successfully"})


# ---- per-user customer access grants ----


@bp.get("/users/<int:user_id>/permissions")
@require_admin
def user_permissions_list(user_id: int):
    store = get_store()
    if not store.get_user(user_id):
        return _not_found()
    return jsonify([p.to_dict() for p in store.get_user_customer_permissions(user_id)])


@bp.post("/users/<int:user_id>/permissions")
@require_admin
def user_permission_add(user_id: int):
    store = get_store()
    u = store.get_user(user_id)
    if not u:
        return _not_found()
    payload = json_body()
    try:
        perm = grant_customer_access(store, u, payload)
    except ValueError as e:
        return validation_response([ValidationError("customerId", str(e))])
    if perm is None:
        return jsonify({"message": "Customer not found"}), 404
    return jsonify(perm.to_dict()), 201


@bp.delete("/permissions/<int:permission_id>")
@require_admin
def user_permission_delete(permission_id: int):
    if not get_store().delete_user_customer_permission(permission_id):
        return jsonify({"message": "Permission not found"}), 404
    return jsonify({"message": "Permission deleted successfully"})
