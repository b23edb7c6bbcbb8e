from __future__ import annotations

from flask import Blueprint, jsonify

from app.crm.db import get_store
from app.crm.modules.customers.service import (
    add_customer_note,
    create_customer,
    delete_customer,
    update_customer,
    validate_customer_payload,
)
from app.crm.rbac import current_user_id, require_auth
from app.crm.utils import ValidationError, json_body, validation_response

bp = Blueprint("customers", __name__)


def _not_found():
    return jsonify({"message": "Customer not found"}), 404


@bp.get("/customers")
@require_auth
def customers_list():
    return jsonify([c.to_dict() for c in get_store().list_customers()])


@bp.get("/customers/<int:customer_id>")
@require_auth
def customer_detail(customer_id: int):
    c = get_store().get_customer(customer_id)
    if not c:
        return _not_found()
    return jsonify(c.to_dict())


@bp.post("/customers")
@require_auth
def customers_new_post():
    payload = json_body()
    errs = validate_customer_payload(payload)
    if errs:
        return validation_response(errs)
    c = create_customer(get_store(), payload, user_id=current_user_id())
    return jsonify(c.to_dict()), 201


@bp.patch("/customers/<int:customer_id>")
@require_auth
def customer_update(customer_id: int):
    payload = json_body()
    errs = validate_customer_payload(payload, partial=True)
    if errs:
        return validation_response(errs)
    c = update_customer(get_store(), customer_id, payload)
    if not c:
        return _not_found()
    return jsonify(c.to_dict())


@bp.delete("/customers/<int:customer_id>")
@require_auth
def customer_delete(customer_id: int):
    if not delete_customer(get_store(), customer_id):
        return _not_found()
    return jsonify({"message": "Customer deleted successfully"})


@bp.get("/customers/<int:customer_id>/tasks")
@require_auth
def customer_tasks(customer_id: int):
    return jsonify([t.to_dict() for t in get_store().get_tasks_by_customer(customer_id)])


@bp.get("/customers/<int:customer_id>/notes")
@require_auth
def customer_notes(customer_id: int):
    return jsonify([n.to_dict() for n in get_store().get_notes_by_customer(customer_id)])


@bp.post("/customers/<int:customer_id>/notes")
@require_auth
def customer_note_add(customer_id: int):
    store = get_store()
    c = store.get_customer(customer_id)
    if not c:
        return _not_found()
    payload = json_body()
    try:
        n = add_customer_note(store, c, content=payload.get("content"), user_id=current_user_id())
    except ValueError as e:
        return validation_response([ValidationError("content", str(e))])
    return jsonify(n.to_dict()), 201


@bp.delete("/customers/<int:customer_id>/notes/<int:note_id>")
@require_auth
def customer_note_delete(customer_id: int, note_id: int):
    store = get_store()
    note = store.get_note(note_id)
    if not note or note.customer_id != customer_id:
        return jsonify({"message": "Note not found"}), 404
    store.delete_note(note_id)
    return jsonify({"message": "Note deleted successfully"})
