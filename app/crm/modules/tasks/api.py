from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from app.crm.db import get_store
from app.crm.modules.tasks.service import create_task, update_task, validate_task_payload
from app.crm.rbac import current_user_id, require_auth
from app.crm.utils import json_body, validation_response

bp = Blueprint("tasks", __name__)


def _not_found():
    return jsonify({"message": "Task not found"}), 404


@bp.get("/tasks")
@require_auth
def tasks_list():
    return jsonify([t.to_dict() for t in get_store().list_tasks()])


@bp.get("/tasks/<int:task_id>")
@require_auth
def task_detail(task_id: int):
    t = get_store().get_task(task_id)
    if not t:
        return _not_found()
    return jsonify(t.to_dict())


@bp.post("/tasks")
@require_auth
def tasks_new_post():
    payload = json_body()
    errs = validate_task_payload(payload)
    if errs:
        return validation_response(errs)
    t = create_task(get_store(), payload, user_id=current_user_id())
    return jsonify(t.to_dict()), 201


@bp.patch("/tasks/<int:task_id>")
@require_auth
def task_update(task_id: int):
    payload = json_body()
    errs = validate_task_payload(payload, partial=True)
    if errs:
        return validation_response(errs)
    t = update_task(get_store(), task_id, payload)
    if not t:
        return _not_found()
    return jsonify(t.to_dict())


@bp.delete("/tasks/<int:task_id>")
@require_auth
def task_delete(task_id: int):
    if not get_store().delete_task(task_id):
        return _not_found()
    current_app.logger.info("task.delete id=%s", task_id)
    return jsonify({"message": "Task deleted successfully"})
