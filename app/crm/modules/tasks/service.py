from __future__ import annotations

import logging
from typing import Any

from app.crm.constants import TASK_PENDING, TASK_STATUSES
from app.crm.models import Task, TaskPatch
from app.crm.storage import MemStorage
from app.crm.utils import ValidationError, clean_str, parse_datetime, parse_optional_int

logger = logging.getLogger(__name__)


def validate_task_payload(payload: dict[str, Any], *, partial: bool = False) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if not partial and not clean_str(payload.get("title")):
        errs.append(ValidationError("title", "Title is required."))
    status = payload.get("status")
    if status and (not isinstance(status, str) or status not in TASK_STATUSES):
        errs.append(ValidationError("status", f"Status must be one of: {', '.join(sorted(TASK_STATUSES))}."))
    try:
        parse_datetime(payload.get("dueDate"))
    except (TypeError, ValueError):
        errs.append(ValidationError("dueDate", "Due date must be an ISO 8601 date."))
    for key in ("customerId", "assignedTo"):
        try:
            parse_optional_int(payload.get(key))
        except (TypeError, ValueError):
            errs.append(ValidationError(key, "Must be a number."))
    return errs


def task_patch_from_payload(payload: dict[str, Any]) -> TaskPatch:
    """
    Allow-listed keys only. A present description is always applied, and
    null clears it to an empty string; every other field is skipped when
    empty.
    """
    description = None
    if "description" in payload:
        raw = payload["description"]
        description = str(raw) if raw is not None else ""
    return TaskPatch(
        title=clean_str(payload.get("title")),
        description=description,
        status=clean_str(payload.get("status")),
        due_date=parse_datetime(payload.get("dueDate")),
        customer_id=parse_optional_int(payload.get("customerId")) or None,
        assigned_to=parse_optional_int(payload.get("assignedTo")) or None,
    )


def create_task(store: MemStorage, payload: dict[str, Any], *, user_id: int | None) -> Task:
    t = store.create_task(
        title=clean_str(payload.get("title")) or "",
        description=clean_str(payload.get("description")),
        status=clean_str(payload.get("status")) or TASK_PENDING,
        due_date=parse_datetime(payload.get("dueDate")),
        customer_id=parse_optional_int(payload.get("customerId")),
        assigned_to=parse_optional_int(payload.get("assignedTo")),
        created_by=user_id,
    )
    logger.info("task.create id=%s customer_id=%s by user_id=%s", t.id, t.customer_id, user_id)
    return t


def update_task(store: MemStorage, task_id: int, payload: dict[str, Any]) -> Task | None:
    patch = task_patch_from_payload(payload)
    t = store.update_task(task_id, patch)
    if t is not None:
        logger.info("task.update id=%s fields=%s", task_id, sorted(patch.changes()))
    return t
