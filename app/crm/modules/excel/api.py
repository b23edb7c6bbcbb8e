from __future__ import annotations

import io
from datetime import date

from flask import Blueprint, jsonify, request, send_file

from app.crm.constants import CUSTOMER_ACTIVE
from app.crm.db import get_store
from app.crm.modules.customers.service import create_customer, validate_customer_payload
from app.crm.modules.excel.service import (
    CUSTOMER_FIELDS,
    TASK_FIELDS,
    XLSX_MIMETYPE,
    ExcelError,
    export_customers,
    export_tasks,
    import_customers,
    select_fields,
)
from app.crm.rbac import current_user_id, require_auth
from app.crm.utils import json_body, validation_response

bp = Blueprint("excel", __name__)


def _xlsx_response(data: bytes, basename: str):
    filename = f"{basename}_{date.today().strftime('%Y%m%d')}.xlsx"
    return send_file(
        io.BytesIO(data),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename,
        max_age=0,
    )


@bp.get("/customers/export")
@require_auth
def customers_export():
    try:
        fields = select_fields(CUSTOMER_FIELDS, request.args.get("fields"))
    except ExcelError as e:
        return jsonify({"message": str(e)}), 400
    return _xlsx_response(export_customers(get_store(), fields), "musteriler")


@bp.get("/tasks/export")
@require_auth
def tasks_export():
    try:
        fields = select_fields(TASK_FIELDS, request.args.get("fields"))
    except ExcelError as e:
        return jsonify({"message": str(e)}), 400
    return _xlsx_response(export_tasks(get_store(), fields), "gorevler")


@bp.post("/customers/import")
@require_auth
def customers_import_row():
    """Single-row import used by spreadsheet clients; status defaults to active."""
    payload = dict(json_body())
    if not payload.get("status"):
        payload["status"] = CUSTOMER_ACTIVE
    errs = validate_customer_payload(payload)
    if errs:
        return validation_response(errs)
    c = create_customer(get_store(), payload, user_id=current_user_id())
    return jsonify(c.to_dict()), 201


@bp.post("/customers/import/excel")
@require_auth
def customers_import_excel():
    f = request.files.get("file")
    if not f or not f.filename:
        return jsonify({"message": "An .xlsx file is required (form field 'file')."}), 400
    if not f.filename.lower().endswith(".xlsx"):
        return jsonify({"message": "Only .xlsx files are supported."}), 400
    try:
        result = import_customers(get_store(), f.read(), user_id=current_user_id())
    except ExcelError as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(result.to_dict())
