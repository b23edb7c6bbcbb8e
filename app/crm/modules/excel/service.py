"""
Excel (.xlsx) import/export for customers and tasks.

Column labels, status words and the dd.mm.yyyy date format match the
spreadsheets the CRM has always produced, so an exported customer sheet can be
imported back unchanged. Import also accepts the camelCase field ids as
headers.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from openpyxl import Workbook, load_workbook

from app.crm.constants import (
    CUSTOMER_ACTIVE,
    CUSTOMER_INACTIVE,
    MISSING_LABEL,
    TASK_COMPLETED,
    TASK_PENDING,
    TASK_POSTPONED,
)
from app.crm.modules.customers.service import create_customer, validate_customer_payload
from app.crm.storage import MemStorage

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CUSTOMER_FIELDS: dict[str, str] = {
    "companyName": "Firma Adı",
    "contactName": "İletişim Kişisi",
    "phone": "Telefon",
    "email": "E-posta",
    "address": "Adres",
    "sector": "Sektör",
    "status": "Durum",
    "createdAt": "Kayıt Tarihi",
}

TASK_FIELDS: dict[str, str] = {
    "title": "Görev Adı",
    "description": "Açıklama",
    "status": "Durum",
    "dueDate": "Tamamlanma Tarihi",
    "customerId": "Müşteri",
    "assignedTo": "Atanan Kişi",
    "createdAt": "Oluşturulma Tarihi",
}

CUSTOMER_STATUS_LABELS = {CUSTOMER_ACTIVE: "Aktif", CUSTOMER_INACTIVE: "Pasif"}
TASK_STATUS_LABELS = {TASK_COMPLETED: "Tamamlandı", TASK_PENDING: "Bekliyor", TASK_POSTPONED: "Ertelendi"}

# Fields an import can fill; createdAt is always stamped by the store.
_IMPORTABLE_CUSTOMER_FIELDS = ("companyName", "contactName", "phone", "email", "address", "sector", "status")


class ExcelError(ValueError):
    pass


@dataclass
class ImportResult:
    imported: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"imported": self.imported, "errors": self.errors}


def _fmt_date(value: datetime | None) -> str | None:
    return value.strftime("%d.%m.%Y") if value is not None else None


def select_fields(available: dict[str, str], raw: str | None) -> list[str]:
    """
    Comma-separated field ids -> ordered list; blank means all fields.
    Unknown ids raise ExcelError.
    """
    if not raw or not raw.strip():
        return list(available)
    wanted = [f.strip() for f in raw.split(",") if f.strip()]
    unknown = [f for f in wanted if f not in available]
    if unknown:
        raise ExcelError(f"Unknown field(s): {', '.join(unknown)}")
    return wanted


def _workbook_bytes(sheet_title: str, headers: list[str], rows: list[list[Any]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(headers)
    for row in rows:
        ws.append(row)
        # openpyxl treats any "=..." string as a formula; keep user text as text.
        for cell in ws[ws.max_row]:
            if cell.data_type == "f":
                cell.data_type = "s"
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def export_customers(store: MemStorage, fields: list[str]) -> bytes:
    rows: list[list[Any]] = []
    for c in store.list_customers():
        row: list[Any] = []
        for f in fields:
            if f == "status":
                row.append(CUSTOMER_STATUS_LABELS.get(c.status, c.status))
            elif f == "createdAt":
                row.append(_fmt_date(c.created_at))
            else:
                attr = {"companyName": "company_name", "contactName": "contact_name"}.get(f, f)
                row.append(getattr(c, attr) or None)
        rows.append(row)
    logger.info("customers.export rows=%s fields=%s", len(rows), fields)
    return _workbook_bytes("Customers", [CUSTOMER_FIELDS[f] for f in fields], rows)


def export_tasks(store: MemStorage, fields: list[str]) -> bytes:
    rows: list[list[Any]] = []
    for t in store.list_tasks():
        row: list[Any] = []
        for f in fields:
            if f == "status":
                row.append(TASK_STATUS_LABELS.get(t.status, t.status))
            elif f == "createdAt":
                row.append(_fmt_date(t.created_at))
            elif f == "dueDate":
                row.append(_fmt_date(t.due_date))
            elif f == "customerId":
                if t.customer_id is None:
                    row.append(None)
                else:
                    c = store.get_customer(t.customer_id)
                    row.append(c.company_name if c else MISSING_LABEL)
            elif f == "assignedTo":
                if t.assigned_to is None:
                    row.append(None)
                else:
                    u = store.get_user(t.assigned_to)
                    row.append(u.full_name if u else MISSING_LABEL)
            else:
                row.append(getattr(t, f) or None)
        rows.append(row)
    logger.info("tasks.export rows=%s fields=%s", len(rows), fields)
    return _workbook_bytes("Tasks", [TASK_FIELDS[f] for f in fields], rows)


def _header_map(headers: list[Any]) -> dict[str, int]:
    """Header cell -> column index, matching either the label or the field id."""
    options: dict[str, str] = {}
    for field_id in _IMPORTABLE_CUSTOMER_FIELDS:
        options[field_id.casefold()] = field_id
        options[CUSTOMER_FIELDS[field_id].casefold()] = field_id

    col_map: dict[str, int] = {}
    for i, h in enumerate(headers):
        if h is None:
            continue
        field_id = options.get(str(h).strip().casefold())
        if field_id and field_id not in col_map:
            col_map[field_id] = i
    return col_map


def _cell_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # Phone numbers typed into Excel come back as floats.
        value = int(value)
    return str(value).strip() or None


def _import_status(raw: str | None) -> str:
    if not raw:
        return CUSTOMER_ACTIVE
    if raw in (CUSTOMER_STATUS_LABELS[CUSTOMER_ACTIVE], CUSTOMER_ACTIVE):
        return CUSTOMER_ACTIVE
    return CUSTOMER_INACTIVE


def import_customers(store: MemStorage, data: bytes, *, user_id: int | None) -> ImportResult:
    """
    First row is the header. Each following non-empty row becomes one
    customer; rows that fail validation are reported and skipped.
    """
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise ExcelError(f"Could not read Excel file: {e}") from e

    try:
        ws = wb.active
        rows = ws.iter_rows(values_only=True)
        headers = next(rows, None)
        if not headers:
            raise ExcelError("Excel file is empty.")
        col_map = _header_map(list(headers))
        missing = [f for f in ("companyName", "contactName") if f not in col_map]
        if missing:
            raise ExcelError(
                "Missing required column(s): " + ", ".join(f"{CUSTOMER_FIELDS[f]} ({f})" for f in missing)
            )

        result = ImportResult()
        for row_number, vals in enumerate(rows, start=2):
            if vals is None or all(v is None or str(v).strip() == "" for v in vals):
                continue

            def get_val(field_id: str) -> str | None:
                idx = col_map.get(field_id)
                return _cell_text(vals[idx]) if idx is not None and idx < len(vals) else None

            payload: dict[str, Any] = {f: get_val(f) for f in _IMPORTABLE_CUSTOMER_FIELDS}
            payload["status"] = _import_status(payload.get("status"))

            errs = validate_customer_payload(payload)
            if errs:
                result.errors.append({"row": row_number, "message": "; ".join(e.message for e in errs)})
                continue
            create_customer(store, payload, user_id=user_id)
            result.imported += 1
    finally:
        wb.close()

    logger.info("customers.import imported=%s errors=%s", result.imported, len(result.errors))
    return result
