from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any

from flask import abort, jsonify, request


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


def validation_response(errs: list[ValidationError]):
    return jsonify({"message": [asdict(e) for e in errs]}), 400


def json_body() -> dict[str, Any]:
    """Request JSON as a dict; 400 for anything else."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object.")
    return data


def clean_str(value: Any) -> str | None:
    """Strip strings; empty becomes None."""
    if value is None:
        return None
    return str(value).strip() or None


def parse_optional_int(value: Any) -> int | None:
    """
    Accepts ints and numeric strings (form/JSON clients send both).
    Raises ValueError for anything else that is not blank.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return int(str(value).strip())


def parse_datetime(value: Any) -> datetime | None:
    """ISO 8601 date or datetime; trailing 'Z' accepted. Raises ValueError."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)
