from __future__ import annotations

import logging
from typing import Any

from app.crm.constants import CUSTOMER_ACTIVE, CUSTOMER_STATUSES
from app.crm.models import Customer, CustomerPatch, Note
from app.crm.storage import MemStorage
from app.crm.utils import ValidationError, clean_str

logger = logging.getLogger(__name__)

# Body key -> patch attribute. Anything else in the body is ignored.
_PATCHABLE_FIELDS = {
    "companyName": "company_name",
    "contactName": "contact_name",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "sector": "sector",
    "status": "status",
}


def validate_customer_payload(payload: dict[str, Any], *, partial: bool = False) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if not partial:
        if not clean_str(payload.get("companyName")):
            errs.append(ValidationError("companyName", "Company name is required."))
        if not clean_str(payload.get("contactName")):
            errs.append(ValidationError("contactName", "Contact name is required."))
    status = payload.get("status")
    if status and (not isinstance(status, str) or status not in CUSTOMER_STATUSES):
        errs.append(ValidationError("status", f"Status must be one of: {', '.join(sorted(CUSTOMER_STATUSES))}."))
    return errs


def customer_patch_from_payload(payload: dict[str, Any]) -> CustomerPatch:
    """
    Only allow-listed keys are read; empty values leave the field unchanged.
    """
    values: dict[str, str] = {}
    for key, attr in _PATCHABLE_FIELDS.items():
        v = clean_str(payload.get(key))
        if v is not None:
            values[attr] = v
    return CustomerPatch(**values)


def create_customer(store: MemStorage, payload: dict[str, Any], *, user_id: int | None) -> Customer:
    c = store.create_customer(
        company_name=clean_str(payload.get("companyName")) or "",
        contact_name=clean_str(payload.get("contactName")) or "",
        phone=clean_str(payload.get("phone")),
        email=clean_str(payload.get("email")),
        address=clean_str(payload.get("address")),
        sector=clean_str(payload.get("sector")),
        status=clean_str(payload.get("status")) or CUSTOMER_ACTIVE,
        created_by=user_id,
    )
    logger.info("customer.create id=%s by user_id=%s", c.id, user_id)
    return c


def update_customer(store: MemStorage, customer_id: int, payload: dict[str, Any]) -> Customer | None:
    patch = customer_patch_from_payload(payload)
    c = store.update_customer(customer_id, patch)
    if c is not None:
        logger.info("customer.update id=%s fields=%s", customer_id, sorted(patch.changes()))
    return c


def delete_customer(store: MemStorage, customer_id: int) -> bool:
    removed = store.delete_customer(customer_id)
    if removed:
        logger.info("customer.delete id=%s", customer_id)
    return removed


def add_customer_note(store: MemStorage, customer: Customer, *, content: Any, user_id: int | None) -> Note:
    text = clean_str(content)
    if not text:
        raise ValueError("Note content is required.")
    n = store.create_note(content=text, customer_id=customer.id, created_by=user_id)
    logger.info("customer_note.create id=%s customer_id=%s", n.id, customer.id)
    return n
