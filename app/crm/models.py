from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from app.crm.constants import CUSTOMER_ACTIVE, ROLE_STANDARD, TASK_PENDING


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class User:
    id: int
    username: str
    # Stored and compared as given (no hashing); never serialized to clients.
    password: str
    full_name: str
    role: str = ROLE_STANDARD

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "fullName": self.full_name,
            "role": self.role,
        }


@dataclass(frozen=True)
class Customer:
    id: int
    company_name: str
    contact_name: str
    created_at: datetime
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    sector: str | None = None
    status: str = CUSTOMER_ACTIVE
    created_by: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "companyName": self.company_name,
            "contactName": self.contact_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "sector": self.sector,
            "status": self.status,
            "createdAt": _iso(self.created_at),
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    created_at: datetime
    description: str | None = None
    status: str = TASK_PENDING
    due_date: datetime | None = None
    customer_id: int | None = None
    assigned_to: int | None = None
    created_by: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "dueDate": _iso(self.due_date),
            "customerId": self.customer_id,
            "assignedTo": self.assigned_to,
            "createdAt": _iso(self.created_at),
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class Note:
    id: int
    content: str
    customer_id: int
    created_at: datetime
    created_by: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "customerId": self.customer_id,
            "createdAt": _iso(self.created_at),
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class UserCustomerPermission:
    id: int
    user_id: int
    customer_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "userId": self.user_id, "customerId": self.customer_id}


# ---- partial updates ----
#
# One patch type per mutable entity. A field left as None is not applied, so
# the set of fields an update can touch is fixed by the class definition.


@dataclass(frozen=True)
class _Patch:
    def changes(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True)
class UserPatch(_Patch):
    username: str | None = None
    password: str | None = None
    full_name: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class CustomerPatch(_Patch):
    company_name: str | None = None
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    sector: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class TaskPatch(_Patch):
    title: str | None = None
    description: str | None = None
    status: str | None = None
    due_date: datetime | None = None
    customer_id: int | None = None
    assigned_to: int | None = None
