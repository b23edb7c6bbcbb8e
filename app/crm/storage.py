from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from app.crm.constants import CUSTOMER_ACTIVE, ROLE_STANDARD, TASK_PENDING
from app.crm.models import (
    Customer,
    CustomerPatch,
    Note,
    Task,
    TaskPatch,
    User,
    UserCustomerPermission,
    UserPatch,
)

logger = logging.getLogger(__name__)


class MemStorage:
    """
    In-memory entity store.

    - one dict per entity type, keyed by id
    - one id counter per entity type; ids start at 1 and are never reused
    - records are frozen dataclasses; updates swap in a merged copy

    Lookups of missing ids return None (or False for deletes), never raise.
    Input is trusted: validation happens in the request layer.
    Nothing survives a process restart.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or datetime.now

        self._users: dict[int, User] = {}
        self._customers: dict[int, Customer] = {}
        self._tasks: dict[int, Task] = {}
        self._notes: dict[int, Note] = {}
        self._permissions: dict[int, UserCustomerPermission] = {}

        self._next_ids = {
            "user": 1,
            "customer": 1,
            "task": 1,
            "note": 1,
            "permission": 1,
        }

    def _next_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    def now(self) -> datetime:
        return self._clock()

    # ---- users ----

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        # Uniqueness is checked by callers; first match wins.
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    def create_user(self, *, username: str, password: str, full_name: str, role: str = ROLE_STANDARD) -> User:
        user = User(
            id=self._next_id("user"),
            username=username,
            password=password,
            full_name=full_name,
            role=role,
        )
        self._users[user.id] = user
        logger.debug("User created id=%s username=%s role=%s", user.id, user.username, user.role)
        return user

    def update_user(self, user_id: int, patch: UserPatch) -> User | None:
        existing = self._users.get(user_id)
        if existing is None:
            return None
        updated = replace(existing, **patch.changes())
        self._users[user_id] = updated
        return updated

    def delete_user(self, user_id: int) -> bool:
        # Tasks/notes/permissions pointing at this user are left dangling.
        return self._users.pop(user_id, None) is not None

    # ---- customers ----

    def list_customers(self) -> list[Customer]:
        return list(self._customers.values())

    def get_customer(self, customer_id: int) -> Customer | None:
        return self._customers.get(customer_id)

    def create_customer(
        self,
        *,
        company_name: str,
        contact_name: str,
        phone: str | None = None,
        email: str | None = None,
        address: str | None = None,
        sector: str | None = None,
        status: str = CUSTOMER_ACTIVE,
        created_by: int | None = None,
    ) -> Customer:
        customer = Customer(
            id=self._next_id("customer"),
            company_name=company_name,
            contact_name=contact_name,
            created_at=self.now(),
            phone=phone,
            email=email,
            address=address,
            sector=sector,
            status=status,
            created_by=created_by,
        )
        self._customers[customer.id] = customer
        logger.debug("Customer created id=%s company_name=%s", customer.id, customer.company_name)
        return customer

    def update_customer(self, customer_id: int, patch: CustomerPatch) -> Customer | None:
        existing = self._customers.get(customer_id)
        if existing is None:
            return None
        updated = replace(existing, **patch.changes())
        self._customers[customer_id] = updated
        return updated

    def delete_customer(self, customer_id: int) -> bool:
        """
        Delete a customer together with its tasks, notes and permission grants.
        """
        task_ids = [t.id for t in self._tasks.values() if t.customer_id == customer_id]
        note_ids = [n.id for n in self._notes.values() if n.customer_id == customer_id]
        perm_ids = [p.id for p in self._permissions.values() if p.customer_id == customer_id]
        for task_id in task_ids:
            del self._tasks[task_id]
        for note_id in note_ids:
            del self._notes[note_id]
        for perm_id in perm_ids:
            del self._permissions[perm_id]

        removed = self._customers.pop(customer_id, None) is not None
        if removed:
            logger.debug(
                "Customer deleted id=%s cascade tasks=%s notes=%s permissions=%s",
                customer_id,
                len(task_ids),
                len(note_ids),
                len(perm_ids),
            )
        return removed

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get_task(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def get_tasks_by_customer(self, customer_id: int) -> list[Task]:
        return [t for t in self._tasks.values() if t.customer_id == customer_id]

    def create_task(
        self,
        *,
        title: str,
        description: str | None = None,
        status: str = TASK_PENDING,
        due_date: datetime | None = None,
        customer_id: int | None = None,
        assigned_to: int | None = None,
        created_by: int | None = None,
    ) -> Task:
        task = Task(
            id=self._next_id("task"),
            title=title,
            created_at=self.now(),
            description=description,
            status=status,
            due_date=due_date,
            customer_id=customer_id,
            assigned_to=assigned_to,
            created_by=created_by,
        )
        self._tasks[task.id] = task
        logger.debug("Task created id=%s status=%s customer_id=%s", task.id, task.status, task.customer_id)
        return task

    def update_task(self, task_id: int, patch: TaskPatch) -> Task | None:
        existing = self._tasks.get(task_id)
        if existing is None:
            return None
        updated = replace(existing, **patch.changes())
        self._tasks[task_id] = updated
        return updated

    def delete_task(self, task_id: int) -> bool:
        return self._tasks.pop(task_id, None) is not None

    # ---- notes ----

    def get_note(self, note_id: int) -> Note | None:
        return self._notes.get(note_id)

    def get_notes_by_customer(self, customer_id: int) -> list[Note]:
        """Notes for one customer, newest first."""
        notes = [n for n in self._notes.values() if n.customer_id == customer_id]
        notes.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        return notes

    def create_note(self, *, content: str, customer_id: int, created_by: int | None = None) -> Note:
        note = Note(
            id=self._next_id("note"),
            content=content,
            customer_id=customer_id,
            created_at=self.now(),
            created_by=created_by,
        )
        self._notes[note.id] = note
        return note

    def delete_note(self, note_id: int) -> bool:
        return self._notes.pop(note_id, None) is not None

    # ---- user/customer permissions ----

    def get_user_customer_permission(self, permission_id: int) -> UserCustomerPermission | None:
        return self._permissions.get(permission_id)

    def get_user_customer_permissions(self, user_id: int) -> list[UserCustomerPermission]:
        return [p for p in self._permissions.values() if p.user_id == user_id]

    def create_user_customer_permission(self, *, user_id: int, customer_id: int) -> UserCustomerPermission:
        perm = UserCustomerPermission(id=self._next_id("permission"), user_id=user_id, customer_id=customer_id)
        self._permissions[perm.id] = perm
        return perm

    def delete_user_customer_permission(self, permission_id: int) -> bool:
        return self._permissions.pop(permission_id, None) is not None
