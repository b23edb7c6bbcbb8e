from __future__ import annotations

from flask import Flask, current_app

from app.crm.constants import ROLE_ADMIN
from app.crm.models import User
from app.crm.storage import MemStorage


def init_store(app: Flask, store: MemStorage | None = None) -> MemStorage:
    """
    Attach the process-wide store to the app and seed the admin account.
    A caller-provided store (tests) is used as-is, seeded the same way.
    """
    store = store if store is not None else MemStorage()
    seed_admin(
        store,
        username=app.config["ADMIN_USERNAME"],
        password=app.config["ADMIN_PASSWORD"],
        full_name=app.config["ADMIN_FULL_NAME"],
    )
    app.extensions["crm_store"] = store
    return store


def get_store(app: Flask | None = None) -> MemStorage:
    """
    Store for the current app. Use inside request handlers.
    """
    if app is None:
        app = current_app
    return app.extensions["crm_store"]


def seed_admin(store: MemStorage, *, username: str, password: str, full_name: str) -> User:
    """
    Idempotent: returns the existing account when the username is taken.
    """
    existing = store.get_user_by_username(username)
    if existing is not None:
        return existing
    return store.create_user(username=username, password=password, full_name=full_name, role=ROLE_ADMIN)
