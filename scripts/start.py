#!/usr/bin/env python3
"""
Production startup script.

Validates PORT, then starts gunicorn (replaces this process via os.execvp).

Usage:
    python scripts/start.py

The CRM keeps its records in process memory, so gunicorn runs a single
worker: every request must see the same store.
"""

from __future__ import annotations

import os
import sys


def resolve_port(raw: str | None) -> str:
    port = (raw or "").strip()
    if not port:
        print("WARNING: PORT not set, using default 8080", flush=True)
        return "8080"
    try:
        port_int = int(port)
        if port_int < 1 or port_int > 65535:
            raise ValueError("Port out of range")
    except ValueError:
        print(f"ERROR: Invalid PORT value '{port}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)
    return port


def gunicorn_argv(port: str) -> list[str]:
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", "1",
        "--threads", "1",
        "--timeout", "60",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    port = resolve_port(os.environ.get("PORT"))
    print(f"PORT={port} validated", flush=True)
    print("=== Starting gunicorn ===", flush=True)
    print("Health check endpoint ready at /healthz", flush=True)

    # exec keeps gunicorn as PID 1 so it receives signals directly
    os.execvp("gunicorn", gunicorn_argv(port))


if __name__ == "__main__":
    main()
