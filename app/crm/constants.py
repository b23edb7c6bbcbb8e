"""
Central constants for the CRM application.
"""
from __future__ import annotations

ROLE_ADMIN = "admin"
ROLE_STANDARD = "standard"
USER_ROLES = frozenset({ROLE_ADMIN, ROLE_STANDARD})

CUSTOMER_ACTIVE = "active"
CUSTOMER_INACTIVE = "inactive"
CUSTOMER_STATUSES = frozenset({CUSTOMER_ACTIVE, CUSTOMER_INACTIVE})

TASK_PENDING = "pending"
TASK_COMPLETED = "completed"
TASK_POSTPONED = "postponed"
TASK_STATUSES = frozenset({TASK_PENDING, TASK_COMPLETED, TASK_POSTPONED})

# Dashboard growth chart window (calendar months, current month included)
GROWTH_MONTHS = 6

# Label used wherever a foreign key no longer resolves
MISSING_LABEL = "-"
UNDEFINED_SECTOR = "Tanımlanmamış"
