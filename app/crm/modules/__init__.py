"""
Feature modules live under this package.

Each module owns its JSON routes (api.py) and request-level rules
(service.py: validation, allow-listing, logging), and reaches records only
through the shared store (app.crm.db.get_store).
"""
