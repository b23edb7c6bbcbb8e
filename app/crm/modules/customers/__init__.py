"""
Customers: records, their notes, and the tasks linked to them.

Deleting a customer removes its tasks, notes and access grants.
"""
