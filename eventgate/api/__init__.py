"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Role checks happen here; services never look at the caller's role

Design Decisions:
    - Thin routes delegate to services built per request in deps.py
"""
