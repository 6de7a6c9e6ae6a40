"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary only
    - Services receive plain values; responses are built from service results

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
