"""Infrastructure Layer — database session management and cross-cutting concerns.

Invariants:
    - Infrastructure never imports domain logic beyond core/errors.py
    - All storage failures mapped to DatabaseError

Design Decisions:
    - Thin wrappers over SQLAlchemy and logging
"""
