"""Repositories — SQLAlchemy implementations of the store protocols in core/repository_protocols.py.

Invariants:
    - One repository per aggregate, each wrapping the request's AsyncSession
    - Repositories commit their own writes; a uniqueness violation on the two
      compare-and-set writes is rolled back and reported as False, never raised

Design Decisions:
    - Injected into services by the API layer, so services stay storage-agnostic
"""
