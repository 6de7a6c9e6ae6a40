"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Services load state through injected stores, call core rules, then persist
    - Services never check caller roles (the API layer's auth collaborator does)
    - Expected operational outcomes are returned as values, not raised

Design Decisions:
    - One service per component, constructed per request with that request's stores
"""
