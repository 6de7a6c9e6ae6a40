"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, repositories/ or db/
    - All functions are pure and deterministic (token issuance reads the clock and a nonce source,
      both injectable)

Design Decisions:
    - Functional core separated from imperative shell: services load rows, call core, persist
"""
