"""eventgate — QR check-in, checkpoint progression, team formation and scoring.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
