"""Integrity Helpers — tell a named unique-constraint violation from other IntegrityErrors.

Invariants:
    - Only the named unique constraint matches; foreign-key, not-null and other
      unique violations do not

Design Decisions:
    - PostgreSQL reports the constraint name, SQLite reports the column list: both
      forms are derived from the model's own UniqueConstraint
"""

from sqlalchemy import Table, UniqueConstraint
from sqlalchemy.exc import IntegrityError


def violates_unique(exc: IntegrityError, table: Table, name: str) -> bool:
    """True if exc was raised by the unique constraint `name` of `table`."""
    constraint = next(
        c for c in table.constraints
        if isinstance(c, UniqueConstraint) and c.name == name
    )
    message = str(exc.orig)
    if f'"{name}"' in message:
        return True
    columns = ", ".join(f"{table.name}.{column.name}" for column in constraint.columns)
    return f"UNIQUE constraint failed: {columns}" in message
