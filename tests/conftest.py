"""Root conftest — shared test configuration."""

import os

os.environ.setdefault("QR_SECRET", "test-qr-secret-0123456789")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
