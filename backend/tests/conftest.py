"""Root conftest — shared test configuration."""

import os

# Never reach for the docker-compose Postgres from a test run
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
