"""Root conftest — shared test configuration."""

import os

# Ensure tests never touch the developer's real data file
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")
