"""Shared pytest configuration and fixtures."""
from __future__ import annotations

import os

# Provide required env vars before any content_analysis module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("RECOGNITION_PROVIDER", "mock")
