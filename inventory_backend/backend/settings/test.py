# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- DATABASE_URL is honoured, so the suite can run against Postgres
  (required for the threaded row-lock tests); SQLite otherwise.
  On SQLite the threaded tests in products/tests/test_concurrency.py are
  skipped; use backend.settings.ci with a postgres:// DATABASE_URL to run them.
- Fast password hashing.
- Quiet stock logs unless LOG_LEVEL is raised explicitly.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["products"]["level"] = env("LOG_LEVEL", default="WARNING").upper()
