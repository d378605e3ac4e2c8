# tests/conftest.py
"""
Global test bootstrap
- Points settings at in-memory SQLite before anything imports the engine
- Registers the DB and watch-status fixtures
"""

from __future__ import annotations

import os
import warnings

from sqlalchemy.exc import SAWarning

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV", "development")

warnings.filterwarnings("ignore", category=SAWarning)

from tests.fixtures.db import *  # noqa: E402,F401,F403
from tests.fixtures.watch_status import *  # noqa: E402,F401,F403
