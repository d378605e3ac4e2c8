# showtracker/db/base.py
"""
ShowTracker — SQLAlchemy Base registry
======================================

Import all ORM models so their tables are registered on `Base.metadata`.
Used by Alembic autogeneration and the test schema bootstrap.

Tip: Keep this file import-only; no runtime logic.
"""

from showtracker.db.base_class import Base
from showtracker.db.models import (  # noqa: F401
    Episode,
    EpisodeWatchStatus,
    Movie,
    MovieWatchStatus,
    Profile,
    Season,
    SeasonWatchStatus,
    Show,
    ShowWatchStatus,
)

__all__ = ["Base"]
