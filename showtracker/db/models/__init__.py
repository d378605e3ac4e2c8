# showtracker/db/models/__init__.py
"""
ORM models. Importing this package registers every table on `Base.metadata`.
"""

from showtracker.db.base_class import Base

# ───────────────────────────────────────────────────────────────
# Core: Profiles
# ───────────────────────────────────────────────────────────────
from .profile import Profile

# ───────────────────────────────────────────────────────────────
# Catalog: Shows, Seasons, Episodes, Movies (read-only to the engine)
# ───────────────────────────────────────────────────────────────
from .show import Show
from .season import Season
from .episode import Episode
from .movie import Movie

# ───────────────────────────────────────────────────────────────
# Engagement: per-profile watch status
# ───────────────────────────────────────────────────────────────
from .watch_status import (
    EpisodeWatchStatus,
    MovieWatchStatus,
    SeasonWatchStatus,
    ShowWatchStatus,
)

__all__ = [
    "Base",
    "Profile",
    "Show",
    "Season",
    "Episode",
    "Movie",
    "EpisodeWatchStatus",
    "SeasonWatchStatus",
    "ShowWatchStatus",
    "MovieWatchStatus",
]
