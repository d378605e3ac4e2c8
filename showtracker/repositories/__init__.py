"""
Store access for per-profile watch status.

`WatchStatusRepository` is stateless; the session it works on is always the
one opened by `showtracker.db.session.run_in_transaction`.
"""

from showtracker.repositories.watch_status import (
    EpisodeContext,
    SeasonContext,
    WatchStatusRepository,
)

__all__ = ["EpisodeContext", "SeasonContext", "WatchStatusRepository"]
