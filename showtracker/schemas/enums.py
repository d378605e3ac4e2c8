from __future__ import annotations

"""
Central enum definitions used across ShowTracker.

Design notes
------------
• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (DB enums depend on them).
"""

from enum import Enum as PyEnum


# ──────────────────────────────────────────────────────────────
# Watch status
# ──────────────────────────────────────────────────────────────
class WatchStatus(str, PyEnum):
    """Per-profile consumption state of an episode, season, show or movie.

    UNAIRED      release date in the future, or nothing has aired yet
    NOT_WATCHED  aired, zero progress
    WATCHING     partial progress
    UP_TO_DATE   everything aired is consumed but more is expected
    WATCHED      everything consumed and nothing more is expected
    """
    UNAIRED = "UNAIRED"
    NOT_WATCHED = "NOT_WATCHED"
    WATCHING = "WATCHING"
    UP_TO_DATE = "UP_TO_DATE"
    WATCHED = "WATCHED"


class EntityType(str, PyEnum):
    """Kind of entity a status change refers to."""
    EPISODE = "episode"
    SEASON = "season"
    SHOW = "show"
    MOVIE = "movie"


__all__ = ["WatchStatus", "EntityType"]
