from __future__ import annotations

"""
Watch-status snapshots and propagation results.

Snapshots are immutable, store-agnostic views of one profile's hierarchy as
read inside a propagation run; the calculator only ever sees these. Results
are pydantic models so the service layer can hand them straight to an API.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from showtracker.schemas.enums import EntityType, WatchStatus

# Air/release dates arrive as DATE columns, but callers may also pass
# datetimes or ISO strings. Anything unparseable counts as "not aired".
DateLike = Union[date, datetime, str, None]


# ─────────────────────────────────────────────────────────────
# 📸 Snapshots (immutable)
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class EpisodeSnapshot:
    id: int
    season_id: int
    air_date: DateLike
    status: WatchStatus = WatchStatus.NOT_WATCHED

    def with_status(self, status: WatchStatus) -> "EpisodeSnapshot":
        return replace(self, status=status)


@dataclass(frozen=True)
class SeasonSnapshot:
    id: int
    show_id: int
    release_date: DateLike
    status: Optional[WatchStatus] = None
    episodes: Tuple[EpisodeSnapshot, ...] = field(default_factory=tuple)

    def with_status(self, status: Optional[WatchStatus]) -> "SeasonSnapshot":
        return replace(self, status=status)

    def with_episodes(self, episodes) -> "SeasonSnapshot":
        return replace(self, episodes=tuple(episodes))


@dataclass(frozen=True)
class ShowSnapshot:
    id: int
    release_date: DateLike
    in_production: bool = False
    status: Optional[WatchStatus] = None
    seasons: Tuple[SeasonSnapshot, ...] = field(default_factory=tuple)

    def with_seasons(self, seasons) -> "ShowSnapshot":
        return replace(self, seasons=tuple(seasons))


@dataclass(frozen=True)
class MovieSnapshot:
    id: int
    release_date: DateLike
    status: WatchStatus = WatchStatus.NOT_WATCHED


# ─────────────────────────────────────────────────────────────
# 🧾 Change records & results
# ─────────────────────────────────────────────────────────────
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusChange(BaseModel):
    """One status transition recorded during a propagation run (not persisted)."""

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    entity_id: int
    from_status: WatchStatus
    to_status: WatchStatus
    reason: str
    timestamp: datetime = Field(default_factory=_utcnow)


class StatusUpdateResult(BaseModel):
    """Uniform result of every propagation operation."""

    success: bool = True
    changes: List[StatusChange] = Field(default_factory=list)
    affected_rows: int = 0
    message: Optional[str] = None

    def changes_for(self, entity_type: EntityType) -> List[StatusChange]:
        return [c for c in self.changes if c.entity_type == entity_type]


__all__ = [
    "DateLike",
    "EpisodeSnapshot",
    "SeasonSnapshot",
    "ShowSnapshot",
    "MovieSnapshot",
    "StatusChange",
    "StatusUpdateResult",
]
