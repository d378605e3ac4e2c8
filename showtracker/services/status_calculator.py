from __future__ import annotations

"""
ShowTracker — Watch Status Calculator
=====================================

Pure, deterministic derivation of an entity's status from its children.

Rules
-----
• `now` is always passed in; nothing here reads the clock.
• A missing or unparseable date is **never** "aired".
• A season with no episodes, or a show with no seasons, is `UNAIRED`.
• No I/O and no mutable state; one instance can be shared process-wide.
"""

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from showtracker.schemas.enums import WatchStatus
from showtracker.schemas.watch_status import (
    DateLike,
    EpisodeSnapshot,
    MovieSnapshot,
    SeasonSnapshot,
    ShowSnapshot,
)

_COMPLETE = (WatchStatus.WATCHED, WatchStatus.UP_TO_DATE)


def _as_date(value: DateLike) -> Optional[date]:
    """Normalize a DATE/DATETIME/ISO string to a `date`; None when invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def has_aired(value: DateLike, now: datetime) -> bool:
    """True when `value` is a valid date on or before `now`."""
    d = _as_date(value)
    return d is not None and d <= now.date()


def is_unaired(value: DateLike, now: datetime) -> bool:
    return not has_aired(value, now)


class StatusCalculator:
    """Stateless status derivation for episodes, seasons, shows and movies."""

    __slots__ = ()

    # ── Leaves ───────────────────────────────────────────────
    def calculate_episode_status(self, episode: EpisodeSnapshot, now: datetime) -> WatchStatus:
        if is_unaired(episode.air_date, now):
            return WatchStatus.UNAIRED
        return WatchStatus.WATCHED if episode.status == WatchStatus.WATCHED else WatchStatus.NOT_WATCHED

    def calculate_movie_status(self, movie: MovieSnapshot, now: datetime) -> WatchStatus:
        if is_unaired(movie.release_date, now):
            return WatchStatus.UNAIRED
        if movie.status == WatchStatus.UNAIRED:
            return WatchStatus.NOT_WATCHED
        return movie.status

    def target_status(self, air_date: DateLike, target: WatchStatus, now: datetime) -> WatchStatus:
        """What an explicit user action writes: `target` once aired, otherwise UNAIRED."""
        return WatchStatus.UNAIRED if is_unaired(air_date, now) else WatchStatus(target)

    # ── Season ───────────────────────────────────────────────
    def calculate_season_status(self, season: SeasonSnapshot, now: datetime) -> WatchStatus:
        if is_unaired(season.release_date, now):
            return WatchStatus.UNAIRED

        aired = [e for e in season.episodes if has_aired(e.air_date, now)]
        unaired_count = len(season.episodes) - len(aired)
        watched = sum(1 for e in aired if e.status == WatchStatus.WATCHED)

        if not aired:
            return WatchStatus.UNAIRED
        if watched == 0:
            return WatchStatus.NOT_WATCHED
        if watched < len(aired):
            return WatchStatus.WATCHING
        if unaired_count > 0:
            return WatchStatus.UP_TO_DATE
        return WatchStatus.WATCHED

    # ── Show ─────────────────────────────────────────────────
    def season_has_aired(self, season: SeasonSnapshot, now: datetime) -> bool:
        """A season counts as aired once at least one of its episodes has."""
        return any(has_aired(e.air_date, now) for e in season.episodes)

    def calculate_show_status(self, show: ShowSnapshot, now: datetime) -> WatchStatus:
        if is_unaired(show.release_date, now):
            return WatchStatus.UNAIRED

        aired = [s for s in show.seasons if self.season_has_aired(s, now)]
        has_unaired_seasons = len(aired) < len(show.seasons)

        if not aired:
            return WatchStatus.UNAIRED

        statuses = [s.status or self.calculate_season_status(s, now) for s in aired]
        not_watched = statuses.count(WatchStatus.NOT_WATCHED)
        complete = sum(1 for s in statuses if s in _COMPLETE)

        if not_watched == len(statuses):
            return WatchStatus.NOT_WATCHED
        if WatchStatus.WATCHING in statuses:
            return WatchStatus.WATCHING
        # One finished season next to an untouched one is still progress.
        if not_watched > 0 and complete > 0:
            return WatchStatus.WATCHING
        if complete == len(statuses):
            return self.determine_completion_status(
                True, bool(show.in_production), has_unaired_seasons
            )
        # Stale precomputed values (e.g. an aired season still stored UNAIRED).
        return WatchStatus.WATCHING

    # ── Helpers ──────────────────────────────────────────────
    @staticmethod
    def determine_completion_status(
        is_complete: bool,
        in_production: bool,
        has_upcoming: bool,
    ) -> WatchStatus:
        """WATCHING until complete; then UP_TO_DATE while more is expected."""
        if not is_complete:
            return WatchStatus.WATCHING
        if in_production or has_upcoming:
            return WatchStatus.UP_TO_DATE
        return WatchStatus.WATCHED

    def generate_status_summary(self, show: ShowSnapshot, now: datetime) -> str:
        """Multi-line, human-readable breakdown of a show snapshot for debugging."""
        lines = [
            f'Show "{show.id}" - Status: {self.calculate_show_status(show, now).value}',
            f"  Air Date: {_fmt_date(show.release_date, now)}",
            f"  In Production: {bool(show.in_production)}",
            f"  Seasons: {len(show.seasons)}",
            "",
        ]
        for season in show.seasons:
            aired = sum(1 for e in season.episodes if has_aired(e.air_date, now))
            watched = _count_watched(season.episodes)
            lines += [
                f'  Season "{season.id}" - Status: {self.calculate_season_status(season, now).value}',
                f"    Air Date: {_fmt_date(season.release_date, now)}",
                f"    Episodes: {len(season.episodes)}",
                f"    Progress: {watched}/{aired} aired episodes watched",
                "",
            ]
        return "\n".join(lines)


def _fmt_date(value: DateLike, now: datetime) -> str:
    if is_unaired(value, now):
        return "INVALID/UNAIRED"
    return _as_date(value).isoformat()  # type: ignore[union-attr]


def _count_watched(episodes: Iterable[EpisodeSnapshot]) -> int:
    return sum(1 for e in episodes if e.status == WatchStatus.WATCHED)


def episodes_needing_reconcile(
    episodes: Sequence[EpisodeSnapshot], now: datetime
) -> list[tuple[EpisodeSnapshot, WatchStatus]]:
    """Episodes whose stored status contradicts their air date.

    Stored `UNAIRED` but aired → `NOT_WATCHED`; anything else but not yet
    aired (e.g. rescheduled) → `UNAIRED`.
    """
    calc = StatusCalculator()
    out: list[tuple[EpisodeSnapshot, WatchStatus]] = []
    for ep in episodes:
        derived = calc.calculate_episode_status(ep, now)
        if (derived == WatchStatus.UNAIRED) != (ep.status == WatchStatus.UNAIRED):
            out.append((ep, derived))
    return out


__all__ = [
    "StatusCalculator",
    "has_aired",
    "is_unaired",
    "episodes_needing_reconcile",
]
