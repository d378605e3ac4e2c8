from __future__ import annotations

"""
ShowTracker — Watch-status service
==================================

Thin layer the profile-facing API calls. It runs the engine, turns the change
list into a short message for clients, and invalidates cached profile views
after a run that actually wrote rows.

Cache invalidation is injected (`invalidate_profile_cache(account_id,
profile_id)`), so this module carries no cache dependency.
"""

from collections import Counter
import logging
from typing import Awaitable, Callable, Iterable, Optional

from showtracker.core.exceptions import handle_database_error
from showtracker.schemas.enums import WatchStatus
from showtracker.schemas.watch_status import StatusChange, StatusUpdateResult
from showtracker.services.watch_status_engine import WatchStatusEngine

logger = logging.getLogger(__name__)

CacheInvalidator = Callable[[Optional[int], int], Awaitable[None]]

NO_CHANGES = "No status changes occurred"
SHOW_ALREADY_CORRECT = "Show status is already correct"
MOVIE_CURRENT = "Movie status is current"


def format_changes_message(changes: Iterable[StatusChange]) -> str:
    """`"Updated status for 2 episodes, 1 season"`, in first-seen order."""
    counts = Counter(c.entity_type.value for c in changes)
    if not counts:
        return NO_CHANGES
    parts = [f"{n} {kind}{'s' if n > 1 else ''}" for kind, n in counts.items()]
    return f"Updated status for {', '.join(parts)}"


class WatchStatusService:
    def __init__(
        self,
        engine: Optional[WatchStatusEngine] = None,
        *,
        invalidate_profile_cache: Optional[CacheInvalidator] = None,
    ) -> None:
        self.engine = engine or WatchStatusEngine()
        self._invalidate = invalidate_profile_cache

    async def update_episode_status(
        self,
        profile_id: int,
        episode_id: int,
        status: WatchStatus,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        context = f"update_episode_status({profile_id}, {episode_id}, {WatchStatus(status).value})"
        try:
            result = await self.engine.update_episode_status(profile_id, episode_id, status)
            return await self._finish(result, account_id, profile_id)
        except Exception as exc:
            handle_database_error(exc, context)

    async def update_season_status(
        self,
        profile_id: int,
        season_id: int,
        status: WatchStatus,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        context = f"update_season_status({profile_id}, {season_id}, {WatchStatus(status).value})"
        try:
            result = await self.engine.update_season_status(profile_id, season_id, status)
            return await self._finish(result, account_id, profile_id)
        except Exception as exc:
            handle_database_error(exc, context)

    async def update_show_status(
        self,
        profile_id: int,
        show_id: int,
        status: WatchStatus,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        context = f"update_show_status({profile_id}, {show_id}, {WatchStatus(status).value})"
        try:
            result = await self.engine.update_show_status(profile_id, show_id, status)
            return await self._finish(result, account_id, profile_id)
        except Exception as exc:
            handle_database_error(exc, context)

    async def check_and_update_show_status(
        self,
        profile_id: int,
        show_id: int,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        """Reconcile a show; nothing is invalidated when it was already correct."""
        context = f"check_and_update_show_status({profile_id}, {show_id})"
        try:
            result = await self.engine.check_and_update_show_status(profile_id, show_id)
            return await self._finish(
                result, account_id, profile_id, unchanged_message=SHOW_ALREADY_CORRECT
            )
        except Exception as exc:
            handle_database_error(exc, context)

    async def update_movie_status(
        self,
        profile_id: int,
        movie_id: int,
        status: WatchStatus,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        context = f"update_movie_status({profile_id}, {movie_id}, {WatchStatus(status).value})"
        try:
            result = await self.engine.update_movie_status(profile_id, movie_id, status)
            return await self._finish(result, account_id, profile_id)
        except Exception as exc:
            handle_database_error(exc, context)

    async def check_and_update_movie_status(
        self,
        profile_id: int,
        movie_id: int,
        *,
        account_id: Optional[int] = None,
    ) -> StatusUpdateResult:
        context = f"check_and_update_movie_status({profile_id}, {movie_id})"
        try:
            result = await self.engine.check_and_update_movie_status(profile_id, movie_id)
            return await self._finish(
                result, account_id, profile_id, unchanged_message=MOVIE_CURRENT
            )
        except Exception as exc:
            handle_database_error(exc, context)

    # ── Helpers ──────────────────────────────────────────────
    async def _finish(
        self,
        result: StatusUpdateResult,
        account_id: Optional[int],
        profile_id: int,
        *,
        unchanged_message: str = NO_CHANGES,
    ) -> StatusUpdateResult:
        if result.affected_rows <= 0:
            return result.model_copy(update={"message": unchanged_message})

        if self._invalidate is not None:
            await self._invalidate(account_id, profile_id)
            logger.debug("Invalidated profile cache for profile %s", profile_id)
        return result.model_copy(update={"message": format_changes_message(result.changes)})


__all__ = [
    "WatchStatusService",
    "CacheInvalidator",
    "format_changes_message",
    "NO_CHANGES",
    "SHOW_ALREADY_CORRECT",
    "MOVIE_CURRENT",
]
