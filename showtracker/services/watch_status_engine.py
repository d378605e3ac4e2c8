from __future__ import annotations

"""
⏯️ ShowTracker — Watch-status propagation engine
================================================

Every public operation runs as **exactly one transaction** (see
`showtracker.db.session.run_in_transaction`) and returns a
`StatusUpdateResult` with the recorded changes and the number of rows written.

A run first locks the profile's show status row and only then reads status
rows, so it sees everything committed by runs that held the lock before it.
Order inside a run is always: episodes → seasons → show. Each level is
recomputed from the level below by `StatusCalculator`; a row is written only
when its computed status differs from the stored one, so repeating a call with
no new data is a no-op.

Operations
----------
• `update_episode_status(profile_id, episode_id, target)`
• `update_season_status(profile_id, season_id, target)`
• `update_show_status(profile_id, show_id, target)`
• `check_and_update_show_status(profile_id, show_id)`      (reconciliation)
• `update_movie_status(profile_id, movie_id, target)`
• `check_and_update_movie_status(profile_id, movie_id)`    (reconciliation)

Errors
------
• `NotFoundError` when the trigger entity does not exist (propagated as is).
• Anything else is rolled back and re-raised as `DatabaseError` with context.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Awaitable, Callable, Dict, Iterable, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from showtracker.core.exceptions import NotFoundError, handle_database_error
from showtracker.db.session import SessionFactory, run_in_transaction
from showtracker.repositories.watch_status import WatchStatusRepository
from showtracker.schemas.enums import EntityType, WatchStatus
from showtracker.schemas.watch_status import (
    EpisodeSnapshot,
    SeasonSnapshot,
    ShowSnapshot,
    StatusUpdateResult,
)
from showtracker.services.change_recorder import ChangeRecorder
from showtracker.services.status_calculator import (
    StatusCalculator,
    episodes_needing_reconcile,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

CONTENT_UPDATES = "content updates detected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Run:
    """Mutable state of one propagation run (never shared across runs)."""

    session: AsyncSession
    profile_id: int
    now: datetime
    recorder: ChangeRecorder
    affected: int = 0

    def result(self) -> StatusUpdateResult:
        return StatusUpdateResult(
            success=True,
            changes=self.recorder.changes,
            affected_rows=self.affected,
        )


def _with_statuses(
    episodes: Iterable[EpisodeSnapshot], updates: Mapping[int, WatchStatus]
) -> Tuple[EpisodeSnapshot, ...]:
    return tuple(e.with_status(updates[e.id]) if e.id in updates else e for e in episodes)


class WatchStatusEngine:
    """Propagates watch-status changes through episode → season → show."""

    def __init__(
        self,
        repository: Optional[WatchStatusRepository] = None,
        calculator: Optional[StatusCalculator] = None,
        *,
        session_factory: Optional[SessionFactory] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.repository = repository or WatchStatusRepository()
        self.calculator = calculator or StatusCalculator()
        self.session_factory = session_factory
        self.clock = clock or _utcnow

    # ─────────────────────────────────────────────────────────
    # 🎬 Episode
    # ─────────────────────────────────────────────────────────
    async def update_episode_status(
        self, profile_id: int, episode_id: int, target: WatchStatus
    ) -> StatusUpdateResult:
        target = WatchStatus(target)

        async def work(run: _Run) -> StatusUpdateResult:
            repo = self.repository
            show_id = await repo.get_show_id_for_episode(run.session, episode_id)
            if show_id is None:
                raise NotFoundError(
                    f"Episode {episode_id} not found",
                    entity_type=EntityType.EPISODE.value,
                    entity_id=episode_id,
                )
            await repo.lock_show_status(run.session, profile_id, show_id)

            ctx = await repo.get_episode_context(run.session, profile_id, episode_id)
            episodes = await repo.get_season_episodes(run.session, profile_id, ctx.season.id)
            episode = next(e for e in episodes if e.id == episode_id)
            value = self.calculator.target_status(episode.air_date, target, run.now)
            updates = await self._write_episodes(
                run, [(episode, value)], f"Episode marked as {target.value}"
            )

            # Siblings stored UNAIRED that have since aired.
            siblings = [e for e in episodes if e.id != episode_id]
            aired_since = [
                (e, s)
                for e, s in episodes_needing_reconcile(siblings, run.now)
                if s == WatchStatus.NOT_WATCHED
            ]
            updates.update(
                await self._write_episodes(
                    run, aired_since, f"Episode has aired, {CONTENT_UPDATES}"
                )
            )

            season = ctx.season.with_episodes(_with_statuses(episodes, updates))
            await self._settle_season(run, season, f"Episode {episode_id} status changed")
            await self._settle_show(run, show_id, f"Season {ctx.season.id} status changed")
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"updating episode watch status with propagation ({profile_id}, {episode_id}, {target.value})",
        )

    # ─────────────────────────────────────────────────────────
    # 📺 Season
    # ─────────────────────────────────────────────────────────
    async def update_season_status(
        self, profile_id: int, season_id: int, target: WatchStatus
    ) -> StatusUpdateResult:
        target = WatchStatus(target)

        async def work(run: _Run) -> StatusUpdateResult:
            repo = self.repository
            show_id = await repo.get_show_id_for_season(run.session, season_id)
            if show_id is None:
                raise NotFoundError(
                    f"Season {season_id} not found",
                    entity_type=EntityType.SEASON.value,
                    entity_id=season_id,
                )
            await repo.lock_show_status(run.session, profile_id, show_id)

            ctx = await repo.get_season_context(run.session, profile_id, season_id)
            episodes = await repo.get_season_episodes(run.session, profile_id, season_id)
            updates = await self._write_episodes(
                run,
                self._bulk_targets(episodes, target, run.now),
                f"Season {season_id} marked as {target.value}",
            )

            season = ctx.season.with_episodes(_with_statuses(episodes, updates))
            await self._settle_season(run, season, f"Season manually set to {target.value}")
            await self._settle_show(run, show_id, f"Season {season_id} status changed")
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"updating season watch status with propagation ({profile_id}, {season_id}, {target.value})",
        )

    # ─────────────────────────────────────────────────────────
    # 🗂️ Show
    # ─────────────────────────────────────────────────────────
    async def update_show_status(
        self, profile_id: int, show_id: int, target: WatchStatus
    ) -> StatusUpdateResult:
        target = WatchStatus(target)
        reason = f"Show manually set to {target.value}"

        async def work(run: _Run) -> StatusUpdateResult:
            show = await self._locked_hierarchy(run, show_id)
            all_episodes = [e for s in show.seasons for e in s.episodes]
            updates = await self._write_episodes(
                run, self._bulk_targets(all_episodes, target, run.now), reason
            )
            await self._settle_hierarchy(run, show, updates, reason)
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"updating show watch status with propagation ({profile_id}, {show_id}, {target.value})",
        )

    async def check_and_update_show_status(self, profile_id: int, show_id: int) -> StatusUpdateResult:
        """Reconcile a show after content aged past (or was moved beyond) its air dates."""

        async def work(run: _Run) -> StatusUpdateResult:
            show = await self._locked_hierarchy(run, show_id)
            all_episodes = [e for s in show.seasons for e in s.episodes]

            drift = episodes_needing_reconcile(all_episodes, run.now)
            promoted = [(e, s) for e, s in drift if s == WatchStatus.NOT_WATCHED]
            demoted = [(e, s) for e, s in drift if s == WatchStatus.UNAIRED]

            updates: Dict[int, WatchStatus] = {}
            updates.update(
                await self._write_episodes(run, promoted, f"Episode has aired, {CONTENT_UPDATES}")
            )
            updates.update(
                await self._write_episodes(
                    run, demoted, f"Episode air date moved to the future, {CONTENT_UPDATES}"
                )
            )
            await self._settle_hierarchy(
                run, show, updates, f"Status recalculated, {CONTENT_UPDATES}"
            )
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"checking show watch status ({profile_id}, {show_id})",
        )

    # ─────────────────────────────────────────────────────────
    # 🎞️ Movie
    # ─────────────────────────────────────────────────────────
    async def update_movie_status(
        self, profile_id: int, movie_id: int, target: WatchStatus
    ) -> StatusUpdateResult:
        target = WatchStatus(target)

        async def work(run: _Run) -> StatusUpdateResult:
            movie = await self._movie(run, movie_id)
            value = self.calculator.target_status(movie.release_date, target, run.now)
            await self._write_movie(run, movie_id, movie.status, value, f"Movie marked as {target.value}")
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"updating movie watch status ({profile_id}, {movie_id}, {target.value})",
        )

    async def check_and_update_movie_status(self, profile_id: int, movie_id: int) -> StatusUpdateResult:
        async def work(run: _Run) -> StatusUpdateResult:
            movie = await self._movie(run, movie_id)
            value = self.calculator.calculate_movie_status(movie, run.now)
            await self._write_movie(
                run, movie_id, movie.status, value, f"Release date check, {CONTENT_UPDATES}"
            )
            return run.result()

        return await self._execute(
            work,
            profile_id,
            context=f"checking movie watch status ({profile_id}, {movie_id})",
        )

    # ─────────────────────────────────────────────────────────
    # 🔧 Steps
    # ─────────────────────────────────────────────────────────
    def _bulk_targets(
        self, episodes: Iterable[EpisodeSnapshot], target: WatchStatus, now: datetime
    ) -> list:
        """Aired episodes take `target`; everything else becomes UNAIRED."""
        return [(e, self.calculator.target_status(e.air_date, target, now)) for e in episodes]

    async def _write_episodes(
        self,
        run: _Run,
        desired: Iterable[Tuple[EpisodeSnapshot, WatchStatus]],
        reason: str,
    ) -> Dict[int, WatchStatus]:
        """Record and upsert the episodes whose status actually moves."""
        writes: Dict[int, WatchStatus] = {}
        for episode, status in desired:
            if run.recorder.record(EntityType.EPISODE, episode.id, episode.status, status, reason):
                writes[episode.id] = status
        run.affected += await self.repository.upsert_episode_statuses(
            run.session, run.profile_id, writes.items()
        )
        return writes

    async def _settle_season(self, run: _Run, season: SeasonSnapshot, reason: str) -> WatchStatus:
        """Recompute a season from its episodes; write it when it changed."""
        stored = season.status or WatchStatus.NOT_WATCHED
        new = self.calculator.calculate_season_status(season, run.now)
        if run.recorder.record(EntityType.SEASON, season.id, stored, new, reason):
            run.affected += await self.repository.upsert_season_status(
                run.session, run.profile_id, season.id, new
            )
        return new

    async def _settle_show(self, run: _Run, show_id: int, reason: str) -> WatchStatus:
        """Recompute the show from the seasons as they now stand in this transaction."""
        show = await self.repository.get_show_hierarchy(run.session, run.profile_id, show_id)
        return await self._write_show(run, show, reason)

    async def _settle_hierarchy(
        self,
        run: _Run,
        show: ShowSnapshot,
        updates: Mapping[int, WatchStatus],
        reason: str,
    ) -> None:
        seasons = []
        for season in show.seasons:
            season = season.with_episodes(_with_statuses(season.episodes, updates))
            new = await self._settle_season(run, season, reason)
            seasons.append(season.with_status(new))
        await self._write_show(run, show.with_seasons(seasons), reason)

    async def _write_show(self, run: _Run, show: ShowSnapshot, reason: str) -> WatchStatus:
        stored = show.status or WatchStatus.NOT_WATCHED
        new = self.calculator.calculate_show_status(show, run.now)
        if run.recorder.record(EntityType.SHOW, show.id, stored, new, reason):
            run.affected += await self.repository.upsert_show_status(
                run.session, run.profile_id, show.id, new
            )
        return new

    async def _locked_hierarchy(self, run: _Run, show_id: int) -> ShowSnapshot:
        repo = self.repository
        if await repo.get_show_context(run.session, run.profile_id, show_id) is None:
            raise NotFoundError(
                f"Show {show_id} not found",
                entity_type=EntityType.SHOW.value,
                entity_id=show_id,
            )
        await repo.lock_show_status(run.session, run.profile_id, show_id)
        return await repo.get_show_hierarchy(run.session, run.profile_id, show_id)

    async def _movie(self, run: _Run, movie_id: int):
        movie = await self.repository.get_movie_context(run.session, run.profile_id, movie_id)
        if movie is None:
            raise NotFoundError(
                f"Movie {movie_id} not found",
                entity_type=EntityType.MOVIE.value,
                entity_id=movie_id,
            )
        return movie

    async def _write_movie(
        self,
        run: _Run,
        movie_id: int,
        stored: WatchStatus,
        new: WatchStatus,
        reason: str,
    ) -> None:
        if run.recorder.record(EntityType.MOVIE, movie_id, stored, new, reason):
            run.affected += await self.repository.upsert_movie_status(
                run.session, run.profile_id, movie_id, new
            )

    # ─────────────────────────────────────────────────────────
    # 🔒 Transaction wrapper
    # ─────────────────────────────────────────────────────────
    async def _execute(
        self,
        work: Callable[[_Run], Awaitable[StatusUpdateResult]],
        profile_id: int,
        *,
        context: str,
    ) -> StatusUpdateResult:
        logger.debug("Start %s", context)

        async def in_session(session: AsyncSession) -> StatusUpdateResult:
            run = _Run(session=session, profile_id=profile_id, now=self.clock(), recorder=ChangeRecorder())
            return await work(run)

        try:
            result = await run_in_transaction(in_session, session_factory=self.session_factory)
        except NotFoundError as exc:
            logger.warning("%s: %s", context, exc.message)
            raise
        except Exception as exc:
            logger.error("Failed %s: %s", context, exc)
            handle_database_error(exc, context)

        logger.info(
            "Done %s: %d change(s), %d row(s) written",
            context,
            len(result.changes),
            result.affected_rows,
        )
        return result


__all__ = ["WatchStatusEngine", "CONTENT_UPDATES"]
