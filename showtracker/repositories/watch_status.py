from __future__ import annotations

"""
🗄️ ShowTracker — Watch-status store access
==========================================

Reads and writes the per-profile status tables. Every method takes the live
`AsyncSession` handed out by the transactional driver, so a whole propagation
run reads and writes through one connection and one transaction.

Reads
-----
• Catalog rows are LEFT JOINed with the profile's status rows; a missing
  status row reads as `NOT_WATCHED`.
• Results come back as immutable snapshots (`showtracker.schemas.watch_status`).

Writes
------
• Batched `INSERT … ON CONFLICT (profile_id, <entity>_id) DO UPDATE` setting
  `status` and `updated_at`. PostgreSQL and SQLite are supported.
• Methods return the number of rows they were asked to write.
"""

from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import and_, func, literal, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from showtracker.db.models import (
    Episode,
    EpisodeWatchStatus,
    Movie,
    MovieWatchStatus,
    Season,
    SeasonWatchStatus,
    Show,
    ShowWatchStatus,
)
from showtracker.db.models.watch_status import watch_status_enum
from showtracker.schemas.enums import WatchStatus
from showtracker.schemas.watch_status import (
    EpisodeSnapshot,
    MovieSnapshot,
    SeasonSnapshot,
    ShowSnapshot,
)

logger = logging.getLogger(__name__)

# Rows per INSERT statement; keeps bind parameter counts well under SQLite's limit.
UPSERT_CHUNK_SIZE = 300


# ─────────────────────────────────────────────────────────────
# 📦 Context rows
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class EpisodeContext:
    """An episode with its season and show, each carrying the stored status."""

    episode: EpisodeSnapshot
    season: SeasonSnapshot
    show: ShowSnapshot


@dataclass(frozen=True)
class SeasonContext:
    season: SeasonSnapshot
    show: ShowSnapshot


def _stored(column, label: str = "status"):
    """COALESCE a status column so missing rows read as NOT_WATCHED."""
    return func.coalesce(
        column, literal(WatchStatus.NOT_WATCHED, type_=watch_status_enum)
    ).label(label)


# ─────────────────────────────────────────────────────────────
# 🏷️ Repository
# ─────────────────────────────────────────────────────────────
class WatchStatusRepository:
    """Stateless store access for episode, season, show and movie statuses."""

    # ── Lock targets ─────────────────────────────────────────
    # Catalog-only lookups run before `lock_show_status`; status rows are
    # read after the lock so they reflect every run committed before ours.
    async def get_show_id_for_episode(self, session: AsyncSession, episode_id: int) -> Optional[int]:
        stmt = (
            select(Season.show_id)
            .join(Episode, Episode.season_id == Season.id)
            .where(Episode.id == episode_id)
        )
        return (await session.execute(stmt)).scalar_one_or_none()

    async def get_show_id_for_season(self, session: AsyncSession, season_id: int) -> Optional[int]:
        stmt = select(Season.show_id).where(Season.id == season_id)
        return (await session.execute(stmt)).scalar_one_or_none()

    # ── Context reads ────────────────────────────────────────
    async def get_episode_context(
        self, session: AsyncSession, profile_id: int, episode_id: int
    ) -> Optional[EpisodeContext]:
        ews, sws, shws = EpisodeWatchStatus, SeasonWatchStatus, ShowWatchStatus
        stmt = (
            select(
                Episode.id,
                Episode.season_id,
                Episode.air_date,
                _stored(ews.status, "episode_status"),
                Season.show_id,
                Season.release_date.label("season_release_date"),
                _stored(sws.status, "season_status"),
                Show.release_date.label("show_release_date"),
                Show.in_production,
                _stored(shws.status, "show_status"),
            )
            .join(Season, Episode.season_id == Season.id)
            .join(Show, Season.show_id == Show.id)
            .outerjoin(ews, and_(ews.episode_id == Episode.id, ews.profile_id == profile_id))
            .outerjoin(sws, and_(sws.season_id == Season.id, sws.profile_id == profile_id))
            .outerjoin(shws, and_(shws.show_id == Show.id, shws.profile_id == profile_id))
            .where(Episode.id == episode_id)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return EpisodeContext(
            episode=EpisodeSnapshot(
                id=row.id,
                season_id=row.season_id,
                air_date=row.air_date,
                status=row.episode_status,
            ),
            season=SeasonSnapshot(
                id=row.season_id,
                show_id=row.show_id,
                release_date=row.season_release_date,
                status=row.season_status,
            ),
            show=ShowSnapshot(
                id=row.show_id,
                release_date=row.show_release_date,
                in_production=bool(row.in_production),
                status=row.show_status,
            ),
        )

    async def get_season_context(
        self, session: AsyncSession, profile_id: int, season_id: int
    ) -> Optional[SeasonContext]:
        sws, shws = SeasonWatchStatus, ShowWatchStatus
        stmt = (
            select(
                Season.id,
                Season.show_id,
                Season.release_date,
                _stored(sws.status, "season_status"),
                Show.release_date.label("show_release_date"),
                Show.in_production,
                _stored(shws.status, "show_status"),
            )
            .join(Show, Season.show_id == Show.id)
            .outerjoin(sws, and_(sws.season_id == Season.id, sws.profile_id == profile_id))
            .outerjoin(shws, and_(shws.show_id == Show.id, shws.profile_id == profile_id))
            .where(Season.id == season_id)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return SeasonContext(
            season=SeasonSnapshot(
                id=row.id,
                show_id=row.show_id,
                release_date=row.release_date,
                status=row.season_status,
            ),
            show=ShowSnapshot(
                id=row.show_id,
                release_date=row.show_release_date,
                in_production=bool(row.in_production),
                status=row.show_status,
            ),
        )

    async def get_show_context(
        self, session: AsyncSession, profile_id: int, show_id: int
    ) -> Optional[ShowSnapshot]:
        shws = ShowWatchStatus
        stmt = (
            select(Show.id, Show.release_date, Show.in_production, _stored(shws.status))
            .outerjoin(shws, and_(shws.show_id == Show.id, shws.profile_id == profile_id))
            .where(Show.id == show_id)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return ShowSnapshot(
            id=row.id,
            release_date=row.release_date,
            in_production=bool(row.in_production),
            status=row.status,
        )

    async def get_movie_context(
        self, session: AsyncSession, profile_id: int, movie_id: int
    ) -> Optional[MovieSnapshot]:
        mws = MovieWatchStatus
        stmt = (
            select(Movie.id, Movie.release_date, _stored(mws.status))
            .outerjoin(mws, and_(mws.movie_id == Movie.id, mws.profile_id == profile_id))
            .where(Movie.id == movie_id)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return MovieSnapshot(id=row.id, release_date=row.release_date, status=row.status)

    # ── Hierarchy reads ──────────────────────────────────────
    async def get_season_episodes(
        self, session: AsyncSession, profile_id: int, season_id: int
    ) -> Tuple[EpisodeSnapshot, ...]:
        ews = EpisodeWatchStatus
        stmt = (
            select(Episode.id, Episode.season_id, Episode.air_date, _stored(ews.status))
            .outerjoin(ews, and_(ews.episode_id == Episode.id, ews.profile_id == profile_id))
            .where(Episode.season_id == season_id)
            .order_by(Episode.episode_number)
        )
        rows = (await session.execute(stmt)).all()
        return tuple(
            EpisodeSnapshot(id=r.id, season_id=r.season_id, air_date=r.air_date, status=r.status)
            for r in rows
        )

    async def get_show_hierarchy(
        self, session: AsyncSession, profile_id: int, show_id: int
    ) -> Optional[ShowSnapshot]:
        """The show with every season and every episode, statuses as stored."""
        show = await self.get_show_context(session, profile_id, show_id)
        if show is None:
            return None

        sws, ews = SeasonWatchStatus, EpisodeWatchStatus
        season_rows = (
            await session.execute(
                select(Season.id, Season.show_id, Season.release_date, _stored(sws.status))
                .outerjoin(sws, and_(sws.season_id == Season.id, sws.profile_id == profile_id))
                .where(Season.show_id == show_id)
                .order_by(Season.season_number)
            )
        ).all()

        episode_rows = (
            await session.execute(
                select(Episode.id, Episode.season_id, Episode.air_date, _stored(ews.status))
                .join(Season, Episode.season_id == Season.id)
                .outerjoin(ews, and_(ews.episode_id == Episode.id, ews.profile_id == profile_id))
                .where(Season.show_id == show_id)
                .order_by(Season.season_number, Episode.episode_number)
            )
        ).all()

        by_season: Dict[int, List[EpisodeSnapshot]] = {}
        for r in episode_rows:
            by_season.setdefault(r.season_id, []).append(
                EpisodeSnapshot(id=r.id, season_id=r.season_id, air_date=r.air_date, status=r.status)
            )

        seasons = [
            SeasonSnapshot(
                id=r.id,
                show_id=r.show_id,
                release_date=r.release_date,
                status=r.status,
                episodes=tuple(by_season.get(r.id, ())),
            )
            for r in season_rows
        ]
        return show.with_seasons(seasons)

    # ── Locking ──────────────────────────────────────────────
    async def lock_show_status(self, session: AsyncSession, profile_id: int, show_id: int) -> None:
        """Take the row lock on the profile's show status row for this transaction.

        The row is created first (as `NOT_WATCHED`) when missing, so two first
        runs on the same show also serialize on the unique key. Dialects
        without row locks (SQLite) compile `FOR UPDATE` away.
        """
        insert = self._insert_for(session)
        ensure = (
            insert(ShowWatchStatus)
            .values(profile_id=profile_id, show_id=show_id, status=WatchStatus.NOT_WATCHED)
            .on_conflict_do_nothing(index_elements=["profile_id", "show_id"])
        )
        await session.execute(ensure)
        await session.execute(
            select(ShowWatchStatus.id)
            .where(ShowWatchStatus.profile_id == profile_id, ShowWatchStatus.show_id == show_id)
            .with_for_update()
        )

    # ── Writes ───────────────────────────────────────────────
    async def upsert_episode_statuses(
        self,
        session: AsyncSession,
        profile_id: int,
        statuses: Iterable[Tuple[int, WatchStatus]],
    ) -> int:
        rows = [
            {"profile_id": profile_id, "episode_id": episode_id, "status": status}
            for episode_id, status in statuses
        ]
        return await self._upsert(session, EpisodeWatchStatus, "episode_id", rows)

    async def upsert_season_status(
        self, session: AsyncSession, profile_id: int, season_id: int, status: WatchStatus
    ) -> int:
        rows = [{"profile_id": profile_id, "season_id": season_id, "status": status}]
        return await self._upsert(session, SeasonWatchStatus, "season_id", rows)

    async def upsert_show_status(
        self, session: AsyncSession, profile_id: int, show_id: int, status: WatchStatus
    ) -> int:
        rows = [{"profile_id": profile_id, "show_id": show_id, "status": status}]
        return await self._upsert(session, ShowWatchStatus, "show_id", rows)

    async def upsert_movie_status(
        self, session: AsyncSession, profile_id: int, movie_id: int, status: WatchStatus
    ) -> int:
        rows = [{"profile_id": profile_id, "movie_id": movie_id, "status": status}]
        return await self._upsert(session, MovieWatchStatus, "movie_id", rows)

    # ── Internals ────────────────────────────────────────────
    @staticmethod
    def _insert_for(session: AsyncSession):
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise NotImplementedError(f"Upserts are not supported on dialect {dialect!r}")

    async def _upsert(
        self,
        session: AsyncSession,
        model: Type,
        key_column: str,
        rows: Sequence[dict],
    ) -> int:
        if not rows:
            return 0
        insert = self._insert_for(session)
        for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
            chunk = rows[start : start + UPSERT_CHUNK_SIZE]
            stmt = insert(model).values(list(chunk))
            stmt = stmt.on_conflict_do_update(
                index_elements=["profile_id", key_column],
                set_={"status": stmt.excluded.status, "updated_at": func.now()},
            )
            await session.execute(stmt)
        logger.debug("Upserted %d %s row(s)", len(rows), model.__tablename__)
        return len(rows)


__all__ = [
    "EpisodeContext",
    "SeasonContext",
    "WatchStatusRepository",
    "UPSERT_CHUNK_SIZE",
]
