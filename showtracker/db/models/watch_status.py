from __future__ import annotations

"""
⏯️ ShowTracker — Per-profile watch status
=========================================

One table per entity kind, each keyed by `(profile_id, <entity>_id)`:

• `episode_watch_status`
• `season_watch_status`
• `show_watch_status`
• `movie_watch_status`

Design highlights
-----------------
• **One row per scope** via a unique constraint; writes are insert-or-update
  on that key (see `showtracker.repositories.watch_status`).
• Rows are created lazily the first time a profile's status is touched. A
  missing row reads as `NOT_WATCHED`, which is also the column default.
• Only the propagation engine writes here; season and show rows must stay
  derivable from their children after every run.
• Deleting a profile or a catalog row cascades.
"""

from sqlalchemy import Column, Enum, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship

from showtracker.db.base_class import Base, BigIntPK, PKMixin, TimestampMixin
from showtracker.schemas.enums import WatchStatus

# Shared native enum type on Postgres; a plain VARCHAR elsewhere.
watch_status_enum = Enum(
    WatchStatus,
    name="watch_status",
    values_callable=lambda e: [m.value for m in e],
    validate_strings=True,
)


def _status_column() -> Column:
    return Column(
        watch_status_enum,
        nullable=False,
        default=WatchStatus.NOT_WATCHED,
        server_default=text(f"'{WatchStatus.NOT_WATCHED.value}'"),
    )


def _profile_column() -> Column:
    return Column(BigIntPK, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)


class EpisodeWatchStatus(PKMixin, TimestampMixin, Base):
    __tablename__ = "episode_watch_status"

    profile_id = _profile_column()
    episode_id = Column(BigIntPK, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()

    __table_args__ = (
        UniqueConstraint("profile_id", "episode_id", name="uq_episode_watch_status_profile_episode"),
        Index("ix_episode_watch_status_episode", "episode_id"),
    )

    profile = relationship("Profile", back_populates="episode_statuses", lazy="noload")


class SeasonWatchStatus(PKMixin, TimestampMixin, Base):
    __tablename__ = "season_watch_status"

    profile_id = _profile_column()
    season_id = Column(BigIntPK, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()

    __table_args__ = (
        UniqueConstraint("profile_id", "season_id", name="uq_season_watch_status_profile_season"),
        Index("ix_season_watch_status_season", "season_id"),
    )

    profile = relationship("Profile", back_populates="season_statuses", lazy="noload")


class ShowWatchStatus(PKMixin, TimestampMixin, Base):
    __tablename__ = "show_watch_status"

    profile_id = _profile_column()
    show_id = Column(BigIntPK, ForeignKey("shows.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()

    __table_args__ = (
        UniqueConstraint("profile_id", "show_id", name="uq_show_watch_status_profile_show"),
        Index("ix_show_watch_status_show", "show_id"),
    )

    profile = relationship("Profile", back_populates="show_statuses", lazy="noload")


class MovieWatchStatus(PKMixin, TimestampMixin, Base):
    __tablename__ = "movie_watch_status"

    profile_id = _profile_column()
    movie_id = Column(BigIntPK, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    status = _status_column()

    __table_args__ = (
        UniqueConstraint("profile_id", "movie_id", name="uq_movie_watch_status_profile_movie"),
        Index("ix_movie_watch_status_movie", "movie_id"),
    )

    profile = relationship("Profile", back_populates="movie_statuses", lazy="noload")


__all__ = [
    "watch_status_enum",
    "EpisodeWatchStatus",
    "SeasonWatchStatus",
    "ShowWatchStatus",
    "MovieWatchStatus",
]
