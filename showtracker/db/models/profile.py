from __future__ import annotations

"""
👤 ShowTracker — Viewing Profile
================================

Only the identity the watch-status tables hang off. Account/profile CRUD
lives outside this package; deleting a profile cascades to every
per-profile status row.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from showtracker.db.base_class import Base, PKMixin, TimestampMixin


class Profile(PKMixin, TimestampMixin, Base):
    __tablename__ = "profiles"

    name = Column(String(64), nullable=False)

    episode_statuses = relationship(
        "EpisodeWatchStatus",
        back_populates="profile",
        passive_deletes=True,
        lazy="noload",
    )
    season_statuses = relationship(
        "SeasonWatchStatus",
        back_populates="profile",
        passive_deletes=True,
        lazy="noload",
    )
    show_statuses = relationship(
        "ShowWatchStatus",
        back_populates="profile",
        passive_deletes=True,
        lazy="noload",
    )
    movie_statuses = relationship(
        "MovieWatchStatus",
        back_populates="profile",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Profile id={self.id} name={self.name!r}>"
