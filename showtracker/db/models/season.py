from __future__ import annotations

"""
📺 ShowTracker — Season
=======================

A season of a `Show`. `(show_id, season_number)` is unique; the release date
gates the season's own `UNAIRED` state.
"""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from showtracker.db.base_class import Base, BigIntPK, PKMixin, TimestampMixin


class Season(PKMixin, TimestampMixin, Base):
    """Season container for a show."""

    __tablename__ = "seasons"

    show_id = Column(BigIntPK, ForeignKey("shows.id", ondelete="CASCADE"), nullable=False, index=True)
    season_number = Column(Integer, nullable=False, doc="Ordinal season number (0 = specials).")
    name = Column(String(255), nullable=True)
    release_date = Column(Date, nullable=True, doc="First air date for the season.")

    __table_args__ = (
        UniqueConstraint("show_id", "season_number", name="uq_seasons_show_num"),
        CheckConstraint("season_number >= 0", name="num_ge_0"),
        Index("ix_seasons_show_release", "show_id", "release_date"),
    )

    show = relationship(
        "Show",
        back_populates="seasons",
        lazy="selectin",
        passive_deletes=True,
    )

    episodes = relationship(
        "Episode",
        back_populates="season",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Episode.episode_number",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Season id={self.id} show_id={self.show_id} S{self.season_number}>"
