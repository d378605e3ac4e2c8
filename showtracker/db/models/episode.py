from __future__ import annotations

"""
🎬 ShowTracker — Episode
========================

A single episode of a `Season`. Show-wide reads reach episodes through
`seasons.show_id`.
"""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from showtracker.db.base_class import Base, BigIntPK, PKMixin, TimestampMixin


class Episode(PKMixin, TimestampMixin, Base):
    """
    Notes
    -----
    • `episode_number` is 1-based by default; `0` may be used for specials.
    • `air_date` NULL means "not yet scheduled" and always counts as unaired.
    """

    __tablename__ = "episodes"

    season_id = Column(BigIntPK, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True)
    episode_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    air_date = Column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint("season_id", "episode_number", name="uq_episodes_season_epnum"),
        CheckConstraint("episode_number >= 0", name="num_ge_0"),
        Index("ix_episodes_season_airdate", "season_id", "air_date"),
    )

    season = relationship(
        "Season",
        back_populates="episodes",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Episode id={self.id} season_id={self.season_id} E{self.episode_number} air_date={self.air_date}>"
