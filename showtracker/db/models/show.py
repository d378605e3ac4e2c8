from __future__ import annotations

"""
📺 ShowTracker — Show
=====================

A serialized title. `in_production` tells the engine whether more seasons
are expected, which is what separates `UP_TO_DATE` from `WATCHED`.

Relationships
-------------
- `seasons` → Season (children, ordered by `season_number`)
"""

from sqlalchemy import Boolean, Column, Date, Index, String, text
from sqlalchemy.orm import relationship

from showtracker.db.base_class import Base, PKMixin, TimestampMixin


class Show(PKMixin, TimestampMixin, Base):
    """Parent of seasons; the engine never writes to this table."""

    __tablename__ = "shows"

    title = Column(String(255), nullable=False)
    release_date = Column(Date, nullable=True, doc="First air date; NULL means not yet scheduled.")
    in_production = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    __table_args__ = (
        Index("ix_shows_release_date", "release_date"),
    )

    seasons = relationship(
        "Season",
        back_populates="show",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Season.season_number",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Show id={self.id} title={self.title!r} in_production={self.in_production}>"
