from __future__ import annotations

"""
🎞️ ShowTracker — Movie
======================

Standalone title with no children; its status only depends on the release
date and what the profile recorded.
"""

from sqlalchemy import Column, Date, String

from showtracker.db.base_class import Base, PKMixin, TimestampMixin


class Movie(PKMixin, TimestampMixin, Base):
    __tablename__ = "movies"

    title = Column(String(255), nullable=False)
    release_date = Column(Date, nullable=True, index=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Movie id={self.id} title={self.title!r} release_date={self.release_date}>"
