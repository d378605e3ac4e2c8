"""
Catalog hierarchy + per-profile watch status.

- profiles, shows, seasons, episodes, movies
- watch_status enum
- episode/season/show/movie watch-status tables keyed by (profile_id, <entity>_id)
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision = "20261018_01_watch_status"
down_revision = None
branch_labels = None
depends_on = None

STATUS_VALUES = ("UNAIRED", "NOT_WATCHED", "WATCHING", "UP_TO_DATE", "WATCHED")
STATUS_TABLES = (
    ("episode_watch_status", "episode_id", "episodes"),
    ("season_watch_status", "season_id", "seasons"),
    ("show_watch_status", "show_id", "shows"),
    ("movie_watch_status", "movie_id", "movies"),
)

BigIntPK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps():
    return (
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def upgrade() -> None:
    # --- Catalog ---
    op.create_table(
        "profiles",
        sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "shows",
        sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("in_production", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_shows_release_date", "shows", ["release_date"])

    op.create_table(
        "seasons",
        sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
        sa.Column("show_id", BigIntPK, sa.ForeignKey("shows.id", ondelete="CASCADE"), nullable=False),
        sa.Column("season_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("show_id", "season_number", name="uq_seasons_show_num"),
        sa.CheckConstraint("season_number >= 0", name="ck_seasons_num_ge_0"),
    )
    op.create_index("ix_seasons_show_id", "seasons", ["show_id"])
    op.create_index("ix_seasons_show_release", "seasons", ["show_id", "release_date"])

    op.create_table(
        "episodes",
        sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
        sa.Column("season_id", BigIntPK, sa.ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("air_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("season_id", "episode_number", name="uq_episodes_season_epnum"),
        sa.CheckConstraint("episode_number >= 0", name="ck_episodes_num_ge_0"),
    )
    op.create_index("ix_episodes_season_id", "episodes", ["season_id"])
    op.create_index("ix_episodes_season_airdate", "episodes", ["season_id", "air_date"])

    op.create_table(
        "movies",
        sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_movies_release_date", "movies", ["release_date"])

    # --- Watch status ---
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        postgresql.ENUM(*STATUS_VALUES, name="watch_status").create(bind, checkfirst=True)
        status_type = postgresql.ENUM(*STATUS_VALUES, name="watch_status", create_type=False)
    else:
        status_type = sa.Enum(*STATUS_VALUES, name="watch_status")

    for table, key, parent in STATUS_TABLES:
        entity = key.split("_")[0]
        op.create_table(
            table,
            sa.Column("id", BigIntPK, primary_key=True, autoincrement=True),
            sa.Column("profile_id", BigIntPK, sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
            sa.Column(key, BigIntPK, sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
            sa.Column("status", status_type, server_default=sa.text("'NOT_WATCHED'"), nullable=False),
            *_timestamps(),
            sa.UniqueConstraint("profile_id", key, name=f"uq_{table}_profile_{entity}"),
        )
        op.create_index(f"ix_{table}_{entity}", table, [key])


def downgrade() -> None:
    for table, key, _ in reversed(STATUS_TABLES):
        entity = key.split("_")[0]
        op.drop_index(f"ix_{table}_{entity}", table_name=table)
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        postgresql.ENUM(name="watch_status").drop(bind, checkfirst=True)

    op.drop_index("ix_movies_release_date", table_name="movies")
    op.drop_table("movies")
    op.drop_index("ix_episodes_season_airdate", table_name="episodes")
    op.drop_index("ix_episodes_season_id", table_name="episodes")
    op.drop_table("episodes")
    op.drop_index("ix_seasons_show_release", table_name="seasons")
    op.drop_index("ix_seasons_show_id", table_name="seasons")
    op.drop_table("seasons")
    op.drop_index("ix_shows_release_date", table_name="shows")
    op.drop_table("shows")
    op.drop_table("profiles")
