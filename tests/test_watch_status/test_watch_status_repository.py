# tests/test_watch_status/test_watch_status_repository.py

import pytest
from sqlalchemy import func, select

from showtracker.db.models import EpisodeWatchStatus, ShowWatchStatus
from showtracker.db.session import run_in_transaction
from showtracker.repositories.watch_status import UPSERT_CHUNK_SIZE, WatchStatusRepository
from showtracker.schemas.enums import WatchStatus as WS
from tests.utils.factory import (
    create_episode,
    create_movie,
    create_profile,
    create_season,
    create_show,
    days_ago,
    days_ahead,
    episode_ids,
    set_episode_statuses,
    set_season_status,
    stored_episode_status,
    stored_season_status,
    stored_show_status,
)

repo = WatchStatusRepository()


@pytest.mark.anyio
async def test_episode_context__joins_hierarchy_and_defaults_missing_status(db_session, session_factory):
    profile = await create_profile(db_session)
    show = await create_show(db_session, in_production=True)
    season = await create_season(db_session, show, air_dates=[days_ago(10)])
    (ep_id,) = await episode_ids(db_session, season)
    await set_season_status(db_session, profile, season, WS.WATCHING)
    await db_session.commit()

    async def work(session):
        return await repo.get_episode_context(session, profile.id, ep_id)

    ctx = await run_in_transaction(work, session_factory=session_factory)
    assert ctx.episode.id == ep_id
    assert ctx.episode.air_date == days_ago(10)
    assert ctx.episode.status == WS.NOT_WATCHED
    assert ctx.season.id == season.id and ctx.season.status == WS.WATCHING
    assert ctx.show.id == show.id and ctx.show.in_production is True
    assert ctx.show.status == WS.NOT_WATCHED


@pytest.mark.anyio
async def test_contexts__missing_entities_return_none(db_session, session_factory):
    profile = await create_profile(db_session)
    await db_session.commit()

    async def work(session):
        return (
            await repo.get_episode_context(session, profile.id, 404),
            await repo.get_season_context(session, profile.id, 404),
            await repo.get_show_context(session, profile.id, 404),
            await repo.get_movie_context(session, profile.id, 404),
            await repo.get_show_hierarchy(session, profile.id, 404),
        )

    assert await run_in_transaction(work, session_factory=session_factory) == (None,) * 5


@pytest.mark.anyio
async def test_status_rows_are_scoped_per_profile(db_session, session_factory):
    alice = await create_profile(db_session, name="alice")
    bob = await create_profile(db_session, name="bob")
    show = await create_show(db_session)
    season = await create_season(db_session, show, air_dates=[days_ago(3)])
    ids = await episode_ids(db_session, season)
    await set_episode_statuses(db_session, alice, ids, WS.WATCHED)
    await db_session.commit()

    async def work(session):
        return (
            await repo.get_season_episodes(session, alice.id, season.id),
            await repo.get_season_episodes(session, bob.id, season.id),
        )

    mine, theirs = await run_in_transaction(work, session_factory=session_factory)
    assert [e.status for e in mine] == [WS.WATCHED]
    assert [e.status for e in theirs] == [WS.NOT_WATCHED]


@pytest.mark.anyio
async def test_show_hierarchy__groups_episodes_under_ordered_seasons(db_session, session_factory):
    profile = await create_profile(db_session)
    show = await create_show(db_session)
    s2 = await create_season(db_session, show, season_number=2, air_dates=[days_ahead(5)])
    s1 = await create_season(db_session, show, season_number=1, air_dates=[days_ago(20), days_ago(13)])
    await db_session.commit()

    async def work(session):
        return await repo.get_show_hierarchy(session, profile.id, show.id)

    tree = await run_in_transaction(work, session_factory=session_factory)
    assert [s.id for s in tree.seasons] == [s1.id, s2.id]
    assert [len(s.episodes) for s in tree.seasons] == [2, 1]
    assert tree.seasons[0].episodes[0].air_date == days_ago(20)
    assert all(s.status == WS.NOT_WATCHED for s in tree.seasons)


@pytest.mark.anyio
async def test_upserts_insert_then_update(db_session, session_factory):
    profile = await create_profile(db_session)
    show = await create_show(db_session)
    season = await create_season(db_session, show, air_dates=[days_ago(2), days_ago(1)])
    e1, e2 = await episode_ids(db_session, season)
    await db_session.commit()

    async def first(session):
        n = await repo.upsert_episode_statuses(session, profile.id, [(e1, WS.WATCHED), (e2, WS.NOT_WATCHED)])
        n += await repo.upsert_season_status(session, profile.id, season.id, WS.WATCHING)
        n += await repo.upsert_show_status(session, profile.id, show.id, WS.WATCHING)
        return n

    async def second(session):
        return await repo.upsert_episode_statuses(session, profile.id, [(e2, WS.WATCHED)])

    assert await run_in_transaction(first, session_factory=session_factory) == 4
    assert await run_in_transaction(second, session_factory=session_factory) == 1

    assert await stored_episode_status(db_session, profile.id, e1) == WS.WATCHED
    assert await stored_episode_status(db_session, profile.id, e2) == WS.WATCHED
    assert await stored_season_status(db_session, profile.id, season.id) == WS.WATCHING
    assert await stored_show_status(db_session, profile.id, show.id) == WS.WATCHING
    count = await db_session.scalar(select(func.count()).select_from(EpisodeWatchStatus))
    assert count == 2


@pytest.mark.anyio
async def test_upsert_batches_large_sets(db_session, session_factory):
    profile = await create_profile(db_session)
    show = await create_show(db_session)
    season = await create_season(db_session, show)
    total = UPSERT_CHUNK_SIZE + 5
    for n in range(1, total + 1):
        await create_episode(db_session, season, episode_number=n, air_date=days_ago(1))
    ids = await episode_ids(db_session, season)
    await db_session.commit()

    async def work(session):
        return await repo.upsert_episode_statuses(session, profile.id, [(i, WS.WATCHED) for i in ids])

    assert await run_in_transaction(work, session_factory=session_factory) == total
    count = await db_session.scalar(select(func.count()).select_from(EpisodeWatchStatus))
    assert count == total


@pytest.mark.anyio
async def test_empty_upsert_writes_nothing(db_session, session_factory):
    async def work(session):
        return await repo.upsert_episode_statuses(session, 1, [])

    assert await run_in_transaction(work, session_factory=session_factory) == 0


@pytest.mark.anyio
async def test_lock_show_status_creates_missing_row_once(db_session, session_factory):
    profile = await create_profile(db_session)
    show = await create_show(db_session)
    await db_session.commit()

    async def work(session):
        await repo.lock_show_status(session, profile.id, show.id)
        await repo.lock_show_status(session, profile.id, show.id)

    await run_in_transaction(work, session_factory=session_factory)
    rows = (await db_session.execute(select(ShowWatchStatus.status))).scalars().all()
    assert rows == [WS.NOT_WATCHED]


@pytest.mark.anyio
async def test_movie_context_and_upsert(db_session, session_factory):
    profile = await create_profile(db_session)
    movie = await create_movie(db_session, release_date=days_ago(30))
    await db_session.commit()

    async def work(session):
        before = await repo.get_movie_context(session, profile.id, movie.id)
        await repo.upsert_movie_status(session, profile.id, movie.id, WS.WATCHED)
        after = await repo.get_movie_context(session, profile.id, movie.id)
        return before, after

    before, after = await run_in_transaction(work, session_factory=session_factory)
    assert before.status == WS.NOT_WATCHED and before.release_date == days_ago(30)
    assert after.status == WS.WATCHED


@pytest.mark.anyio
async def test_show_id_lookups__resolve_lock_target_or_none(db_session, session_factory):
    show = await create_show(db_session)
    season = await create_season(db_session, show, air_dates=[days_ago(3)])
    (ep_id,) = await episode_ids(db_session, season)
    await db_session.commit()

    async def work(session):
        return (
            await repo.get_show_id_for_episode(session, ep_id),
            await repo.get_show_id_for_season(session, season.id),
            await repo.get_show_id_for_episode(session, 404),
            await repo.get_show_id_for_season(session, 404),
        )

    assert await run_in_transaction(work, session_factory=session_factory) == (show.id, show.id, None, None)
