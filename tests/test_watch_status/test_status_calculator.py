# tests/test_watch_status/test_status_calculator.py

from datetime import date, datetime, timedelta, timezone

import pytest

from showtracker.schemas.enums import WatchStatus as WS
from showtracker.schemas.watch_status import (
    EpisodeSnapshot,
    MovieSnapshot,
    SeasonSnapshot,
    ShowSnapshot,
)
from showtracker.services.status_calculator import (
    StatusCalculator,
    episodes_needing_reconcile,
    has_aired,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
PAST = date(2024, 1, 1)
FUTURE = date(2024, 12, 1)

calc = StatusCalculator()


def ep(id_, air_date=PAST, status=WS.NOT_WATCHED, season_id=1):
    return EpisodeSnapshot(id=id_, season_id=season_id, air_date=air_date, status=status)


def season(id_, episodes=(), release_date=PAST, status=None):
    return SeasonSnapshot(id=id_, show_id=1, release_date=release_date, status=status, episodes=tuple(episodes))


def show(seasons=(), release_date=PAST, in_production=False):
    return ShowSnapshot(id=1, release_date=release_date, in_production=in_production, seasons=tuple(seasons))


# ─────────────────────────────────────────────────────────────
# Dates
# ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        ("", False),
        ("not-a-date", False),
        ("2024-06-15", True),
        ("2024-06-15T23:59:00Z", True),
        ("2024-06-16", False),
        (date(2024, 6, 15), True),
        (datetime(2024, 6, 14, 23, 0), True),
        (date(2024, 6, 16), False),
    ],
)
def test_has_aired__dates_and_invalid_values(value, expected):
    assert has_aired(value, NOW) is expected


# ─────────────────────────────────────────────────────────────
# Episodes
# ─────────────────────────────────────────────────────────────
def test_episode__unaired_wins_over_watched_flag():
    assert calc.calculate_episode_status(ep(1, FUTURE, WS.WATCHED), NOW) == WS.UNAIRED
    assert calc.calculate_episode_status(ep(1, None, WS.WATCHED), NOW) == WS.UNAIRED


def test_episode__aired_is_watched_or_not():
    assert calc.calculate_episode_status(ep(1, PAST, WS.WATCHED), NOW) == WS.WATCHED
    assert calc.calculate_episode_status(ep(1, PAST, WS.NOT_WATCHED), NOW) == WS.NOT_WATCHED
    assert calc.calculate_episode_status(ep(1, PAST, WS.UNAIRED), NOW) == WS.NOT_WATCHED


# ─────────────────────────────────────────────────────────────
# Seasons
# ─────────────────────────────────────────────────────────────
def test_season__future_or_missing_release_is_unaired():
    watched = [ep(1, PAST, WS.WATCHED)]
    assert calc.calculate_season_status(season(1, watched, release_date=FUTURE), NOW) == WS.UNAIRED
    assert calc.calculate_season_status(season(1, watched, release_date=None), NOW) == WS.UNAIRED


def test_season__no_episodes_is_unaired_not_not_watched():
    assert calc.calculate_season_status(season(1, []), NOW) == WS.UNAIRED


def test_season__only_unaired_episodes_is_unaired():
    assert calc.calculate_season_status(season(1, [ep(1, FUTURE), ep(2, None)]), NOW) == WS.UNAIRED


def test_season__progress_states():
    assert calc.calculate_season_status(season(1, [ep(1), ep(2)]), NOW) == WS.NOT_WATCHED
    assert calc.calculate_season_status(season(1, [ep(1, status=WS.WATCHED), ep(2)]), NOW) == WS.WATCHING
    assert (
        calc.calculate_season_status(season(1, [ep(1, status=WS.WATCHED), ep(2, status=WS.WATCHED)]), NOW)
        == WS.WATCHED
    )


def test_season__all_aired_watched_with_upcoming_is_up_to_date():
    eps = [ep(1, status=WS.WATCHED), ep(2, status=WS.WATCHED), ep(3, FUTURE, WS.UNAIRED)]
    assert calc.calculate_season_status(season(1, eps), NOW) == WS.UP_TO_DATE


def test_season__watched_flag_on_unaired_episode_does_not_count():
    eps = [ep(1, status=WS.NOT_WATCHED), ep(2, FUTURE, WS.WATCHED)]
    assert calc.calculate_season_status(season(1, eps), NOW) == WS.NOT_WATCHED


# ─────────────────────────────────────────────────────────────
# Shows
# ─────────────────────────────────────────────────────────────
def _done(id_):
    return season(id_, [ep(id_ * 10, status=WS.WATCHED)])


def _untouched(id_):
    return season(id_, [ep(id_ * 10)])


def _upcoming(id_):
    return season(id_, [ep(id_ * 10, FUTURE, WS.UNAIRED)], release_date=FUTURE)


def test_show__future_release_or_no_aired_seasons_is_unaired():
    assert calc.calculate_show_status(show([_done(1)], release_date=FUTURE), NOW) == WS.UNAIRED
    assert calc.calculate_show_status(show([]), NOW) == WS.UNAIRED
    assert calc.calculate_show_status(show([_upcoming(1)]), NOW) == WS.UNAIRED


def test_show__all_not_watched():
    assert calc.calculate_show_status(show([_untouched(1), _untouched(2)]), NOW) == WS.NOT_WATCHED


def test_show__any_watching_season():
    partial = season(1, [ep(1, status=WS.WATCHED), ep(2)])
    assert calc.calculate_show_status(show([partial, _done(2)]), NOW) == WS.WATCHING


def test_show__mixed_watched_and_not_watched_seasons_counts_as_watching():
    """One finished season next to an untouched one is WATCHING even though no season is."""
    assert calc.calculate_show_status(show([_done(1), _untouched(2)]), NOW) == WS.WATCHING


def test_show__complete_and_ended_is_watched():
    assert calc.calculate_show_status(show([_done(1), _done(2)]), NOW) == WS.WATCHED


def test_show__complete_but_in_production_is_up_to_date():
    assert calc.calculate_show_status(show([_done(1), _done(2)], in_production=True), NOW) == WS.UP_TO_DATE


def test_show__complete_with_unaired_season_is_up_to_date():
    assert calc.calculate_show_status(show([_done(1), _upcoming(2)]), NOW) == WS.UP_TO_DATE


def test_show__uses_precomputed_season_status_when_present():
    stale = season(1, [ep(1)], status=WS.WATCHED)
    assert calc.calculate_show_status(show([stale]), NOW) == WS.WATCHED


def test_show__stale_unaired_season_value_falls_back_to_watching():
    stale = season(1, [ep(1)], status=WS.UNAIRED)
    assert calc.calculate_show_status(show([stale, _done(2)]), NOW) == WS.WATCHING


def test_calculations_depend_only_on_now():
    s = season(1, [ep(1, NOW.date() + timedelta(days=1), WS.UNAIRED)])
    assert calc.calculate_season_status(s, NOW) == WS.UNAIRED
    assert calc.calculate_season_status(s, NOW + timedelta(days=1)) == WS.NOT_WATCHED


# ─────────────────────────────────────────────────────────────
# Movies & helpers
# ─────────────────────────────────────────────────────────────
def test_movie_status():
    assert calc.calculate_movie_status(MovieSnapshot(1, FUTURE, WS.WATCHED), NOW) == WS.UNAIRED
    assert calc.calculate_movie_status(MovieSnapshot(1, PAST, WS.UNAIRED), NOW) == WS.NOT_WATCHED
    assert calc.calculate_movie_status(MovieSnapshot(1, PAST, WS.WATCHED), NOW) == WS.WATCHED


@pytest.mark.parametrize(
    "air_date, target, expected",
    [
        (PAST, WS.WATCHED, WS.WATCHED),
        (PAST, WS.NOT_WATCHED, WS.NOT_WATCHED),
        (FUTURE, WS.WATCHED, WS.UNAIRED),
        (None, WS.WATCHED, WS.UNAIRED),
        ("garbage", WS.NOT_WATCHED, WS.UNAIRED),
    ],
)
def test_target_status__unaired_always_wins(air_date, target, expected):
    assert calc.target_status(air_date, target, NOW) == expected


@pytest.mark.parametrize(
    "complete, in_production, upcoming, expected",
    [
        (False, True, True, WS.WATCHING),
        (True, True, False, WS.UP_TO_DATE),
        (True, False, True, WS.UP_TO_DATE),
        (True, False, False, WS.WATCHED),
    ],
)
def test_determine_completion_status(complete, in_production, upcoming, expected):
    assert StatusCalculator.determine_completion_status(complete, in_production, upcoming) == expected


def test_episodes_needing_reconcile__promotes_and_demotes():
    eps = [
        ep(1, PAST, WS.UNAIRED),
        ep(2, FUTURE, WS.WATCHED),
        ep(3, PAST, WS.WATCHED),
        ep(4, FUTURE, WS.UNAIRED),
    ]
    drift = {e.id: status for e, status in episodes_needing_reconcile(eps, NOW)}
    assert drift == {1: WS.NOT_WATCHED, 2: WS.UNAIRED}


def test_generate_status_summary():
    text = calc.generate_status_summary(
        show([season(7, [ep(1, status=WS.WATCHED), ep(2), ep(3, FUTURE)])], in_production=True), NOW
    )
    assert 'Show "1" - Status: WATCHING' in text
    assert "In Production: True" in text
    assert 'Season "7" - Status: WATCHING' in text
    assert "Progress: 1/2 aired episodes watched" in text


def test_summary_marks_missing_dates():
    text = calc.generate_status_summary(show([], release_date=None), NOW)
    assert "Air Date: INVALID/UNAIRED" in text
    assert "Seasons: 0" in text
