# tests/test_watch_status/test_change_recorder.py

from showtracker.schemas.enums import EntityType, WatchStatus as WS
from showtracker.services.change_recorder import ChangeRecorder


def test_records_only_real_transitions():
    rec = ChangeRecorder()
    assert rec.record(EntityType.EPISODE, 1, WS.NOT_WATCHED, WS.WATCHED, "Episode marked as WATCHED") is True
    assert rec.record(EntityType.SEASON, 2, WS.WATCHING, WS.WATCHING, "noop") is False

    assert len(rec) == 1
    change = rec.changes[0]
    assert (change.entity_type, change.entity_id) == (EntityType.EPISODE, 1)
    assert (change.from_status, change.to_status) == (WS.NOT_WATCHED, WS.WATCHED)
    assert change.reason == "Episode marked as WATCHED"
    assert change.timestamp.tzinfo is not None


def test_changes_is_a_copy_and_counts_by_type():
    rec = ChangeRecorder()
    rec.record(EntityType.EPISODE, 1, WS.NOT_WATCHED, WS.WATCHED, "r")
    rec.record(EntityType.EPISODE, 2, WS.NOT_WATCHED, WS.WATCHED, "r")
    rec.record(EntityType.SHOW, 9, WS.NOT_WATCHED, WS.WATCHING, "r")

    snapshot = rec.changes
    snapshot.clear()
    assert len(rec) == 3
    assert rec.count(EntityType.EPISODE) == 2
    assert rec.count(EntityType.SEASON) == 0


def test_fresh_recorder_per_run_has_no_state():
    assert ChangeRecorder().changes == []
