"""Tests for pomolog/store.py: session lifecycle over the three files."""

import json
from datetime import timedelta

import pytest

from pomolog import DecodeError, Session, Settings, Store
from pomolog.workspace import current_path, history_path, settings_path


def _assert_state(store: Store, active: bool, done: bool, inactive: bool) -> None:
    s = store.current_session()
    now = store.clock()
    assert s.is_active(now) is active
    assert s.is_done(now) is done
    assert s.is_inactive() is inactive


def _remaining(store: Store) -> int:
    return store.current_session().remaining_minutes(store.clock())


# ── Reads ─────────────────────────────────────────────────────


def test_reads_on_missing_directory(store, root):
    assert not root.exists()
    assert store.current_session().is_inactive()
    assert store.session_log().count() == 0
    assert store.effective_settings().default_pomodoro_duration == timedelta(minutes=25)


def test_empty_current_file_is_inactive(store, root):
    root.mkdir()
    current_path(root).write_text("", encoding="utf-8")
    assert store.current_session().is_inactive()
    current_path(root).write_text("  \n", encoding="utf-8")
    assert store.current_session().is_inactive()


def test_malformed_current_surfaces(store, root):
    root.mkdir()
    current_path(root).write_text("garbage duration=25", encoding="utf-8")
    with pytest.raises(DecodeError):
        store.current_session()


def test_current_path_is_directory(store, root):
    current_path(root).mkdir(parents=True)
    with pytest.raises(OSError):
        store.current_session()


def test_session_log_skips_blank_lines(store, root):
    root.mkdir()
    history_path(root).write_text(
        "2016-06-13T12:00:00Z duration=25\n\n\n2016-06-14T12:00:00Z\n", encoding="utf-8"
    )
    log = store.session_log()
    assert log.count() == 2
    assert log.sessions[1].duration == timedelta(0)


def test_effective_settings_merges_file(store, root):
    root.mkdir()
    settings_path(root).write_text("daily_goal=8\ndefault_tags=billable,work\n", encoding="utf-8")
    s = store.effective_settings()
    assert s.daily_goal == 8
    assert s.default_tags == ["billable", "work"]
    assert s.default_break_duration == timedelta(minutes=5)
    assert s.default_pomodoro_duration == timedelta(minutes=25)


def test_save_settings_round_trip(store):
    store.save_settings(Settings(daily_goal=6, default_pomodoro_duration=timedelta(minutes=50)))
    s = store.effective_settings()
    assert s.daily_goal == 6
    assert s.default_pomodoro_duration == timedelta(minutes=50)


def test_state(store):
    store.start(Session(description="one"))
    state = store.state()
    assert state.session.description == "one"
    assert state.log.count() == 1
    assert state.settings.default_pomodoro_duration == timedelta(minutes=25)


def test_default_root_from_env(root):
    assert Store().root == root.resolve()


# ── Start ─────────────────────────────────────────────────────


def test_start_writes_current_and_history(store, root, clock):
    t0 = clock()
    session = store.start(Session(description="write report"))
    assert session.start_time == t0
    assert session.duration == timedelta(minutes=25)

    expected = '2026-06-14T12:00:00Z description="write report" duration=25'
    assert current_path(root).read_text(encoding="utf-8") == expected
    assert history_path(root).read_text(encoding="utf-8") == expected + "\n"


def test_start_applies_settings(store):
    store.save_settings(Settings(default_pomodoro_duration=timedelta(minutes=50), default_tags=["work"]))
    session = store.start()
    assert session.duration == timedelta(minutes=50)
    assert session.tags == ["work"]


def test_start_keeps_explicit_fields(store):
    store.save_settings(Settings(default_tags=["work"]))
    session = store.start(Session(duration=timedelta(minutes=10), tags=["play"]))
    assert session.duration == timedelta(minutes=10)
    assert session.tags == ["play"]


def test_start_truncates_to_seconds(store, clock):
    t0 = clock()
    clock.advance(timedelta(microseconds=750000))
    session = store.start()
    assert session.start_time == t0
    assert store.current_session() == session


# ── Scenarios ─────────────────────────────────────────────────


def test_typical_session(store, clock):
    _assert_state(store, active=False, done=False, inactive=True)

    store.start(Session())
    _assert_state(store, active=True, done=False, inactive=False)
    assert _remaining(store) == 25
    assert store.session_log().count() == 1

    clock.advance(timedelta(minutes=1))
    assert _remaining(store) == 24

    clock.advance(timedelta(minutes=23))
    assert _remaining(store) == 1

    clock.advance(timedelta(minutes=1))
    assert _remaining(store) == 0
    _assert_state(store, active=False, done=True, inactive=False)

    clock.advance(timedelta(minutes=1))
    assert _remaining(store) == -1
    _assert_state(store, active=False, done=True, inactive=False)

    store.clear()
    _assert_state(store, active=False, done=False, inactive=True)
    assert _remaining(store) == 0
    assert store.session_log().count() == 1


def test_finish_early(store, clock):
    store.start(Session())
    _assert_state(store, active=True, done=False, inactive=False)
    assert store.session_log().count() == 1

    clock.advance(timedelta(minutes=15))
    assert _remaining(store) == 10

    finished = store.finish()
    assert finished.duration == timedelta(minutes=15)
    _assert_state(store, active=False, done=False, inactive=True)

    log = store.session_log()
    assert log.count() == 1
    assert log.sessions[0].duration_minutes() == 15


def test_restart_during(store, clock):
    store.start(Session(description="first"))
    clock.advance(timedelta(minutes=15))
    _assert_state(store, active=True, done=False, inactive=False)
    assert _remaining(store) == 10
    assert store.session_log().count() == 1

    store.start(Session(description="second"))
    _assert_state(store, active=True, done=False, inactive=False)
    assert _remaining(store) == 25

    log = store.session_log()
    assert log.count() == 1
    assert log.sessions[0].description == "second"


def test_restart_after(store, clock):
    store.start(Session())
    clock.advance(timedelta(minutes=30))
    _assert_state(store, active=False, done=True, inactive=False)
    assert store.session_log().count() == 1

    store.start(Session())
    _assert_state(store, active=True, done=False, inactive=False)
    assert store.session_log().count() == 2


def test_cancel_active(store, clock):
    t0 = clock()
    store.start(Session())
    clock.advance(timedelta(minutes=5))
    cancelled = store.cancel()
    assert cancelled.start_time == t0
    _assert_state(store, active=False, done=False, inactive=True)
    assert store.session_log().count() == 0


def test_cancel_done_removes_history(store, clock):
    store.start(Session())
    clock.advance(timedelta(minutes=40))
    _assert_state(store, active=False, done=True, inactive=False)

    store.cancel()
    _assert_state(store, active=False, done=False, inactive=True)
    assert store.session_log().count() == 0


def test_cancel_keeps_other_history(store, clock):
    store.start(Session(description="kept"))
    clock.advance(timedelta(minutes=30))
    store.start(Session(description="dropped"))
    store.cancel()
    log = store.session_log()
    assert [s.description for s in log] == ["kept"]


def test_cancel_after_finish_is_noop(store, clock):
    # finish() empties current, so there is nothing left to cancel.
    store.start(Session())
    clock.advance(timedelta(minutes=10))
    store.finish()
    assert store.cancel() is None
    assert store.session_log().count() == 1


def test_inactive_operations_are_noops(store, root):
    assert store.cancel() is None
    assert not history_path(root).exists()

    assert store.finish() is None
    assert current_path(root).read_text(encoding="utf-8") == ""
    assert not history_path(root).exists()

    store.clear()
    assert store.current_session().is_inactive()


def test_clear_keeps_history(store, clock):
    store.start(Session(description="kept"))
    clock.advance(timedelta(minutes=3))
    store.clear()
    log = store.session_log()
    assert log.count() == 1
    assert log.sessions[0].duration == timedelta(minutes=25)


def test_finish_rewrites_sorted_history(store, root, clock):
    root.mkdir()
    history_path(root).write_text(
        "2026-06-14T13:00:00Z duration=25\n2026-06-13T09:00:00Z duration=25\n", encoding="utf-8"
    )
    store.start(Session())
    clock.advance(timedelta(minutes=20))
    store.finish()
    lines = history_path(root).read_text(encoding="utf-8").splitlines()
    assert lines == [
        "2026-06-13T09:00:00Z duration=25",
        "2026-06-14T12:00:00Z duration=20",
        "2026-06-14T13:00:00Z duration=25",
    ]


def test_finish_matches_record_within_a_second(store, root, clock):
    root.mkdir()
    # The log copy was written a moment after current.
    history_path(root).write_text("2026-06-14T12:00:01Z duration=25\n", encoding="utf-8")
    current_path(root).write_text("2026-06-14T12:00:00Z duration=25", encoding="utf-8")
    clock.advance(timedelta(minutes=12))
    store.finish()
    log = store.session_log()
    assert log.count() == 1
    assert log.sessions[0].duration == timedelta(minutes=12)


def test_finish_with_line_separator_in_description(store, root, clock):
    store.start(Session(description="a\u2028b"))
    clock.advance(timedelta(minutes=10))
    store.finish()
    log = store.session_log()
    assert log.count() == 1
    assert log.sessions[0].description == "a\u2028b"
    assert log.sessions[0].duration == timedelta(minutes=10)
    assert len(history_path(root).read_text(encoding="utf-8").splitlines()) == 1


# ── Export ────────────────────────────────────────────────────


def test_export_writes_state_as_json(store, root, clock):
    store.start(Session(description="deep work", tags=["x"]))
    path = store.export()
    assert path == root / "export.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "current": {
            "start_time": "2026-06-14T12:00:00Z",
            "description": "deep work",
            "duration": 25,
            "tags": ["x"],
        },
        "sessions": [{
            "start_time": "2026-06-14T12:00:00Z",
            "description": "deep work",
            "duration": 25,
            "tags": ["x"],
        }],
        "settings": {
            "daily_goal": 0,
            "default_break_duration": 5,
            "default_pomodoro_duration": 25,
            "default_tags": [],
        },
    }


def test_export_inactive_to_custom_path(store, tmp_path):
    path = store.export(tmp_path / "out" / "state.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["current"] == {}
    assert data["sessions"] == []
