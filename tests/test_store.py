import re

import pytest
from sqlalchemy.exc import OperationalError

from entry_importer.core.db import create_db_engine, create_session_factory
from entry_importer.models.entry import Entry, utc_timestamp
from entry_importer.services.fetcher import fetch_pending_entries
from entry_importer.services.recorder import ResultRecorder


def test_utc_timestamp_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", utc_timestamp())


def test_fetch_returns_only_pending(session_factory, seed_entries):
    seed_entries([("a", "{}"), ("b", "{}"), ("c", '{"x": 1}')], imported=["b"])

    with session_factory() as db:
        entries = fetch_pending_entries(db)

    assert sorted(e.uid for e in entries) == ["a", "c"]
    c = next(e for e in entries if e.uid == "c")
    assert c.payload == '{"x": 1}'
    assert c.imported_at is None
    assert c.response_id is None


def test_fetch_empty_store(session_factory):
    with session_factory() as db:
        assert fetch_pending_entries(db) == []


def test_fetch_fails_without_table(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        with create_session_factory(engine)() as db:
            with pytest.raises(OperationalError):
                fetch_pending_entries(db)
    finally:
        engine.dispose()


def test_mark_imported(session_factory, seed_entries, stored_rows):
    seed_entries([("a", "{}"), ("b", "{}")])
    entry = Entry(uid="a", payload="{}", response_id="resp-1", import_time_ms=42)

    assert ResultRecorder(session_factory).record(entry) is True

    rows = stored_rows()
    assert rows["a"].response_id == "resp-1"
    assert rows["a"].import_time_ms == 42
    assert rows["a"].imported_at == entry.imported_at
    assert rows["a"].error is None
    assert rows["b"].imported_at is None

    with session_factory() as db:
        assert [e.uid for e in fetch_pending_entries(db)] == ["b"]


def test_mark_errored_leaves_entry_pending(session_factory, seed_entries, stored_rows):
    seed_entries([("a", "{}")])
    entry = Entry(uid="a", payload="{}", error="API error: HTTP 500 > boom", import_time_ms=7)

    assert ResultRecorder(session_factory).record(entry) is True

    row = stored_rows()["a"]
    assert row.error == "API error: HTTP 500 > boom"
    assert row.imported_at is None
    assert row.response_id is None
    assert row.import_time_ms is None
    assert entry.imported_at is None


def test_write_failure_is_reported_not_raised(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        recorder = ResultRecorder(create_session_factory(engine))
        entry = Entry(uid="a", payload="{}", response_id="resp-1")
        assert recorder.record(entry) is False
        assert entry.imported_at is None
    finally:
        engine.dispose()


def test_success_clears_error_from_earlier_attempt(session_factory, seed_entries, stored_rows):
    seed_entries([("a", "{}")])
    recorder = ResultRecorder(session_factory)
    recorder.record(Entry(uid="a", payload="{}", error="API error: HTTP 500 > boom"))
    assert stored_rows()["a"].error is not None

    assert recorder.record(Entry(uid="a", payload="{}", response_id="resp-2", import_time_ms=3)) is True

    row = stored_rows()["a"]
    assert row.imported_at is not None
    assert row.response_id == "resp-2"
    assert row.error is None
