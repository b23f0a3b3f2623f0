"""Tests for the JSON snapshot backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from datastore.snapshot import JsonSnapshotBackend
from models.records import Reading


def _reading(temperature: float, minute: int = 0, alert: bool = False) -> Reading:
    return Reading(
        temperature=temperature,
        humidity=55.5,
        timestamp=datetime(2024, 1, 1, 12, minute, 30, 123000, tzinfo=timezone.utc),
        alert=alert,
    )


@pytest.fixture()
def backend(tmp_path: Path):
    instance = JsonSnapshotBackend(tmp_path / "data" / "groups.json")
    yield instance
    instance.close()


def test_save_then_load_round_trip(backend: JsonSnapshotBackend) -> None:
    groups = {
        "g1": [_reading(19.0, 0), _reading(31.0, 1, alert=True)],
        "g2": [],
    }

    backend.save(groups)
    backend.flush()

    loaded = JsonSnapshotBackend(backend.path).load()
    assert loaded == groups
    assert list(loaded) == ["g1", "g2"]


def test_snapshot_layout(backend: JsonSnapshotBackend) -> None:
    backend.save({"g1": [_reading(25.0, alert=True)]})
    backend.flush()

    assert backend.path is not None
    payload = json.loads(backend.path.read_text())
    assert payload == {
        "g1": [
            {
                "temperature": 25.0,
                "humidity": 55.5,
                "date": "2024-01-01T12:00:30.123Z",
                "alert": True,
            }
        ]
    }


def test_stored_alert_flags_are_kept(backend: JsonSnapshotBackend) -> None:
    assert backend.path is not None
    backend.path.write_text(
        json.dumps(
            {"g1": [{"temperature": 25, "humidity": 40, "date": "2024-01-01T00:00:00.000Z", "alert": False}]}
        )
    )

    (reading,) = backend.load()["g1"]

    assert reading.alert is False
    assert reading.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_load_missing_file_returns_empty(backend: JsonSnapshotBackend) -> None:
    assert backend.load() == {}


@pytest.mark.parametrize(
    "contents",
    [
        "{not json",
        "[]",
        json.dumps({"g1": "nope"}),
        json.dumps({"g1": [{"temperature": "hot", "humidity": 1, "date": "2024-01-01T00:00:00Z", "alert": True}]}),
        json.dumps({"g1": [{"temperature": 1, "humidity": 1, "date": "yesterday", "alert": True}]}),
        json.dumps({"g1": [{"humidity": 1, "date": "2024-01-01T00:00:00Z", "alert": True}]}),
    ],
)
def test_load_corrupt_snapshot_warns_and_returns_empty(
    backend: JsonSnapshotBackend, contents: str, caplog: pytest.LogCaptureFixture
) -> None:
    assert backend.path is not None
    backend.path.write_text(contents)

    with caplog.at_level(logging.WARNING, logger="datastore.snapshot"):
        assert backend.load() == {}

    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_empty_file_loads_as_empty_store(backend: JsonSnapshotBackend) -> None:
    assert backend.path is not None
    backend.path.write_text("")

    assert backend.load() == {}


def test_writes_apply_in_submission_order(backend: JsonSnapshotBackend) -> None:
    for count in range(1, 30):
        backend.save({"g1": [_reading(float(i)) for i in range(count)]})
    backend.flush()

    assert backend.path is not None
    payload = json.loads(backend.path.read_text())
    assert len(payload["g1"]) == 29
    assert not backend.path.with_name("groups.json.tmp").exists()


def test_write_failure_is_logged_not_raised(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    target = tmp_path / "groups.json"
    backend = JsonSnapshotBackend(target)
    target.mkdir()

    with caplog.at_level(logging.ERROR, logger="datastore.snapshot"):
        backend.save({"g1": []})
        backend.close()

    assert any("Snapshot write failed" in record.getMessage() for record in caplog.records)


def test_without_path_persistence_is_disabled() -> None:
    backend = JsonSnapshotBackend()

    backend.save({"g1": [_reading(10.0)]})
    backend.flush()
    backend.close()

    assert backend.load() == {}


def test_load_skips_unnamed_groups(
    backend: JsonSnapshotBackend, caplog: pytest.LogCaptureFixture
) -> None:
    assert backend.path is not None
    entry = {"temperature": 21, "humidity": 40, "date": "2024-01-01T00:00:00.000Z", "alert": True}
    backend.path.write_text(json.dumps({"": [entry], "g1": [entry]}))

    with caplog.at_level(logging.WARNING, logger="datastore.snapshot"):
        loaded = backend.load()

    assert list(loaded) == ["g1"]
    assert loaded["g1"][0].temperature == 21
    assert any("unnamed group" in record.getMessage() for record in caplog.records)
