from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from services.group_logs import build_default_store
from settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_caches() -> Iterator[None]:
    get_settings.cache_clear()
    build_default_store.cache_clear()
    yield
    build_default_store.cache_clear()
    get_settings.cache_clear()


def test_defaults(monkeypatch) -> None:
    for name in (
        "GROUP_LOGS_DATA_PATH",
        "MAX_LOGS_PER_GROUP",
        "ALERT_THRESHOLD",
        "HOST",
        "PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.data_path == "./groups.json"
    assert settings.max_logs_per_group == 20
    assert settings.alert_threshold == 20.0
    assert settings.host == "0.0.0.0"
    assert settings.port == 5000
    assert settings.log_level == "INFO"


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    data_path = tmp_path / "snapshots" / "groups.json"

    monkeypatch.setenv("GROUP_LOGS_DATA_PATH", str(data_path))
    monkeypatch.setenv("MAX_LOGS_PER_GROUP", "3")
    monkeypatch.setenv("ALERT_THRESHOLD", "30")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    store = build_default_store()

    try:
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"
        assert store.backend.path == Path(data_path)
        assert store.max_logs_per_group == 3
        assert store.alert_threshold == 30.0
        assert store.ingest("g1", 25, 50).alert is False
    finally:
        store.shutdown()


@pytest.mark.parametrize("value", ["", "  ", "zero", "0", "-4"])
def test_invalid_capacity_falls_back_to_default(monkeypatch, value: str) -> None:
    monkeypatch.setenv("MAX_LOGS_PER_GROUP", value)

    assert get_settings().max_logs_per_group == 20


def test_blank_data_path_disables_persistence(monkeypatch) -> None:
    monkeypatch.setenv("GROUP_LOGS_DATA_PATH", "   ")

    store = build_default_store()

    try:
        assert get_settings().data_path is None
        assert store.backend.path is None
    finally:
        store.shutdown()
