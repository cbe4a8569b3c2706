"""Tests for config loading, validation and atomic save."""

from __future__ import annotations

import json

import pytest

from slice_viewer.config import (
    _coerce_refresh_period,
    _config_to_dict,
    _dict_to_config,
    get_config_path,
    load_config,
    save_config,
)
from slice_viewer.models import SliceMode, ViewerConfig


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "slice-viewer" / "config.json"
    monkeypatch.setattr("slice_viewer.config.get_config_path", lambda: path)
    return path


def test_config_path_is_named_after_app() -> None:
    path = get_config_path()
    assert path.name == "config.json"
    assert path.parent.name == "slice-viewer"


def test_missing_file_returns_defaults(config_file) -> None:
    config = load_config()
    assert config == ViewerConfig()
    assert not config.config_defaulted


def test_save_then_load_preserves_fields(config_file) -> None:
    original = ViewerConfig(
        default_mode="shortcut",
        refresh_period_seconds=12.5,
        granted_permissions=["perm.A", "perm.B"],
        theme_name="solarized-dark",
    )

    assert save_config(original) is True
    loaded = load_config()

    assert loaded.default_mode == "shortcut"
    assert loaded.slice_mode is SliceMode.SHORTCUT
    assert loaded.refresh_period_seconds == 12.5
    assert loaded.granted_permissions == ["perm.A", "perm.B"]
    assert loaded.theme_name == "solarized-dark"
    assert not list(config_file.parent.glob(".config-*.tmp"))


@pytest.mark.parametrize("payload", ["[]", '"text"', "42", "null"])
def test_non_dict_root_flags_defaulted(config_file, payload) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text(payload, encoding="utf-8")

    config = load_config()

    assert config.config_defaulted
    assert config.default_mode == "large"


def test_invalid_json_flags_defaulted(config_file, caplog) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text("{not json", encoding="utf-8")

    config = load_config()

    assert config.config_defaulted
    assert "invalid JSON" in caplog.text


def test_save_failure_returns_false(config_file, monkeypatch) -> None:
    def _fail(*args, **kwargs):
        raise OSError("read-only filesystem")

    monkeypatch.setattr("slice_viewer.config.tempfile.mkstemp", _fail)
    assert save_config(ViewerConfig()) is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (5, 5.0),
        (0.2, 1.0),
        (10_000, 300.0),
        (True, 5.0),
        ("7", 5.0),
        (None, 5.0),
    ],
)
def test_refresh_period_is_clamped(raw, expected) -> None:
    assert _coerce_refresh_period(raw) == expected


class TestDictToConfig:
    def test_empty_dict_gives_defaults(self) -> None:
        config = _dict_to_config({})
        assert config.default_mode == "large"
        assert config.refresh_period_seconds == 5.0
        assert config.granted_permissions == []
        assert config.theme_name == "monokai"

    def test_mode_is_normalized(self) -> None:
        assert _dict_to_config({"default_mode": " Small "}).default_mode == "small"

    def test_unknown_mode_falls_back(self, caplog) -> None:
        assert _dict_to_config({"default_mode": "huge"}).default_mode == "large"
        assert "Invalid default_mode" in caplog.text

    def test_permissions_are_cleaned(self) -> None:
        config = _dict_to_config({"granted_permissions": ["a", " a ", "", 3, "b"]})
        assert config.granted_permissions == ["a", "b"]

    def test_wrong_permission_type_is_ignored(self) -> None:
        assert _dict_to_config({"granted_permissions": "a"}).granted_permissions == []

    def test_unknown_theme_falls_back(self) -> None:
        assert _dict_to_config({"theme_name": "neon"}).theme_name == "monokai"

    def test_round_trip_through_dict(self) -> None:
        config = ViewerConfig(default_mode="small", granted_permissions=["p"])
        data = json.loads(json.dumps(_config_to_dict(config)))
        assert _dict_to_config(data) == config
