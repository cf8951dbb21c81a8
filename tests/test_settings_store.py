import json

import pytest

from jshellpanel.settings_store import (
    DEFAULT_SETTINGS, join_flags, load_settings, save_settings, split_flags,
)


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "settings.json")
    assert settings == DEFAULT_SETTINGS
    settings["runtime_flags"].append("-verbose")
    assert DEFAULT_SETTINGS["runtime_flags"] == []


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_saved_values_override_defaults(tmp_path):
    path = tmp_path / "settings.json"
    assert save_settings({"class_path": "lib.jar", "debug": True}, path)
    settings = load_settings(path)
    assert settings["class_path"] == "lib.jar"
    assert settings["debug"] is True
    assert settings["theme_file"] == DEFAULT_SETTINGS["theme_file"]


def test_save_merges_with_existing_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"other_tool": {"a": 1, "b": 2}, "debug": False}), encoding="utf-8")
    assert save_settings({"other_tool": {"b": 3}, "debug": True}, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"other_tool": {"a": 1, "b": 3}, "debug": True}
    assert not path.with_suffix(".json.tmp").exists()


def test_save_failure_returns_false(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    assert save_settings({"debug": True}, blocker / "settings.json") is False


def test_split_flags():
    assert split_flags(None) == []
    assert split_flags("-verbose  -Xmx1g") == ["-verbose", "-Xmx1g"]
    assert split_flags("'-Dname=a b'") == ["-Dname=a b"]
    assert split_flags(["-a", "", "-b"]) == ["-a", "-b"]
    with pytest.raises(TypeError):
        split_flags(42)


def test_join_flags_round_trips_spaces():
    joined = join_flags(["-Dname=a b", "-x"])
    assert split_flags(joined) == ["-Dname=a b", "-x"]
