"""Tests for JSON-backed settings."""

from __future__ import annotations

import json

from reclaim.settings import Settings, parse_value


class TestSettings:
    def test_defaults(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        assert settings.get("kernels.minimum_kept") == 2
        assert settings.get("confirm.large_threshold_mb") == 1024
        assert settings.get("steps.disabled") == []
        assert settings.get("no.such.key", "fallback") == "fallback"

    def test_set_persists(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        Settings(path).set("kernels.minimum_kept", 3)
        assert json.loads(path.read_text()) == {"kernels": {"minimum_kept": 3}}
        assert Settings(path).get("kernels.minimum_kept") == 3

    def test_file_values_override_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"confirm": {"large_threshold_mb": 10}}))
        settings = Settings(path)
        assert settings.get("confirm.large_threshold_mb") == 10
        assert settings.get("browser.warning_size_mb") == 1024

    def test_corrupt_file_falls_back(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert Settings(path).get("kernels.minimum_kept") == 2
        assert "not valid JSON" in caplog.text

    def test_non_object_file_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert Settings(path).get("space.path") == "/"

    def test_get_int(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("kernels.minimum_kept", "three")
        assert settings.get_int("kernels.minimum_kept", 2) == 2
        settings.set("kernels.minimum_kept", "4")
        assert settings.get_int("kernels.minimum_kept", 2) == 4

    def test_get_paths(self, tmp_path, isolate_env):
        settings = Settings(tmp_path / "settings.json")
        settings.set("cache.extra_paths", "~/scratch")
        assert settings.get_paths("cache.extra_paths") == [isolate_env / "scratch"]
        settings.set("cache.extra_paths", {"bad": True})
        assert settings.get_paths("cache.extra_paths") == []

    def test_effective_merges_nested(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("steps.disabled", ["docker"])
        effective = settings.effective()
        assert effective["steps"]["disabled"] == ["docker"]
        assert effective["kernels"]["minimum_kept"] == 2

    def test_load_replaces_shared_instance(self, tmp_path):
        loaded = Settings.load(tmp_path / "other.json")
        assert Settings.instance() is loaded
        assert loaded.path == tmp_path / "other.json"


class TestParseValue:
    def test_json_values(self):
        assert parse_value("3") == 3
        assert parse_value('["docker", "trash"]') == ["docker", "trash"]
        assert parse_value("true") is True

    def test_plain_strings(self):
        assert parse_value("/mnt/data") == "/mnt/data"
