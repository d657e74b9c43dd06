"""Tests for tag2dir.cli.settings module."""

import json
import os

from tag2dir.cli.settings import Settings
from tag2dir.cli.wizard import ask_path, confirm


class TestSettings:
    """Tests for Settings class."""

    def test_defaults(self, temp_dir):
        settings = Settings(os.path.join(temp_dir, "settings.json"))

        assert settings.get("last_source_path") == ""
        assert settings.get_int("history_size") == 20
        assert settings.get_int("copy_workers") == 1

    def test_save_and_load(self, temp_dir):
        path = os.path.join(temp_dir, "nested", "settings.json")
        settings = Settings(path)
        settings.set("last_dest_path", "/photos/people")
        settings.set("history_size", 5)
        settings.save()

        reloaded = Settings(path)

        assert reloaded.get("last_dest_path") == "/photos/people"
        assert reloaded.get_int("history_size") == 5

    def test_corrupt_file_keeps_defaults(self, temp_dir):
        path = os.path.join(temp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")

        assert Settings(path).get_int("history_size") == 20

    def test_non_dict_file_keeps_defaults(self, temp_dir):
        path = os.path.join(temp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(["a", "b"], f)

        assert Settings(path).get("last_source_path") == ""

    def test_invalid_numbers_fall_back(self, temp_dir):
        path = os.path.join(temp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"history_size": 0, "copy_workers": "four"}, f)

        settings = Settings(path)

        assert settings.get_int("history_size") == 20
        assert settings.get_int("copy_workers") == 1

    def test_bool_is_not_a_number(self, temp_dir):
        settings = Settings(os.path.join(temp_dir, "settings.json"))
        settings.set("copy_workers", True)
        assert settings.get_int("copy_workers") == 1

    def test_default_path_uses_xdg_config_home(self, temp_dir, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", temp_dir)
        monkeypatch.setenv("APPDATA", temp_dir)

        assert Settings().config_path == os.path.join(temp_dir, "tag2dir", "settings.json")

    def test_unicode_paths(self, temp_dir):
        path = os.path.join(temp_dir, "settings.json")
        settings = Settings(path)
        settings.set("last_source_path", "/照片/收件箱")
        settings.save()

        assert Settings(path).get("last_source_path") == "/照片/收件箱"


class TestWizard:
    """Tests for the interactive prompts."""

    def test_ask_path_uses_default(self, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "")
        assert ask_path("Folder", "/last") == "/last"

    def test_ask_path_empty_returns_none(self, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "  ")
        assert ask_path("Folder") is None

    def test_ask_path_eof_returns_none(self, monkeypatch):
        def raise_eof(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        assert ask_path("Folder", "/last") is None

    def test_confirm(self, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: " Yes ")
        assert confirm("Go?") is True
        monkeypatch.setattr("builtins.input", lambda prompt: "")
        assert confirm("Go?") is False
