"""Tests for the environment-backed configuration loader"""

import os

from config.loader import ConfigLoader


def test_env_overrides_default(monkeypatch, tmp_path):
    monkeypatch.setenv("ITD_TEST_VALUE", "from-env")

    loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))

    assert loader.get("ITD_TEST_VALUE", "default") == "from-env"
    assert loader.get("ITD_TEST_UNSET", "default") == "default"


def test_type_coercion(monkeypatch, tmp_path):
    monkeypatch.setenv("ITD_TEST_FLOAT", "2.5")
    monkeypatch.setenv("ITD_TEST_INT", "7")
    monkeypatch.setenv("ITD_TEST_BOOL", "yes")
    monkeypatch.setenv("ITD_TEST_BAD", "nope")

    loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))

    assert loader.get("ITD_TEST_FLOAT", 1.0) == 2.5
    assert loader.get("ITD_TEST_INT", 1) == 7
    assert loader.get("ITD_TEST_BOOL", False) is True
    assert loader.get("ITD_TEST_BAD", 30.0) == 30.0


def test_env_file_does_not_override_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ITD_TEST_FILE_ONLY=file\nITD_TEST_BOTH=file\n", encoding="utf-8")
    monkeypatch.setenv("ITD_TEST_BOTH", "shell")

    loader = ConfigLoader(env_path=str(env_file))

    assert loader.get("ITD_TEST_BOTH", None) == "shell"
    assert loader.get("ITD_TEST_FILE_ONLY", None) == "file"
    os.environ.pop("ITD_TEST_FILE_ONLY", None)


def test_get_first(monkeypatch, tmp_path):
    monkeypatch.delenv("ITD_TEST_A", raising=False)
    monkeypatch.setenv("ITD_TEST_B", "")
    monkeypatch.setenv("ITD_TEST_C", "c")

    loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))

    assert loader.get_first(["ITD_TEST_A", "ITD_TEST_B", "ITD_TEST_C"]) == "c"
    assert loader.get_first(["ITD_TEST_A"], "fallback") == "fallback"
