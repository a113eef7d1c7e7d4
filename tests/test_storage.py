"""Tests for the .env / .cookies credential store"""

import os
import platform

import pytest

from utils.storage import CredentialStore


@pytest.fixture
def store(tmp_path):
    return CredentialStore(env_path=tmp_path / ".env", cookies_path=tmp_path / ".cookies")


def test_paths_default_to_project_root(tmp_path):
    store = CredentialStore(project_root=tmp_path)

    assert store.env_path == tmp_path / ".env"
    assert store.cookies_path == tmp_path / ".cookies"


def test_explicit_paths_override_project_root(tmp_path):
    store = CredentialStore(env_path=tmp_path / "a.env", project_root=tmp_path / "elsewhere")

    assert store.env_path == tmp_path / "a.env"
    assert store.cookies_path == tmp_path / "elsewhere" / ".cookies"


def test_save_access_token_replaces_existing_line(store):
    store.env_path.write_text("A=1\nITD_ACCESS_TOKEN=old\nB=2\n", encoding="utf-8")

    assert store.save_access_token("new") is True
    assert store.env_path.read_text(encoding="utf-8") == "A=1\nITD_ACCESS_TOKEN=new\nB=2\n"


def test_save_access_token_appends_when_missing(store):
    store.env_path.write_text("A=1\nB=2\n", encoding="utf-8")

    assert store.save_access_token("new") is True
    assert store.env_path.read_text(encoding="utf-8") == "A=1\nB=2\nITD_ACCESS_TOKEN=new\n"


def test_save_access_token_appends_newline_separator(store):
    store.env_path.write_text("A=1", encoding="utf-8")

    store.save_access_token("new")

    assert store.env_path.read_text(encoding="utf-8") == "A=1\nITD_ACCESS_TOKEN=new\n"


def test_save_access_token_only_one_line_after_repeated_saves(store):
    store.env_path.write_text("A=1\n", encoding="utf-8")

    store.save_access_token("first")
    store.save_access_token("second")

    lines = store.env_path.read_text(encoding="utf-8").splitlines()
    assert lines == ["A=1", "ITD_ACCESS_TOKEN=second"]


def test_save_access_token_keeps_regex_characters_literal(store):
    store.env_path.write_text("ITD_ACCESS_TOKEN=old\n", encoding="utf-8")

    store.save_access_token(r"a\1b\g<0>")

    assert store.env_path.read_text(encoding="utf-8") == "ITD_ACCESS_TOKEN=a\\1b\\g<0>\n"


def test_save_access_token_does_not_touch_similar_keys(store):
    store.env_path.write_text("MY_ITD_ACCESS_TOKEN=keep\n", encoding="utf-8")

    store.save_access_token("new")

    assert store.env_path.read_text(encoding="utf-8") == "MY_ITD_ACCESS_TOKEN=keep\nITD_ACCESS_TOKEN=new\n"


def test_save_access_token_skips_missing_file(store):
    assert store.save_access_token("new") is False
    assert not store.env_path.exists()


def test_load_access_token(store):
    store.env_path.write_text("OTHER=x\nITD_ACCESS_TOKEN=abc.def\n", encoding="utf-8")

    assert store.load_access_token() == "abc.def"


def test_load_access_token_missing(store):
    assert store.load_access_token() is None

    store.env_path.write_text("OTHER=x\n", encoding="utf-8")
    assert store.load_access_token() is None


def test_cookie_header_round_trip_overwrites(store):
    store.cookies_path.write_text("old=1", encoding="utf-8")

    assert store.save_cookie_header("refresh_token=r; is_auth=1") is True
    assert store.cookies_path.read_text(encoding="utf-8") == "refresh_token=r; is_auth=1"
    assert store.load_cookie_header() == "refresh_token=r; is_auth=1"


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_cookie_file_is_owner_only(store):
    store.save_cookie_header("refresh_token=r")

    assert os.stat(store.cookies_path).st_mode & 0o777 == 0o600


def test_load_cookie_header_missing_or_blank(store):
    assert store.load_cookie_header() is None

    store.cookies_path.write_text("  \n", encoding="utf-8")
    assert store.load_cookie_header() is None


def test_save_cookie_header_reports_failure(tmp_path):
    store = CredentialStore(cookies_path=tmp_path / "missing-dir" / ".cookies")

    assert store.save_cookie_header("a=1") is False
