"""Tests for pbclient.config -- XDG paths, atomic writes, profiles, precedence, credentials."""

from __future__ import annotations

import io
import json
import os
import stat
from pathlib import Path
from typing import Any

import pytest

from pbclient.config import (
    _atomic_write,
    build_credentials,
    delete_profile,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    list_profiles,
    load_global_config,
    load_profile,
    profile_exists,
    resolve_config,
    resolve_credential,
    save_global_config,
    save_profile,
)
from pbclient.exceptions import ConfigError
from pbclient.models import (
    AdminPassword,
    AuthProfile,
    CollectionPassword,
    GlobalConfig,
    NoAuth,
    Profile,
    StaticToken,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _make_profile(name: str = "test", base_url: str = "http://pb.test") -> Profile:
    return Profile(name=name, base_url=base_url)


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pbclient.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "pbclient"
        assert result.is_dir()

    def test_xdg_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pbclient.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "c"))
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "d"))
        assert get_cache_dir() == tmp_path / "c" / "pbclient"
        assert get_data_dir() == tmp_path / "d" / "pbclient"

    def test_fallback_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pbclient.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".pbclient"
        assert get_cache_dir() == tmp_path / ".pbclient" / "cache"
        assert get_data_dir() == tmp_path / ".pbclient" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content_with_private_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text() == '{"a": 1}'
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        _atomic_write(target, "one")
        _atomic_write(target, "two")
        assert target.read_text() == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Global config and profiles
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_round_trip(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="local"))
        assert load_global_config().default_profile == "local"

    def test_invalid_json(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


class TestProfiles:
    def test_save_load_list_delete(self, isolated_config: Path, sample_profile: Profile) -> None:
        save_profile(sample_profile)
        save_profile(_make_profile("other"))
        assert list_profiles() == ["local", "other"]
        assert load_profile("local") == sample_profile
        assert profile_exists("other")

        delete_profile("other")
        assert not profile_exists("other")

    def test_missing_profile(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_profile("ghost")
        with pytest.raises(ConfigError, match="not found"):
            delete_profile("ghost")

    def test_secrets_are_not_stored(self, isolated_config: Path, sample_profile: Profile) -> None:
        save_profile(sample_profile)
        text = (get_config_dir() / "profiles" / "local.json").read_text()
        assert "env:PB_TEST_PASSWORD" in text
        assert '"password"' not in text


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    @pytest.fixture(autouse=True)
    def _profiles(self, isolated_config: Path) -> None:
        for name in ("a", "b", "c", "d"):
            save_profile(_make_profile(name, f"http://{name}.test"))

    def test_nothing_selected_with_many_profiles(self) -> None:
        _, profile = resolve_config()
        assert profile is None

    def test_global_default(self) -> None:
        save_global_config(GlobalConfig(default_profile="a"))
        assert resolve_config()[1].name == "a"

    def test_project_beats_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="a"))
        _write_json(isolated_config / "pbclient.json", {"default_profile": "b"})
        assert resolve_config()[1].name == "b"

    def test_env_beats_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "pbclient.json", {"default_profile": "b"})
        monkeypatch.setenv("PBCLIENT_PROFILE", "c")
        assert resolve_config()[1].name == "c"

    def test_cli_beats_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PBCLIENT_PROFILE", "c")
        assert resolve_config(cli_profile="d")[1].name == "d"

    def test_base_url_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PBCLIENT_BASE_URL", "http://env.test")
        assert resolve_config(cli_profile="a")[1].base_url == "http://env.test"
        assert resolve_config(cli_profile="a", cli_base_url="http://cli.test")[1].base_url == (
            "http://cli.test"
        )

    def test_single_profile_auto_selected(self) -> None:
        for name in ("b", "c", "d"):
            delete_profile(name)
        assert resolve_config()[1].name == "a"


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PB_SECRET", "s3cret")
        assert resolve_credential("env:PB_SECRET") == "s3cret"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PB_SECRET", raising=False)
        with pytest.raises(ConfigError, match="PB_SECRET"):
            resolve_credential("env:PB_SECRET")

    def test_file(self, tmp_path: Path) -> None:
        secret = tmp_path / "secret"
        secret.write_text("  from-file\n")
        assert resolve_credential(f"file:{secret}") == "from-file"

    def test_literal(self) -> None:
        assert resolve_credential("value:plain") == "plain"

    def test_prompt_requires_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pbclient.config.sys.stdin", io.StringIO())
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_format(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:x")


class TestBuildCredentials:
    def test_admin(self, sample_profile: Profile, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PB_TEST_PASSWORD", "pw")
        creds = build_credentials(sample_profile)
        assert creds.base_url == "http://pb.test"
        assert creds.auth == AdminPassword(email="admin@example.com", password="pw")

    def test_collection(self) -> None:
        profile = Profile(
            name="x",
            auth=AuthProfile(
                mode="collection", identity="ana", collection="members", password_source="value:pw"
            ),
        )
        assert build_credentials(profile).auth == CollectionPassword(
            collection="members", identity="ana", password="pw"
        )

    def test_token_and_none(self) -> None:
        token_profile = Profile(name="t", auth=AuthProfile(mode="token", token_source="value:abc"))
        assert build_credentials(token_profile).auth == StaticToken(token="abc")
        assert build_credentials(Profile(name="n")).auth == NoAuth()

    def test_missing_source_leaves_secret_empty(self) -> None:
        profile = Profile(name="x", auth=AuthProfile(mode="admin", email="a@b.c"))
        assert build_credentials(profile).auth.password is None
