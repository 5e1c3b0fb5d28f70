"""Tests for patcred.config -- XDG paths, atomic writes, precedence, master keys."""

from __future__ import annotations

import json
import stat
from pathlib import Path
from typing import Any

import pytest
from cryptography.fernet import Fernet

from patcred.config import (
    _atomic_write,
    find_master_key,
    get_config_dir,
    get_data_dir,
    get_master_key_path,
    load_global_config,
    load_master_key,
    resolve_config,
    resolve_source,
    save_global_config,
)
from patcred.exceptions import ConfigError
from patcred.models import GlobalConfig, PluginsConfig, SecretsConfig


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class TestXDGPaths:
    def test_config_dir_from_env(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "patcred"
        assert get_config_dir().is_dir()

    def test_data_dir_from_env(self, isolated_config: Path) -> None:
        assert get_data_dir() == isolated_config / "data" / "patcred"

    def test_fallback_on_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("patcred.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr("patcred.config.Path.home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".patcred"
        assert get_data_dir() == tmp_path / ".patcred" / "data"


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.txt"
        _atomic_write(target, "hello\n")
        assert target.read_text() == "hello\n"

    def test_applies_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "secret.txt"
        _atomic_write(target, "x", mode=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        _atomic_write(tmp_path / "a.txt", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["a.txt"]


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.secrets.key_source is None

    def test_save_and_load(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            secrets=SecretsConfig(key_source="env:MY_KEY"),
            plugins=PluginsConfig(disabled=["legacy"]),
        )
        save_global_config(config)
        assert load_global_config() == config

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_shape_raises(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"plugins": {"enabled": "nope"}})
        with pytest.raises(ConfigError):
            load_global_config()


class TestResolveConfig:
    def test_file_value(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(secrets=SecretsConfig(key_source="file:/from/file")))
        assert resolve_config().secrets.key_source == "file:/from/file"

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(secrets=SecretsConfig(key_source="file:/from/file")))
        monkeypatch.setenv("PATCRED_KEY_SOURCE", "env:FROM_ENV")
        assert resolve_config().secrets.key_source == "env:FROM_ENV"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATCRED_KEY_SOURCE", "env:FROM_ENV")
        assert resolve_config("env:FROM_CLI").secrets.key_source == "env:FROM_CLI"


class TestResolveSource:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATCRED_TEST_VALUE", "abc")
        assert resolve_source("env:PATCRED_TEST_VALUE") == "abc"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PATCRED_TEST_VALUE", raising=False)
        with pytest.raises(ConfigError, match="not set"):
            resolve_source("env:PATCRED_TEST_VALUE")

    def test_file_is_stripped(self, tmp_path: Path) -> None:
        key_file = tmp_path / "key"
        key_file.write_text("  abc\n", encoding="utf-8")
        assert resolve_source(f"file:{key_file}") == "abc"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_source(f"file:{tmp_path / 'missing'}")

    def test_unknown_format(self) -> None:
        with pytest.raises(ConfigError, match="Unknown key source"):
            resolve_source("vault:secret/key")


class TestMasterKey:
    def test_generated_on_first_use(self, isolated_config: Path) -> None:
        key = load_master_key()
        path = get_master_key_path()
        assert path.is_file()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        Fernet(key)

    def test_find_does_not_generate(self, isolated_config: Path) -> None:
        assert find_master_key() is None
        assert not get_master_key_path().exists()

    def test_find_returns_generated_key(self, isolated_config: Path) -> None:
        key = load_master_key()
        assert find_master_key() == key

    def test_non_ascii_source_raises_config_error(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PATCRED_TEST_KEY", "ключ")
        config = GlobalConfig(secrets=SecretsConfig(key_source="env:PATCRED_TEST_KEY"))
        with pytest.raises(ConfigError, match="not ASCII"):
            find_master_key(config)

    def test_unwritable_data_dir_raises_config_error(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        not_a_dir = isolated_config / "not_a_dir"
        not_a_dir.write_text("", encoding="utf-8")
        monkeypatch.setenv("XDG_DATA_HOME", str(not_a_dir))
        with pytest.raises(ConfigError, match="Cannot write master key"):
            load_master_key()

    def test_reused_afterwards(self, isolated_config: Path) -> None:
        assert load_master_key() == load_master_key()

    def test_configured_source_wins(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        key = Fernet.generate_key()
        monkeypatch.setenv("PATCRED_MASTER_KEY", key.decode("ascii"))
        config = GlobalConfig(secrets=SecretsConfig(key_source="env:PATCRED_MASTER_KEY"))
        assert load_master_key(config) == key
        assert not get_master_key_path().exists()
