"""Configuration management with XDG paths, atomic writes, and master keys.

This module handles all persistent configuration for patcred:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.patcred/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~patcred.models.GlobalConfig`
  JSON file storing the key source and credential type allow/deny lists.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the global config file.
* **Master key** -- :func:`find_master_key` looks up the Fernet key used to
  encrypt secrets without touching the disk; :func:`load_master_key`
  generates one on first use.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet

from patcred.exceptions import ConfigError
from patcred.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "patcred"
_CONFIG_FILENAME = "config.json"
_MASTER_KEY_FILENAME = "master.key"

KEY_SOURCE_ENV_VAR = "PATCRED_KEY_SOURCE"
"""Environment variable overriding ``secrets.key_source`` from the config file."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def _config_dir_path() -> Path:
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def _data_dir_path() -> Path:
    if _is_xdg_platform():
        return _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    return _fallback_base_dir() / "data"


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/patcred/`` (default ``~/.config/patcred/``).
    On macOS/Windows: ``~/.patcred/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    path = _config_dir_path()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (master key, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/patcred/`` (default ``~/.local/share/patcred/``).
    On macOS/Windows: ``~/.patcred/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    path = _data_dir_path()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    When *mode* is given, permissions are applied to the temp file before
    any content is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return _config_dir_path() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~patcred.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    try:
        if not path.is_file():
            return GlobalConfig()
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read global config at {path}: {exc}") from exc
    try:
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.

    Raises:
        ConfigError: If the file cannot be written.
    """
    data = config.model_dump(mode="json")
    path = _global_config_path()
    try:
        _atomic_write(path, json.dumps(data, indent=2) + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write global config at {path}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config(cli_key_source: Optional[str] = None) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_key_source``)
        2. Environment variables (``PATCRED_KEY_SOURCE``)
        3. User config (``~/.config/patcred/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~patcred.models.GlobalConfig`.
    """
    config = load_global_config()

    env_key_source = os.environ.get(KEY_SOURCE_ENV_VAR)
    if env_key_source:
        config.secrets.key_source = env_key_source
    if cli_key_source is not None:
        config.secrets.key_source = cli_key_source

    return config


# --- Source resolution ---


def resolve_source(source: str) -> str:
    """Resolve a secret value from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Args:
        source: The source descriptor string.

    Returns:
        The resolved value.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        try:
            if not path.is_file():
                raise ConfigError(f"Key file not found: {path} (source: {source})")
            return path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Cannot read key file {path}: {exc}") from exc

    raise ConfigError(f"Unknown key source format: {source}")


# --- Master key ---


def get_master_key_path() -> Path:
    """Path of the generated master key file inside the data directory."""
    return _data_dir_path() / _MASTER_KEY_FILENAME


def find_master_key(config: Optional[GlobalConfig] = None) -> Optional[bytes]:
    """Look up the Fernet master key without creating anything on disk.

    The configured ``secrets.key_source`` wins; otherwise the key file at
    :func:`get_master_key_path` is read if it exists.

    Args:
        config: The effective configuration. Defaults to
            :func:`resolve_config`.

    Returns:
        The url-safe base64 encoded key as bytes, or ``None`` when no key
        has been configured or generated yet.

    Raises:
        ConfigError: If the configured source or the key file cannot be read.
    """
    if config is None:
        config = resolve_config()

    source = config.secrets.key_source
    if source:
        logger.debug("Reading master key from configured source")
        try:
            return resolve_source(source).encode("ascii")
        except UnicodeEncodeError as exc:
            raise ConfigError(f"Master key from {source} is not ASCII") from exc

    path = get_master_key_path()
    try:
        if not path.is_file():
            return None
        return path.read_text(encoding="ascii").strip().encode("ascii")
    except (OSError, UnicodeError) as exc:
        raise ConfigError(f"Cannot read master key {path}: {exc}") from exc


def load_master_key(config: Optional[GlobalConfig] = None) -> bytes:
    """Return the Fernet master key, generating it (mode ``0o600``) on first use.

    Raises:
        ConfigError: If the key cannot be read or the new key cannot be written.
    """
    key = find_master_key(config)
    if key is not None:
        return key

    path = get_master_key_path()
    logger.info("Generating new master key at %s", path)
    key = Fernet.generate_key()
    try:
        _atomic_write(path, key.decode("ascii") + "\n", mode=0o600)
    except OSError as exc:
        raise ConfigError(f"Cannot write master key {path}: {exc}") from exc
    return key
