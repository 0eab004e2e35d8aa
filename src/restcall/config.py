"""Configuration management with XDG paths, atomic writes, and env overrides.

This module handles persistent configuration for restcall:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.restcall/`` on macOS and Windows. See :func:`get_config_dir`.
* **Config file** -- A single :class:`~restcall.models.RestcallConfig`
  JSON file listing named endpoints. ``RESTCALL_CONFIG`` points at an
  alternative file.
* **Environment overrides** -- ``RESTCALL_BASE_URL_<KEY>`` replaces the
  ``base_url`` of the endpoint named ``<key>`` (see :func:`env_var_for`).
* **Endpoint resolution** -- :class:`ConfigEndpointResolver` maps endpoint
  keys to :class:`~restcall.models.EndpointConfig` for the live transport.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import re
import tempfile
from pathlib import Path
from typing import Optional

from restcall.exceptions import ConfigError
from restcall.models import EndpointConfig, RestcallConfig

_APP_NAME = "restcall"
_CONFIG_FILENAME = "config.json"
_CONFIG_ENV_VAR = "RESTCALL_CONFIG"
_BASE_URL_ENV_PREFIX = "RESTCALL_BASE_URL_"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/restcall/`` (default ``~/.config/restcall/``).
    On macOS/Windows: ``~/.restcall/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    """Return the config file path, honouring ``RESTCALL_CONFIG``."""
    override = os.environ.get(_CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On any failure the temp file is cleaned up.
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Load / save ---


def load_config(path: Optional[Path] = None) -> RestcallConfig:
    """Load the configuration and apply environment overrides.

    Args:
        path: Explicit config file. Defaults to :func:`get_config_path`.

    Returns:
        The deserialised :class:`~restcall.models.RestcallConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = path or get_config_path()
    if path.is_file():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            config = RestcallConfig.model_validate(data)
        except (json.JSONDecodeError, ValueError) as exc:
            raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    else:
        config = RestcallConfig()
    return apply_env_overrides(config)


def save_config(config: RestcallConfig, path: Optional[Path] = None) -> None:
    """Persist *config* atomically to disk.

    Args:
        config: The configuration to save.
        path: Explicit config file. Defaults to :func:`get_config_path`.
    """
    data = config.model_dump(mode="json")
    _atomic_write(path or get_config_path(), json.dumps(data, indent=2) + "\n")


# --- Environment overrides ---


def env_var_for(endpoint_key: str) -> str:
    """Name of the variable overriding *endpoint_key*'s base URL.

    The key is upper-cased and every non-alphanumeric character becomes
    ``_``; ``"acme-prod"`` maps to ``RESTCALL_BASE_URL_ACME_PROD``.
    """
    return _BASE_URL_ENV_PREFIX + re.sub(r"[^A-Za-z0-9]", "_", endpoint_key).upper()


def apply_env_overrides(config: RestcallConfig) -> RestcallConfig:
    """Return a copy of *config* with ``RESTCALL_BASE_URL_*`` applied.

    Only endpoints already present in *config* are overridden.
    """
    endpoints: dict[str, EndpointConfig] = {}
    for key, endpoint in config.endpoints.items():
        override = os.environ.get(env_var_for(key))
        if override:
            endpoint = endpoint.model_copy(update={"base_url": override})
        endpoints[key] = endpoint
    return config.model_copy(update={"endpoints": endpoints})


# --- Endpoint resolution ---


class ConfigEndpointResolver:
    """Resolve endpoint keys from a :class:`~restcall.models.RestcallConfig`.

    Args:
        config: The loaded configuration. When ``None``,
            :func:`load_config` is called on first use.
    """

    def __init__(self, config: Optional[RestcallConfig] = None) -> None:
        self._config = config

    @property
    def config(self) -> RestcallConfig:
        if self._config is None:
            self._config = load_config()
        return self._config

    def __call__(self, endpoint_key: str) -> EndpointConfig:
        """Return the endpoint registered under *endpoint_key*.

        Raises:
            ConfigError: If the key is not configured.
        """
        try:
            return self.config.endpoints[endpoint_key]
        except KeyError:
            raise ConfigError(f"Endpoint '{endpoint_key}' is not configured") from None
