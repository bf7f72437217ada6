"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.gw2api/`` on macOS and Windows. See :func:`get_config_dir`.
* **Config file** -- a single :class:`~gw2api.models.ClientConfig` JSON file
  (``config.json``) holding defaults such as language and cache size.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  overrides, ``GW2API_*`` environment variables, the config file, and the
  model defaults into the effective configuration.

The API key is deliberately not stored in the config file; it comes from
the caller or the ``GW2API_KEY`` environment variable
(:func:`resolve_api_key`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from gw2api.exceptions import ConfigError
from gw2api.models import ClientConfig

_APP_NAME = "gw2api"
_CONFIG_FILENAME = "config.json"

_ENV_FIELDS = {
    "GW2API_LANG": "lang",
    "GW2API_CACHE_TIMEOUT": "cache_timeout",
    "GW2API_MAX_CACHE_OBJECTS": "max_cache_objects",
    "GW2API_BASE_URL": "base_url",
    "GW2API_TIMEOUT": "timeout",
}
_ENV_API_KEY = "GW2API_KEY"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/gw2api/`` (default ``~/.config/gw2api/``).
    On macOS/Windows: ``~/.gw2api/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    """Path to the config file."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
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


# --- Config file ---


def _read_config_data(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load the client configuration from disk.

    Args:
        path: Config file to read; defaults to :func:`get_config_path`.

    Returns:
        The deserialised :class:`~gw2api.models.ClientConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = path or get_config_path()
    if not path.is_file():
        return ClientConfig()
    data = _read_config_data(path)
    try:
        return ClientConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig, path: Optional[Path] = None) -> None:
    """Persist *config* atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(path or get_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(path: Optional[Path] = None, **overrides: Any) -> ClientConfig:
    """Build the effective configuration.

    Precedence (highest first):

    1. *overrides* whose value is not ``None`` (e.g. CLI flags).
    2. ``GW2API_LANG``, ``GW2API_CACHE_TIMEOUT``, ``GW2API_MAX_CACHE_OBJECTS``,
       ``GW2API_BASE_URL``, ``GW2API_TIMEOUT``.
    3. The config file.
    4. :class:`~gw2api.models.ClientConfig` defaults.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    path = path or get_config_path()
    merged: dict[str, Any] = {}
    if path.is_file():
        merged.update(load_config(path).model_dump())

    for env_var, field in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value:
            merged[field] = value

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ClientConfig.model_validate(merged)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def resolve_api_key(explicit: Optional[str] = None) -> Optional[str]:
    """Return *explicit* if given, else ``$GW2API_KEY``, else ``None``."""
    if explicit:
        return explicit
    return os.environ.get(_ENV_API_KEY) or None
