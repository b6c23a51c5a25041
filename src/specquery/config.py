"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- ``$XDG_CONFIG_HOME/specquery/`` (default
  ``~/.config/specquery/``) on Linux/BSD, ``~/.specquery/`` elsewhere.
* **Global config** -- one :class:`~specquery.models.GlobalConfig` JSON
  file, read by :func:`load_global_config` and written by
  :func:`save_global_config`.
* **Precedence resolution** -- :func:`resolve_config` layers the project
  file ``./specquery.json``, ``SPECQUERY_*`` environment variables and CLI
  overrides on top of the user config.

The core modules never read configuration themselves; the CLI resolves it
once and builds a :class:`~specquery.service.SpecService` from it.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specquery.exceptions import ConfigError
from specquery.models import GlobalConfig

_APP_NAME = "specquery"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specquery.json"

# Environment variable -> dotted GlobalConfig key.
ENV_OVERRIDES = {
    "SPECQUERY_LOG_LEVEL": "log_level",
    "SPECQUERY_CACHE_TTL": "cache.ttl_seconds",
    "SPECQUERY_CONTENT_TYPE": "default_content_type",
    "SPECQUERY_FETCH_TIMEOUT": "fetch_timeout",
}


# --- Paths ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary."""
    if _is_xdg_platform():
        xdg_home = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(xdg_home) if xdg_home else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to a sibling temp file, then rename it over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Global config ---


def load_global_config() -> GlobalConfig:
    """Load the user config, or defaults when no file exists.

    Raises:
        ConfigError: If the file holds invalid JSON or invalid values.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}", {"path": str(path)}) from exc


def save_global_config(config: GlobalConfig) -> None:
    _atomic_write(global_config_path(), json.dumps(config.model_dump(mode="json"), indent=2) + "\n")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specquery.json`` as a partial config mapping, if present.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}", {"path": str(path)}) from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object", {"path": str(path)})
    return data


# --- Precedence resolution ---


def resolve_config(overrides: Optional[dict[str, Any]] = None) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI overrides (dotted keys, e.g. ``{"log_level": "DEBUG"}``)
        2. Environment variables (see :data:`ENV_OVERRIDES`)
        3. Project config (``./specquery.json``)
        4. User config (``~/.config/specquery/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project:
        _deep_merge(data, project)

    for env_var, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            set_dotted(data, key, value)

    for key, value in (overrides or {}).items():
        if value is not None:
            set_dotted(data, key, value)

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def set_dotted(data: dict[str, Any], key: str, value: Any) -> None:
    """Assign *value* at a dotted *key* path, creating nested dicts as needed."""
    *parents, last = key.split(".")
    target = data
    for part in parents:
        target = target.setdefault(part, {})
        if not isinstance(target, dict):
            raise ConfigError(f"Invalid config key: {key}", {"key": key})
    target[last] = value


def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> None:
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
