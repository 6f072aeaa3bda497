"""
Configuration file system for shop-ledger.

Supports loading configuration from multiple locations, merged with precedence:
1. /etc/shop-ledger/config.yaml or config.json (lowest priority)
2. ~/.config/shop-ledger/config.yaml or config.json
3. ./config.yaml, ./config.json, ./shop-ledger.yaml or ./shop-ledger.json (highest priority)

All found config files are merged, with later files overriding earlier ones.
YAML is checked before JSON at each location. Environment variables
(SHOP_LEDGER_*) have the highest priority.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from . import snapshot

logger = logging.getLogger(__name__)

# Config filenames for current working directory (project-local config)
CONFIG_FILENAMES = ["config.yaml", "config.json", "shop-ledger.yaml", "shop-ledger.json"]
# Config filenames for system/user config directories
CONFIG_USER_FILENAMES = ["config.yaml", "config.json"]

ENV_PREFIX = "SHOP_LEDGER_"

DEFAULT_EMPLOYEES = {f"no{i}": "No" for i in range(1, 11)}

DEFAULTS: dict[str, Any] = {
    # Relative to the working directory, same name the old program used
    "backup_file": "inventory_backup.txt",
    "snapshot": {
        "format": "text",  # text | json
        "strict": False,  # Fail the whole restore on a malformed record
    },
    "management": {
        "access_code": 189,
        # Staff name -> on leave; empty means DEFAULT_EMPLOYEES
        "employees": {},
    },
}


def _get_config_dirs() -> list[Path]:
    """Get list of config directories to search, in merge order (lowest priority first)."""
    return [
        Path("/etc/shop-ledger"),
        Path.home() / ".config" / "shop-ledger",
        Path.cwd(),
    ]


def find_config_files() -> list[Path]:
    """Find all existing config files, in merge order (lowest priority first).

    At each location, only the first found file (YAML before JSON) is included.
    """
    found_files = []

    for dir_path in _get_config_dirs():
        filenames = CONFIG_FILENAMES if dir_path == Path.cwd() else CONFIG_USER_FILENAMES
        for filename in filenames:
            path = dir_path / filename
            if path.exists():
                found_files.append(path)
                break
    return found_files


def find_config_file() -> Path | None:
    """Find the highest-priority existing config file, or None."""
    files = find_config_files()
    return files[-1] if files else None


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base dict, modifying base in place."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _deep_copy(d: dict) -> dict:
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        else:
            result[key] = value
    return result


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load a single config file and return its contents.

    Raises:
        ImportError: If YAML config is found but PyYAML is not installed.
        json.JSONDecodeError: If JSON config file is malformed.
    """
    logger.debug("Loading config from %s", path)
    if path.suffix in (".yaml", ".yml"):
        try:
            import yaml
        except ImportError as e:
            raise ImportError(
                "PyYAML required for .yaml config files. Install with: pip install shop-ledger[yaml]"
            ) from e
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    else:
        with open(path, encoding="utf-8") as f:
            return json.load(f)


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from file(s), merging with defaults.

    If path is provided, only that file is loaded (plus defaults and env
    vars). Otherwise all standard locations are searched and merged.

    Raises:
        ImportError: If YAML config is found but PyYAML is not installed.
        json.JSONDecodeError: If JSON config file is malformed.
    """
    config = _deep_copy(DEFAULTS)

    if path is not None:
        if path.exists():
            _deep_merge(config, _load_config_file(path))
    else:
        for config_path in find_config_files():
            _deep_merge(config, _load_config_file(config_path))

    _apply_env_overrides(config)

    return config


def _apply_env_overrides(config: dict[str, Any]) -> None:
    """Apply environment variable overrides to config.

    Environment variables are named SHOP_LEDGER_<KEY> where nested
    keys use double underscore, e.g., SHOP_LEDGER_SNAPSHOT__FORMAT=json
    """
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config_key = key[len(ENV_PREFIX):].lower()
            _set_nested_value(config, config_key, value)


def _set_nested_value(config: dict, key: str, value: str) -> None:
    """Set a nested config value using double-underscore notation."""
    parts = key.split("__")
    target = config
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]

    target[parts[-1]] = _convert_value(value)


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def get_config_value(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a config value using dot notation, e.g. "snapshot.format"."""
    target = config
    for part in key.split("."):
        if isinstance(target, dict) and part in target:
            target = target[part]
        else:
            return default
    return target


class Config:
    """Configuration holder with convenient access methods."""

    def __init__(self, path: Path | None = None):
        """Initialize config, loading from file(s).

        Args:
            path: Optional explicit path to config file. If provided, only
                  this file is loaded. Otherwise, all standard locations
                  are searched and merged.
        """
        if path is not None:
            self._paths = [path] if path.exists() else []
        else:
            self._paths = find_config_files()
        self._data = load_config(path)

    @property
    def path(self) -> Path | None:
        """Return the highest-priority loaded config file, or None."""
        return self._paths[-1] if self._paths else None

    @property
    def paths(self) -> list[Path]:
        return self._paths.copy()

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return get_config_value(self._data, key, default)

    @property
    def backup_file(self) -> Path:
        # Env overrides like SHOP_LEDGER_BACKUP_FILE=2024 arrive as ints
        return Path(str(self.get("backup_file", DEFAULTS["backup_file"])))

    @property
    def snapshot_format(self) -> str:
        """Return the format used when writing backups (text or json).

        Unknown values fall back to text with a warning.
        """
        value = str(self.get("snapshot.format", snapshot.TEXT)).lower()
        if value not in snapshot.FORMATS:
            logger.warning(
                "Unknown snapshot.format %r in config, using %s. Available: %s",
                value, snapshot.TEXT, list(snapshot.FORMATS),
            )
            return snapshot.TEXT
        return value

    @property
    def snapshot_strict(self) -> bool:
        """Return whether a malformed record fails the whole restore."""
        return bool(self.get("snapshot.strict", False))

    @property
    def access_code(self) -> int:
        """Return the shared code that unlocks the management views.

        Raises:
            ValueError: If the configured code is not a whole number.
        """
        value = self.get("management.access_code", DEFAULTS["management"]["access_code"])
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ValueError(f"management.access_code must be a whole number, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"management.access_code must be a whole number, got {value!r}") from e

    @property
    def employees(self) -> dict[str, str]:
        """Return the staff leave roster shown in the management views.

        Example config:
            management:
              employees:
                alice: "No"
                bob: "Yes"
        """
        roster = self.get("management.employees") or DEFAULT_EMPLOYEES
        # YAML turns bare yes/no into booleans
        return {
            str(name): ("Yes" if status is True else "No" if status is False else str(status))
            for name, status in roster.items()
        }
