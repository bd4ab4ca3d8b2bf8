"""YAML-backed settings for the timesheet tool."""

import copy
import logging
from pathlib import Path
from typing import Any, Iterator, NoReturn, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

from timesheet.analysis.date_range import PERIODS
from timesheet.core.categories import DEFAULT_CATEGORIES, CategoryTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".timesheet" / "config.yml"
DEFAULT_DATA_DIR = "~/.timesheet/data"
DEFAULT_DATE_FORMAT = "%Y-%m-%d"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

DEFAULTS: dict[str, Any] = {
    "version": "1.0",
    "general": {
        "data_dir": DEFAULT_DATA_DIR,
        "date_format": DEFAULT_DATE_FORMAT,
    },
    "security": {
        "min_password_length": 6,
        "hash_method": "scrypt",
    },
    "analytics": {
        "default_period": "this-week",
        "trend_min_buckets": 2,
    },
    "categories": {name: list(subs) for name, subs in DEFAULT_CATEGORIES.items()},
    "advanced": {
        "log_level": "WARNING",
        "log_file": None,
        "backup_on_import": True,
    },
}


def _section(**properties: Any) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["version"],
    "properties": {
        "version": {"type": "string"},
        "general": _section(
            data_dir={"type": "string"},
            date_format={"type": "string", "minLength": 1},
        ),
        "security": _section(
            min_password_length={"type": "integer", "minimum": 1, "maximum": 128},
            hash_method={"type": "string", "pattern": "^(scrypt|pbkdf2)"},
        ),
        "analytics": _section(
            default_period={"type": "string", "enum": list(PERIODS)},
            trend_min_buckets={"type": "integer", "minimum": 1},
        ),
        # Category name -> non-empty list of distinct subcategory names
        "categories": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {
                "type": "array",
                "items": {"type": "string", "minLength": 1},
                "minItems": 1,
                "uniqueItems": True,
            },
        },
        "advanced": _section(
            log_level={"type": "string", "enum": LOG_LEVELS},
            log_file={"type": ["string", "null"]},
            backup_on_import={"type": "boolean"},
        ),
    },
}

# A user-supplied categories table replaces the default one entirely
WHOLE_SECTIONS = ("categories",)


def _overlay(target: dict[str, Any], changes: dict[str, Any]) -> None:
    for key, value in changes.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _overlay(current, value)
        else:
            target[key] = value


def _leaf_keys(tree: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in tree.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaf_keys(value, f"{dotted}.")
        else:
            yield dotted


class ConfigManager:
    """Loads, validates and persists the YAML settings file.

    Missing keys are filled in from ``DEFAULTS``. Keys are addressed with
    dot notation, e.g. ``analytics.default_period``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        self._config: dict[str, Any] = copy.deepcopy(DEFAULTS)
        if self.config_path.exists():
            self._load()
        else:
            self.save()

    def _load(self) -> None:
        with open(self.config_path, encoding="utf-8") as f:
            stored = yaml.safe_load(f) or {}
        if not isinstance(stored, dict):
            self._quarantine(ValueError("Invalid configuration: top level must be a mapping"))

        merged = copy.deepcopy(DEFAULTS)
        for name in WHOLE_SECTIONS:
            if isinstance(stored.get(name), dict):
                merged[name] = {}
        _overlay(merged, stored)
        self._config = merged

        try:
            self.validate()
        except ValueError as e:
            self._quarantine(e)

    def _quarantine(self, error: ValueError) -> NoReturn:
        """Move an invalid file aside and start over from the defaults."""
        backup_path = self.config_path.with_suffix(".yml.backup")
        self.config_path.rename(backup_path)
        self.reset()
        logger.error(f"Invalid config file moved to {backup_path}: {error}")
        raise ValueError(
            f"Config validation failed, backed up to {backup_path}. "
            f"Using defaults. Error: {error}"
        ) from error

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key, returning ``default`` when it is missing or null."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key and save.

        Raises:
            ValueError: If the result fails validation; the previous
                settings are kept.
        """
        snapshot = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValueError(f"Invalid configuration: {part} is not a section")
        node[leaf] = value
        try:
            self.validate()
        except ValueError:
            self._config = snapshot
            raise
        self.save()

    def validate(self) -> bool:
        """Check the settings against ``SCHEMA``.

        Raises:
            ValueError: If the settings are invalid
        """
        try:
            validate(instance=self._config, schema=SCHEMA)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e.message}") from e
        return True

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False,
                           allow_unicode=True)

    def reset(self) -> None:
        """Restore and save the default settings."""
        self._config = copy.deepcopy(DEFAULTS)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """Every leaf setting in dot notation, in file order."""
        return list(_leaf_keys(self._config))

    @property
    def data_dir(self) -> Path:
        return Path(self.get("general.data_dir", DEFAULT_DATA_DIR)).expanduser()

    @property
    def date_format(self) -> str:
        """strftime pattern for dates shown to the user."""
        return self.get("general.date_format", DEFAULT_DATE_FORMAT)

    def category_table(self) -> CategoryTable:
        """Category table built from the ``categories`` section."""
        return CategoryTable(self.get("categories") or DEFAULT_CATEGORIES)
