"""Runtime configuration for the expense tracker.

Settings start from built-in defaults, are overlaid by an optional YAML file
and finally by ``EXPENSE_TRACKER_*`` environment variables. Every problem in
the YAML file is collected so a single :class:`ConfigError` reports them all.
"""

from __future__ import annotations

# ruff: noqa: ANN401
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Final

import yaml

from expense_tracker.errors import ConfigError

__all__ = ["DEFAULT_CATEGORIES", "Settings", "load_settings", "read_yaml"]

DEFAULT_CATEGORIES: Final[tuple[str, ...]] = (
    "Food",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Bills",
    "Other",
)
CONFIG_ENV_FLAG: Final[str] = "EXPENSE_TRACKER_CONFIG"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration shared by the server, the CLI and the client.

    Attributes:
      database_url: SQLAlchemy URL of the relational store.
      default_categories: Names seeded into an empty ``categories`` table.
      seed_samples: Insert the demo expenses when the expense table is empty.
      host: Interface the ``serve`` command binds to.
      port: Port the ``serve`` command binds to.
      api_url: Base URL used by :class:`~expense_tracker.client.ExpenseClient`.
      log_level: Level name applied to the ``expense_tracker`` logger.
      json_logs: Also write JSON log lines to the audit file.
    """

    database_url: str = "sqlite:///expenses.db"
    default_categories: tuple[str, ...] = field(default=DEFAULT_CATEGORIES)
    seed_samples: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    api_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"
    json_logs: bool = False


def read_yaml(path: Path | str) -> object:
    """Read a YAML file and return the corresponding Python object."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _is_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _validate_yaml(payload: Any, source: Path) -> dict[str, Any]:
    """Check the YAML mapping key by key, raising once with every problem found."""

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"{source}: top level must be a mapping")

    known = {item.name for item in fields(Settings)}
    errors: list[str] = []
    values: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in known:
            errors.append(f"{key} is not a recognised setting")
            continue
        if key in {"database_url", "host", "api_url", "log_level"}:
            if not _is_string(value):
                errors.append(f"{key} must be a non-empty string")
                continue
            values[key] = value.strip()
        elif key == "port":
            if not isinstance(value, int) or isinstance(value, bool) or not 0 < value < 65536:
                errors.append("port must be an integer between 1 and 65535")
                continue
            values[key] = value
        elif key in {"seed_samples", "json_logs"}:
            if not isinstance(value, bool):
                errors.append(f"{key} must be a boolean")
                continue
            values[key] = value
        elif key == "default_categories":
            if not isinstance(value, list) or not all(_is_string(item) for item in value):
                errors.append("default_categories must be a list of non-empty strings")
                continue
            names = [item.strip() for item in value]
            if len(set(names)) != len(names):
                errors.append("default_categories must not contain duplicates")
                continue
            values[key] = tuple(names)

    if errors:
        raise ConfigError(f"{source}: " + "; ".join(errors))
    return values


def _environment_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if environ.get("EXPENSE_TRACKER_DB_URL"):
        overrides["database_url"] = environ["EXPENSE_TRACKER_DB_URL"].strip()
    if environ.get("EXPENSE_TRACKER_API_URL"):
        overrides["api_url"] = environ["EXPENSE_TRACKER_API_URL"].strip()
    if environ.get("EXPENSE_TRACKER_LOG_LEVEL"):
        overrides["log_level"] = environ["EXPENSE_TRACKER_LOG_LEVEL"].strip().upper()
    if "EXPENSE_TRACKER_JSON_LOGS" in environ:
        flag = environ["EXPENSE_TRACKER_JSON_LOGS"].strip().lower()
        overrides["json_logs"] = flag in _TRUE_VALUES
    return overrides


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve :class:`Settings` from defaults, a YAML file and the environment."""

    env = os.environ if environ is None else environ
    settings = Settings()

    config_path = path if path is not None else env.get(CONFIG_ENV_FLAG)
    if config_path:
        source = Path(config_path)
        if not source.is_file():
            raise ConfigError(f"Configuration file {source} does not exist")
        try:
            payload = read_yaml(source)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{source}: invalid YAML ({exc})") from exc
        settings = replace(settings, **_validate_yaml(payload, source))

    return replace(settings, **_environment_overrides(env))
