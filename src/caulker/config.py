from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from caulker.analysis.mutations import OperationNames
from caulker.exceptions import ConfigFailure

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "caulker.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _read_toml(path: Path) -> TomlTable:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigFailure(path, exc.strerror or str(exc)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFailure(path, str(exc)) from exc


def _load_toml(path: Path) -> TomlTable:
    # Implicit lookup: an absent or unreadable file means no configuration.
    if not path.exists():
        return {}
    try:
        return _read_toml(path)
    except ConfigFailure as exc:
        logger.warning("ignoring %s", exc)
        return {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    """Read ``config_path``, or ``caulker.toml`` under ``root`` (default: cwd).

    An explicit ``config_path`` must exist and parse; failures raise
    ``ConfigFailure``.
    """
    if config_path is not None:
        return _read_toml(config_path)
    base = root if root is not None else Path.cwd()
    return _load_toml(base / DEFAULT_CONFIG_NAME)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def checks_defaults(data: TomlTable) -> TomlTable:
    return _section(data, "checks")


def slices_defaults(data: TomlTable) -> TomlTable:
    return _section(data, "slices")


def analysis_defaults(data: TomlTable) -> TomlTable:
    return _section(data, "analysis")


def build_defaults(data: TomlTable) -> TomlTable:
    return _section(data, "build")


def _normalize_name_list(value: TomlValue) -> list[str]:
    """Names from a string or list of strings; commas split entries."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    return [
        part.strip()
        for item in value
        if isinstance(item, str)
        for part in item.split(",")
        if part.strip()
    ]


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(value, (bool, int)):
        return bool(value)
    return False


def disabled_check_names(section: TomlTable | None) -> list[str]:
    if not isinstance(section, dict):
        return []
    return _normalize_name_list(section.get("disable"))


def keep_going(section: TomlTable | None) -> bool:
    if not isinstance(section, dict):
        return False
    return _as_bool(section.get("keep_going"))


def build_tags(section: TomlTable | None) -> list[str]:
    if not isinstance(section, dict):
        return []
    return _normalize_name_list(section.get("tags"))


def operation_names(
    section: TomlTable | None,
    *,
    extra_shrink: list[str] | None = None,
    extra_grow: list[str] | None = None,
) -> OperationNames:
    """Build the shrink/grow name lists from a ``[slices]`` table.

    ``shrink`` and ``grow`` replace the defaults, ``extra_shrink`` and
    ``extra_grow`` append to whatever list is in effect. Order is kept.
    """
    defaults = OperationNames()
    if not isinstance(section, dict):
        section = {}
    shrink = list(defaults.shrink)
    grow = list(defaults.grow)
    if "shrink" in section:
        shrink = _normalize_name_list(section.get("shrink"))
    if "grow" in section:
        grow = _normalize_name_list(section.get("grow"))
    shrink.extend(_normalize_name_list(section.get("extra_shrink")))
    grow.extend(_normalize_name_list(section.get("extra_grow")))
    shrink.extend(extra_shrink or [])
    grow.extend(extra_grow or [])
    return OperationNames(shrink=tuple(shrink), grow=tuple(grow))
