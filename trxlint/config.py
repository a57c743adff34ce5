"""Runtime configuration for trxlint - centralized configuration management.

Config priority (highest to lowest):
    1. Environment variables (TRXLINT_<SECTION>_<KEY>, TRXLINT_EXTENDS)
    2. An explicit config file (``--config``), or else ``.trxlint.json``
       and ``[tool.trxlint]`` in ``pyproject.toml`` (JSON wins over TOML)
    3. Built-in defaults

Example ``pyproject.toml``::

    [tool.trxlint]
    extends = ["recommended"]

    [tool.trxlint.rules]
    "objection/require-trx-forwarding" = "warn"

    [tool.trxlint.files]
    exclude = ["node_modules/", "migrations/"]
"""

import copy
import json
import os
import tomllib
from pathlib import Path
from typing import Any

from trxlint.exceptions import ConfigError
from trxlint.utils.constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    ENV_PREFIX,
    JS_EXTENSIONS,
    JSON_CONFIG_FILE,
    PYPROJECT_FILE,
    PYPROJECT_TOOL_KEY,
    TS_EXTENSIONS,
    TSX_EXTENSIONS,
)
from trxlint.utils.logging import logger

RULE_LEVELS = ("off", "warn", "error")

# ESLint-style numeric levels
_NUMERIC_LEVELS = {0: "off", 1: "warn", 2: "error"}

DEFAULTS = {
    "extends": ["recommended"],
    "rules": {},
    "files": {
        "extensions": list(JS_EXTENSIONS + TS_EXTENSIONS + TSX_EXTENSIONS),
        "exclude": list(DEFAULT_EXCLUDE_PATTERNS),
    },
    "report": {
        "max_rows": 50,
    },
}

_MERGED_SECTIONS = ("files", "report")


def normalize_level(value: Any, source: str = "config") -> str:
    """Normalize a rule level (string, int, or ESLint-style ``[level, ...]``)."""
    if isinstance(value, list) and value:
        value = value[0]
    if isinstance(value, int) and not isinstance(value, bool) and value in _NUMERIC_LEVELS:
        return _NUMERIC_LEVELS[value]
    if isinstance(value, str) and value.lower() in RULE_LEVELS:
        return value.lower()
    if isinstance(value, str) and value.lower() == "warning":
        return "warn"
    raise ConfigError(
        f"Invalid rule level {value!r} in {source}; expected one of {', '.join(RULE_LEVELS)}",
        details={"source": source, "value": value},
    )


def _read_pyproject(path: Path) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}", details={"source": str(path)}) from e
    section = data.get("tool", {}).get(PYPROJECT_TOOL_KEY)
    return section if isinstance(section, dict) else None


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}", details={"source": str(path)}) from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object", details={"source": str(path)})
    return data


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a config file by extension (``.toml`` -> ``[tool.trxlint]``, else JSON)."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}", details={"source": str(path)})
    if path.suffix == ".toml":
        return _read_pyproject(path) or {}
    return _read_json(path)


def _merge(cfg: dict[str, Any], user: dict[str, Any], source: str) -> None:
    if "extends" in user:
        extends = user["extends"]
        if isinstance(extends, str):
            extends = [extends]
        if not isinstance(extends, list):
            raise ConfigError(f"'extends' in {source} must be a string or list", details={"source": source})
        cfg["extends"] = list(extends)

    rules = user.get("rules", {})
    if not isinstance(rules, dict):
        raise ConfigError(f"'rules' in {source} must be a table/object", details={"source": source})
    for name, level in rules.items():
        cfg["rules"][name] = normalize_level(level, source)

    for section in _MERGED_SECTIONS:
        if section in user and isinstance(user[section], dict):
            for key, value in user[section].items():
                if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                    cfg[section][key] = value
                else:
                    logger.warning(
                        "Ignoring {section}.{key} from {source}: unknown key or wrong type",
                        section=section,
                        key=key,
                        source=source,
                    )


def _apply_env(cfg: dict[str, Any]) -> None:
    extends = os.environ.get(f"{ENV_PREFIX}EXTENDS")
    if extends is not None:
        cfg["extends"] = [v.strip() for v in extends.split(",") if v.strip()]

    for section in _MERGED_SECTIONS:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]
            default_value = cfg[section][key]
            try:
                if isinstance(default_value, int):
                    cfg[section][key] = int(value)
                elif isinstance(default_value, list):
                    cfg[section][key] = [v.strip() for v in value.split(",") if v.strip()]
                else:
                    cfg[section][key] = value
            except ValueError:
                logger.warning("Invalid value for {var}: {value}", var=env_var, value=value)


def load_config(root: str | Path = ".", config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration for a project root.

    Args:
        root: Directory searched for ``pyproject.toml`` and ``.trxlint.json``
        config_path: Explicit config file; disables the directory search

    Returns:
        Configuration dictionary with merged values

    Raises:
        ConfigError: On unreadable files or invalid rule levels
    """
    cfg = copy.deepcopy(DEFAULTS)
    root = Path(root)

    if config_path is not None:
        _merge(cfg, read_config_file(Path(config_path)), str(config_path))
    else:
        pyproject = root / PYPROJECT_FILE
        if pyproject.exists():
            section = _read_pyproject(pyproject)
            if section:
                _merge(cfg, section, str(pyproject))
                logger.debug("Loaded [tool.{key}] from {path}", key=PYPROJECT_TOOL_KEY, path=pyproject)

        json_config = root / JSON_CONFIG_FILE
        if json_config.exists():
            _merge(cfg, _read_json(json_config), str(json_config))
            logger.debug("Loaded config from {path}", path=json_config)

    _apply_env(cfg)
    return cfg


def get_preset(name: str) -> dict[str, str]:
    """Rule levels of a bundled preset.

    ``recommended`` enables every registered rule whose metadata declares a
    recommended level.
    """
    from trxlint.rules.orchestrator import discover_rules

    if name in ("recommended", "trxlint:recommended"):
        return {
            info.name: info.metadata.recommended
            for info in discover_rules()
            if info.metadata.recommended
        }
    if name in ("all", "trxlint:all"):
        return {info.name: "error" for info in discover_rules()}
    raise ConfigError(f"Unknown preset: {name}", details={"preset": name})


def resolve_rule_levels(cfg: dict[str, Any]) -> dict[str, str]:
    """Effective level per rule: presets in ``extends`` order, then ``rules``."""
    levels: dict[str, str] = {}
    for preset in cfg.get("extends", []):
        levels.update(get_preset(preset))
    levels.update(cfg.get("rules", {}))
    return levels
