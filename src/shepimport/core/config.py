"""
Import configuration.

Loaded from ``shepimport.toml`` in the project root, or from the
``[tool.shepimport]`` table of ``pyproject.toml``. Every key is optional.

Example shepimport.toml:

    app_name = "TaskTracker"
    max_workers = 4
    route_base_path = "/api"

    [scan]
    extra_ignore_dirs = ["storybook-static"]

    [emit]
    backend = false

    [[consolidation.rules]]
    contains = ["invoice", "bill"]
    canonical = "Invoice"
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger("shepimport.config")

CONFIG_FILE_NAME = "shepimport.toml"


@dataclass(frozen=True)
class ConsolidationRule:
    """Fold any name containing one of `contains` onto `canonical`."""

    contains: tuple[str, ...]
    canonical: str

    def matches(self, name: str) -> bool:
        lower = name.lower()
        return any(fragment in lower for fragment in self.contains)


# Ordered: the first matching rule wins.
DEFAULT_CONSOLIDATION_RULES: tuple[ConsolidationRule, ...] = (
    ConsolidationRule(
        contains=(
            "task",
            "todo",
            "item",
            "simple",
            "tags",
            "subtask",
            "checked",
            "empty",
            "active",
            "swipe",
            "delete",
        ),
        canonical="Task",
    ),
    ConsolidationRule(contains=("user", "profile", "account"), canonical="User"),
    ConsolidationRule(contains=("post", "article", "blog"), canonical="Post"),
    ConsolidationRule(contains=("comment", "reply", "feedback"), canonical="Comment"),
    ConsolidationRule(contains=("home", "dashboard"), canonical="Task"),
)


@dataclass
class ScanConfig:
    """Directory enumeration settings."""

    extra_ignore_dirs: list[str] = field(default_factory=list)


@dataclass
class EmitConfig:
    """Output settings."""

    backend: bool = True  # Also emit the .shepthon file


@dataclass
class ImportConfig:
    """Settings for one import run."""

    app_name: str | None = None
    max_workers: int = field(default_factory=lambda: min(8, os.cpu_count() or 1))
    route_base_path: str = "/api"
    consolidation_rules: tuple[ConsolidationRule, ...] = DEFAULT_CONSOLIDATION_RULES
    scan: ScanConfig = field(default_factory=ScanConfig)
    emit: EmitConfig = field(default_factory=EmitConfig)


def _parse_rules(raw_rules: list[dict]) -> tuple[ConsolidationRule, ...]:
    rules = []
    for raw in raw_rules:
        canonical = raw.get("canonical")
        contains = raw.get("contains", [])
        if not canonical or not contains:
            logger.warning("Ignoring incomplete consolidation rule: %r", raw)
            continue
        rules.append(
            ConsolidationRule(
                contains=tuple(str(c).lower() for c in contains),
                canonical=str(canonical),
            )
        )
    return tuple(rules)


def config_from_dict(data: dict) -> ImportConfig:
    """Build an `ImportConfig` from a parsed TOML table."""
    scan_data = data.get("scan", {})
    emit_data = data.get("emit", {})
    consolidation_data = data.get("consolidation", {})

    config = ImportConfig(
        app_name=data.get("app_name"),
        route_base_path=data.get("route_base_path", "/api"),
        scan=ScanConfig(extra_ignore_dirs=list(scan_data.get("extra_ignore_dirs", []))),
        emit=EmitConfig(backend=emit_data.get("backend", True)),
    )

    if "max_workers" in data:
        config.max_workers = max(1, int(data["max_workers"]))

    # A present rule list replaces the built-in table rather than extending it
    if "rules" in consolidation_data:
        config.consolidation_rules = _parse_rules(consolidation_data["rules"])

    return config


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e


def _build(data: dict, path: Path) -> ImportConfig:
    try:
        return config_from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_config(root: Path) -> ImportConfig:
    """
    Load configuration for the project at `root`.

    ``shepimport.toml`` wins over ``pyproject.toml``; with neither present,
    defaults are returned.

    Raises:
        ConfigError: If the file cannot be read as TOML or holds a value of the wrong type
    """
    config_path = root / CONFIG_FILE_NAME
    if config_path.is_file():
        logger.debug("Loading config from %s", config_path)
        return _build(_read_toml(config_path), config_path)

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        tool_data = _read_toml(pyproject).get("tool", {}).get("shepimport")
        if tool_data is not None:
            logger.debug("Loading config from %s [tool.shepimport]", pyproject)
            return _build(tool_data, pyproject)

    return ImportConfig()
