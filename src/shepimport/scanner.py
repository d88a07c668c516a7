"""
Source tree scanner.

Enumerates a project directory and groups candidate files by role:
component sources, route handlers and the schema file. The scanner only
enumerates; which subtrees it enumerates is chosen from a framework tag
detected beforehand with `detect_framework`.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .core.errors import ScanError

logger = logging.getLogger("shepimport.scanner")

SOURCE_EXTENSIONS = (".tsx", ".jsx", ".ts", ".js")
ROUTE_EXTENSIONS = (".ts", ".js")

IGNORED_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        "out",
        "coverage",
        "__pycache__",
        "vendor",
        "storybook-static",
    }
)

DENIED_NAME_FRAGMENTS = (".test.", ".spec.", ".config.", ".stories.")

SCHEMA_SEARCH_PATHS = (
    "prisma/schema.prisma",
    "src/prisma/schema.prisma",
    "schema.prisma",
    "db/schema.prisma",
    "database/schema.prisma",
)
SCHEMA_SEARCH_DEPTH = 4


class Framework(str, Enum):
    NEXTJS_APP = "nextjs-app"
    NEXTJS_PAGES = "nextjs-pages"
    VITE = "vite"
    REACT = "react"
    UNKNOWN = "unknown"


# Subtrees enumerated per framework; missing ones are skipped and an empty
# selection falls back to the whole tree.
SCAN_STRATEGIES: dict[Framework, tuple[str, ...]] = {
    Framework.NEXTJS_APP: ("app", "src/app", "pages", "src/pages", "components", "src/components"),
    Framework.NEXTJS_PAGES: ("pages", "src/pages", "components", "src/components"),
    Framework.VITE: ("src",),
    Framework.REACT: ("src",),
    Framework.UNKNOWN: (".",),
}


@dataclass(frozen=True)
class FrameworkInfo:
    framework: Framework = Framework.UNKNOWN
    has_prisma: bool = False
    has_typescript: bool = False


@dataclass
class ScanResult:
    """Candidate files of one project, each list in sorted path order."""

    root: Path
    components: list[Path] = field(default_factory=list)
    routes: list[Path] = field(default_factory=list)
    schema: Path | None = None

    def relative(self, path: Path) -> str:
        """Project-relative POSIX path."""
        return path.relative_to(self.root).as_posix()

    @property
    def file_count(self) -> int:
        return len(self.components) + len(self.routes) + (1 if self.schema else 0)


# =============================================================================
# Classification
# =============================================================================


def is_denied_file(name: str) -> bool:
    """Test, config, story and declaration files are never candidates."""
    if name.endswith(".d.ts"):
        return True
    return any(fragment in name for fragment in DENIED_NAME_FRAGMENTS)


def is_route_file(rel_parts: tuple[str, ...]) -> bool:
    """
    Check whether a project-relative path is a route handler.

    Matches ``app/**/api/**/route.{ts,js}`` and ``pages/api/**.{ts,js}``.
    """
    if not rel_parts:
        return False
    name = rel_parts[-1]
    stem, _, ext = name.rpartition(".")
    if f".{ext}" not in ROUTE_EXTENSIONS:
        return False
    dirs = rel_parts[:-1]

    if "app" in dirs and stem == "route":
        app_index = dirs.index("app")
        if "api" in dirs[app_index + 1 :]:
            return True

    for i, part in enumerate(dirs[:-1]):
        if part == "pages" and dirs[i + 1] == "api":
            return True
    return False


def is_api_path(rel_parts: tuple[str, ...]) -> bool:
    """True for any file under an ``api`` directory of ``app/`` or ``pages/``."""
    dirs = rel_parts[:-1]
    for i, part in enumerate(dirs[:-1]):
        if part in ("app", "pages") and "api" in dirs[i + 1 :]:
            return True
    return False


def _is_ignored_dir(name: str, extra: frozenset[str]) -> bool:
    return name.startswith(".") or name in IGNORED_DIRS or name in extra


def _walk(base: Path, extra_ignore: frozenset[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(base):
        # Prune in place so os.walk never descends into ignored directories
        dirnames[:] = sorted(d for d in dirnames if not _is_ignored_dir(d, extra_ignore))
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


# =============================================================================
# Public API
# =============================================================================


def find_schema(root: Path, extra_ignore_dirs: Iterable[str] = ()) -> Path | None:
    """Locate the Prisma schema: well-known paths first, then a shallow search."""
    for rel in SCHEMA_SEARCH_PATHS:
        candidate = root / rel
        if candidate.is_file():
            return candidate

    extra = frozenset(extra_ignore_dirs)
    frontier = [root]
    for _ in range(SCHEMA_SEARCH_DEPTH):
        next_frontier: list[Path] = []
        for directory in frontier:
            try:
                entries = sorted(directory.iterdir())
            except OSError as e:
                logger.debug("Cannot list %s: %s", directory, e)
                continue
            for entry in entries:
                if entry.is_file() and entry.suffix == ".prisma":
                    return entry
                if entry.is_dir() and not _is_ignored_dir(entry.name, extra):
                    next_frontier.append(entry)
        frontier = next_frontier
    return None


def detect_framework(root: Path) -> FrameworkInfo:
    """
    Detect the project's framework from ``package.json``.

    Dependencies and devDependencies are merged. A missing or unreadable
    ``package.json`` gives `Framework.UNKNOWN`.
    """
    deps: dict[str, str] = {}
    package_json = root / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
            deps = {**data.get("dependencies", {}), **data.get("devDependencies", {})}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, AttributeError) as e:
            logger.warning("Could not read %s: %s", package_json, e)

    if "next" in deps:
        has_app = (root / "app").is_dir() or (root / "src" / "app").is_dir()
        has_pages = (root / "pages").is_dir() or (root / "src" / "pages").is_dir()
        framework = Framework.NEXTJS_PAGES if has_pages and not has_app else Framework.NEXTJS_APP
    elif "vite" in deps:
        framework = Framework.VITE
    elif "react" in deps:
        framework = Framework.REACT
    else:
        framework = Framework.UNKNOWN

    has_prisma = "prisma" in deps or "@prisma/client" in deps or find_schema(root) is not None
    has_typescript = "typescript" in deps or (root / "tsconfig.json").is_file()

    info = FrameworkInfo(framework=framework, has_prisma=has_prisma, has_typescript=has_typescript)
    logger.debug("Detected %s", info)
    return info


def scan_project(
    root: Path,
    framework: Framework | None = None,
    extra_ignore_dirs: Iterable[str] = (),
) -> ScanResult:
    """
    Enumerate candidate files under `root`.

    Args:
        root: Project root directory
        framework: Selects which subtrees to enumerate; None scans everything
        extra_ignore_dirs: Directory names skipped in addition to the defaults

    Raises:
        ScanError: If `root` does not exist or is not a directory
    """
    if not root.exists():
        raise ScanError(f"Project root does not exist: {root}")
    if not root.is_dir():
        raise ScanError(f"Project root is not a directory: {root}")

    root = root.resolve()
    extra = frozenset(extra_ignore_dirs)
    strategy = SCAN_STRATEGIES[framework or Framework.UNKNOWN]

    bases = [root / rel for rel in strategy if (root / rel).is_dir()]
    if not bases:
        bases = [root]

    seen: set[Path] = set()
    components: list[Path] = []
    routes: list[Path] = []

    for base in bases:
        for path in _walk(base, extra):
            if path in seen:
                continue
            seen.add(path)
            if not path.name.endswith(SOURCE_EXTENSIONS) or is_denied_file(path.name):
                continue
            rel_parts = path.relative_to(root).parts
            if is_route_file(rel_parts):
                routes.append(path)
            elif "pages" in rel_parts[:-1] and is_api_path(rel_parts):
                # Pages-router API helpers are neither routes nor components
                continue
            else:
                components.append(path)

    # App-router API routes may sit outside the strategy's subtrees
    if framework is not None and root not in bases:
        for rel in ("app", "src/app", "pages", "src/pages"):
            base = root / rel
            if not base.is_dir() or base in bases:
                continue
            for path in _walk(base, extra):
                if path not in seen and is_route_file(path.relative_to(root).parts):
                    seen.add(path)
                    routes.append(path)

    result = ScanResult(
        root=root,
        components=sorted(components),
        routes=sorted(routes),
        schema=find_schema(root, extra),
    )
    logger.info(
        "Scanned %s: %d components, %d routes, schema=%s",
        root,
        len(result.components),
        len(result.routes),
        result.relative(result.schema) if result.schema else None,
    )
    return result
