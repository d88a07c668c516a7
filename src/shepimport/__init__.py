"""
shepimport - reconstruct ShepLang apps from existing React / Next.js projects.

Scans a project tree, parses its Prisma schema, components and API routes,
aggregates them into an `AppModel` and renders ``.shep`` / ``.shepthon``
source plus a Markdown import report.
"""

from __future__ import annotations

from ._version import __version__
from .analyzer import UserRefinement
from .core import ir
from .core.config import ImportConfig, load_config
from .core.errors import ConfigError, ImportCancelled, ParseError, ScanError, ShepImportError
from .pipeline import ImportResult, analyze_project, run_import

__all__ = [
    "__version__",
    "ConfigError",
    "ImportCancelled",
    "ImportConfig",
    "ImportResult",
    "ParseError",
    "ScanError",
    "ShepImportError",
    "UserRefinement",
    "analyze_project",
    "ir",
    "load_config",
    "run_import",
]
