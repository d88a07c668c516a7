"""
Error types for shepimport scanning, parsing and generation.

Only `ScanError`, `ConfigError` and `ImportCancelled` ever reach a caller of the pipeline.
`ParseError` is raised inside the per-file parsers and converted into a
`Diagnostic` before the batch continues.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

SNIPPET_RADIUS = 2


@dataclass
class SourceLocation:
    """
    Where in a source file an error was found.

    `line` and `column` are 1-indexed. `snippet` holds the source lines from
    ``line - SNIPPET_RADIUS`` onwards, as produced by `snippet_around`.
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """``app/page.tsx:10:5``, followed by the marked snippet when there is one."""
        header = f"{self.file}:{self.line}:{self.column}"
        if not self.snippet:
            return header
        return "\n".join([header, *self.snippet_lines()])

    def snippet_lines(self) -> list[str]:
        first = max(1, self.line - SNIPPET_RADIUS)
        rendered: list[str] = []
        for number, text in enumerate((self.snippet or "").split("\n"), start=first):
            gutter = f"{number:>4} | "
            rendered.append(gutter + text)
            if number == self.line:
                rendered.append(" " * (len(gutter) + self.column - 1) + "^^^")
        return rendered


class ShepImportError(Exception):
    """Base exception for all shepimport errors."""

    def __init__(self, message: str, context: SourceLocation | None = None):
        self.message = message
        self.context = context
        text = message if context is None else f"{context.format()}\n{message}"
        super().__init__(text)


class ParseError(ShepImportError):
    """
    Raised when a source file cannot be parsed.

    Examples:
    - Unterminated string or template literal
    - Unbalanced braces or JSX tags
    - Unexpected tokens in an expression
    """


class ScanError(ShepImportError):
    """
    Raised when the project tree cannot be enumerated.

    Examples:
    - Project root does not exist
    - Project root is a file
    """


class ConfigError(ShepImportError):
    """
    Raised when a configuration file cannot be used.

    Examples:
    - ``shepimport.toml`` is not valid TOML
    - ``max_workers = "many"``
    """


class ImportCancelled(ShepImportError):
    """Raised when the caller cancels a run between two stages."""


def snippet_around(text: str, line: int, radius: int = SNIPPET_RADIUS) -> str:
    """Return the lines of `text` around 1-indexed `line`."""
    lines = text.split("\n")
    start = max(0, line - 1 - radius)
    return "\n".join(lines[start : line + radius])


def make_parse_error(
    message: str,
    file: Path,
    line: int,
    column: int,
    snippet: str | None = None,
) -> ParseError:
    """Build a `ParseError` located at `file`:`line`:`column`."""
    return ParseError(message, SourceLocation(file=file, line=line, column=column, snippet=snippet))


class Severity(str, Enum):
    """Severity of a recovered problem."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A recovered, non-fatal problem found while importing one file."""

    severity: Severity
    message: str
    file: Path | None = None
    line: int | None = None

    def format(self) -> str:
        location = ""
        if self.file is not None:
            location = f"{self.file}:{self.line}: " if self.line else f"{self.file}: "
        return f"[{self.severity.value}] {location}{self.message}"

    @classmethod
    def from_error(cls, error: ShepImportError, file: Path | None = None) -> Diagnostic:
        """Build a warning diagnostic from a caught parse error."""
        line = error.context.line if error.context else None
        source = error.context.file if error.context else file
        return cls(severity=Severity.WARNING, message=error.message, file=source, line=line)
