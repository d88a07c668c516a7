"""
shepimport command line.

Commands:
- scan:     Detect the framework and list candidate source files
- analyze:  Build the app model and print a summary (or JSON)
- generate: Write the .shep / .shepthon files and the import report
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ._version import get_version
from .analyzer import UserRefinement
from .core.config import load_config
from .core.errors import ShepImportError
from .core.ir import AppModel
from .core.logging_setup import setup_logging
from .pipeline import analyze_project, run_import
from .scanner import detect_framework, scan_project

app = typer.Typer(
    help="Import React / Next.js projects into ShepLang.",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"shepimport {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write JSONL logs to this file",
    ),
) -> None:
    """shepimport - reconstruct ShepLang apps from existing code."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING, log_file)


def _resolve_root(root: Path) -> Path:
    root = root.expanduser().resolve()
    if not root.is_dir():
        console.print(f"[red]Not a directory: {root}[/red]")
        raise typer.Exit(1)
    return root


def _summary_table(model: AppModel) -> Table:
    table = Table(title=model.app_name)
    table.add_column("Kind", style="dim")
    table.add_column("Name")
    table.add_column("Details")
    for entity in model.entities:
        table.add_row("entity", entity.name, f"{entity.source.value}, {len(entity.fields)} fields")
    for view in model.views:
        table.add_row("view", view.name, view.route or view.source_file)
    for action in model.actions:
        table.add_row("action", action.name, f"{action.source.value}, {len(action.api_calls)} calls")
    return table


# =============================================================================
# Commands
# =============================================================================


@app.command(name="scan")
def scan_command(
    root: Path = typer.Argument(..., help="Project root directory"),
) -> None:
    """List the files an import would parse."""
    root = _resolve_root(root)
    try:
        config = load_config(root)
        info = detect_framework(root)
        result = scan_project(root, info.framework, config.scan.extra_ignore_dirs)
    except ShepImportError as e:
        console.print(f"[red]Scan failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        f"Framework: [bold]{info.framework.value}[/bold]"
        f" (prisma: {'yes' if info.has_prisma else 'no'},"
        f" typescript: {'yes' if info.has_typescript else 'no'})"
    )

    table = Table(title="Source files")
    table.add_column("Kind", style="dim")
    table.add_column("Path")
    if result.schema is not None:
        table.add_row("schema", result.relative(result.schema))
    for path in result.components:
        table.add_row("component", result.relative(path))
    for path in result.routes:
        table.add_row("route", result.relative(path))
    console.print(table)
    console.print(f"{result.file_count} files")


@app.command(name="analyze")
def analyze_command(
    root: Path = typer.Argument(..., help="Project root directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the app model as JSON"),
) -> None:
    """Build the app model without writing files."""
    root = _resolve_root(root)
    try:
        model = analyze_project(root)
    except ShepImportError as e:
        console.print(f"[red]Analysis failed:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(model.model_dump_json(indent=2))
        return

    console.print(_summary_table(model))
    for todo in model.todos:
        console.print(f"[yellow]TODO[/yellow] {todo}")


@app.command(name="generate")
def generate_command(
    root: Path = typer.Argument(..., help="Project root directory"),
    output: Path = typer.Option(..., "--output", "-o", help="Directory for the generated files"),
    app_type: str | None = typer.Option(None, "--app-type", help="App name override, e.g. 'Task Manager'"),
    entities: str | None = typer.Option(
        None,
        "--entities",
        help="Comma-separated entity names replacing the inferred set",
    ),
    instructions: str | None = typer.Option(
        None,
        "--instructions",
        help="Free-text instructions recorded as a TODO",
    ),
    no_backend: bool = typer.Option(False, "--no-backend", help="Skip the .shepthon file"),
) -> None:
    """Import a project and write the generated ShepLang files."""
    root = _resolve_root(root)
    refinement = UserRefinement.from_text(app_type, entities, instructions)
    try:
        config = load_config(root)
        if no_backend:
            config.emit.backend = False
        with console.status("Importing..."):
            result = run_import(root, config, refinement)
    except ShepImportError as e:
        console.print(f"[red]Import failed:[/red] {e}")
        raise typer.Exit(1)

    output.mkdir(parents=True, exist_ok=True)
    for generated in result.all_files:
        path = output / generated.file_name
        path.write_text(generated.content, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {path}")

    if result.diagnostics:
        console.print(f"[yellow]{len(result.diagnostics)} diagnostics; see {result.report.file_name}[/yellow]")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``shepimport`` script."""
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main()
