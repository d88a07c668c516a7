"""
Import pipeline.

Scanner -> parsers (bounded worker pool) -> aggregator -> emitters, for one
project per run. Every run owns an `ImportContext`; cancellation is checked
between stages and before each file parse, and a cancelled run returns
nothing.

Usage:
    from shepimport.pipeline import run_import

    result = run_import(Path("~/code/todo-app").expanduser())
    for generated in result.files:
        print(generated.file_name)
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer import UserRefinement, aggregate, apply_refinement
from .core.config import ImportConfig, load_config
from .core.context import ImportContext
from .core.errors import Diagnostic, Severity
from .core.ir import AppModel, Component, GeneratedFile, Route, SchemaDocument
from .emitter import REPORT_FILE_NAME, emit, render_report
from .parsers import parse_component, parse_routes, parse_schema
from .scanner import FrameworkInfo, ScanResult, detect_framework, scan_project

logger = logging.getLogger("shepimport.pipeline")


@dataclass
class ParsedProject:
    """Every parse record of one project, in scan order."""

    framework: FrameworkInfo
    scan: ScanResult
    schema: SchemaDocument | None = None
    components: list[Component] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of a completed run."""

    model: AppModel
    files: list[GeneratedFile]
    report: GeneratedFile
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def all_files(self) -> list[GeneratedFile]:
        return [*self.files, self.report]


@dataclass
class _FileResult:
    component: Component | None = None
    routes: list[Route] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


# =============================================================================
# Stages
# =============================================================================


class ImportPipeline:
    """Runs the stages of one import."""

    def __init__(self, root: Path, config: ImportConfig | None = None, ctx: ImportContext | None = None):
        self.root = root
        if ctx is None:
            ctx = ImportContext(root=root, config=config or load_config(root))
        elif config is not None:
            ctx.config = config
        self.ctx = ctx

    @property
    def config(self) -> ImportConfig:
        return self.ctx.config

    def scan(self) -> tuple[FrameworkInfo, ScanResult]:
        self.ctx.check_cancelled("scan")
        framework = detect_framework(self.root)
        result = scan_project(
            self.root,
            framework=framework.framework,
            extra_ignore_dirs=self.config.scan.extra_ignore_dirs,
        )
        self.ctx.logger.info(
            "Framework %s: %d component files, %d route files",
            framework.framework.value,
            len(result.components),
            len(result.routes),
        )
        return framework, result

    def _parse_schema(self, scan: ScanResult) -> SchemaDocument | None:
        if scan.schema is None:
            return None
        try:
            text = read_source(scan.schema)
        except (OSError, UnicodeDecodeError) as e:
            self.ctx.warn(f"Could not read schema: {e}", scan.schema)
            return None
        return parse_schema(text)

    def _parse_file(self, scan: ScanResult, path: Path, is_route: bool) -> _FileResult:
        if self.ctx.cancelled:
            return _FileResult()
        rel_path = scan.relative(path)
        try:
            text = read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            return _FileResult(diagnostics=[Diagnostic(Severity.WARNING, f"Could not read file: {e}", path)])

        try:
            if is_route:
                parsed_routes = parse_routes(text, path, rel_path, self.config.route_base_path)
                return _FileResult(routes=parsed_routes.routes, diagnostics=parsed_routes.diagnostics)
            parsed = parse_component(text, path, rel_path)
        except RecursionError:
            self.ctx.logger.warning("Nesting too deep to parse %s", rel_path)
            message = "Could not parse file: nesting too deep"
            return _FileResult(diagnostics=[Diagnostic(Severity.WARNING, message, path)])
        except Exception as e:
            self.ctx.logger.warning("Parser failed on %s: %s", rel_path, e, exc_info=True)
            return _FileResult(diagnostics=[Diagnostic(Severity.WARNING, f"Could not parse file: {e}", path)])
        return _FileResult(component=parsed.component, diagnostics=parsed.diagnostics)

    def parse(self) -> ParsedProject:
        """Scan and parse every candidate file; results keep scan order."""
        framework, scan = self.scan()
        self.ctx.check_cancelled("parsing")
        project = ParsedProject(framework=framework, scan=scan, schema=self._parse_schema(scan))

        tasks = [(path, False) for path in scan.components] + [(path, True) for path in scan.routes]
        results: list[_FileResult | None] = [None] * len(tasks)

        with ThreadPoolExecutor(max_workers=max(1, self.config.max_workers)) as pool:
            futures: dict[Future[_FileResult], int] = {
                pool.submit(self._parse_file, scan, path, is_route): index
                for index, (path, is_route) in enumerate(tasks)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                if self.ctx.cancelled:
                    for pending in futures:
                        pending.cancel()
                    break

        self.ctx.check_cancelled("aggregation")

        for result in results:
            if result is None:
                continue
            self.ctx.add_diagnostics(result.diagnostics)
            if result.component is not None:
                project.components.append(result.component)
            project.routes.extend(result.routes)

        self.ctx.logger.info(
            "Parsed %d components and %d routes (%d diagnostics)",
            len(project.components),
            len(project.routes),
            len(self.ctx.diagnostics),
        )
        return project

    def analyze(self, refinement: UserRefinement | None = None) -> AppModel:
        """Parse and aggregate; apply `refinement` when given."""
        project = self.parse()
        model = aggregate(
            project.schema,
            project.components,
            project.routes,
            config=self.config,
            project_root=str(self.root),
        )
        if refinement is not None and not refinement.is_empty:
            model = apply_refinement(model, refinement)
        return model

    def run(self, refinement: UserRefinement | None = None) -> ImportResult:
        model = self.analyze(refinement)
        self.ctx.check_cancelled("emission")
        files = emit(model, backend=self.config.emit.backend)
        report = GeneratedFile(
            file_name=REPORT_FILE_NAME,
            content=render_report(model, files, self.ctx.warnings),
        )
        self.ctx.logger.info("Generated %s", ", ".join(f.file_name for f in [*files, report]))
        return ImportResult(model=model, files=files, report=report, diagnostics=list(self.ctx.diagnostics))


# =============================================================================
# Entry points
# =============================================================================


def analyze_project(
    root: Path,
    config: ImportConfig | None = None,
    refinement: UserRefinement | None = None,
    ctx: ImportContext | None = None,
) -> AppModel:
    """Build the `AppModel` for the project at `root` without emitting."""
    return ImportPipeline(root, config, ctx).analyze(refinement)


def run_import(
    root: Path,
    config: ImportConfig | None = None,
    refinement: UserRefinement | None = None,
    ctx: ImportContext | None = None,
) -> ImportResult:
    """
    Run a full import of the project at `root`.

    Args:
        root: Project root directory
        config: Settings; loaded from the project when omitted
        refinement: Optional user refinement applied before emission
        ctx: Run context; a fresh one is created when omitted

    Raises:
        ScanError: If `root` is not a readable directory
        ImportCancelled: If the context was cancelled during the run
    """
    return ImportPipeline(root, config, ctx).run(refinement)
