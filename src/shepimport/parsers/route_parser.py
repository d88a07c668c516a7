"""
API route parser.

Reconstructs `Route` records from Next.js route handler files:

- App router: ``app/**/api/**/route.ts`` exporting ``GET`` / ``POST`` / ...
  functions, one route per exported method.
- Pages router: ``pages/api/**.ts`` with a default-exported handler; one
  route per ``req.method === 'X'`` comparison or ``case 'X':`` label, or a
  single ``GET`` when the handler never looks at the method.

Each route carries the path rebuilt from the file location, the request
body fields destructured from ``await request.json()`` / ``req.body``, and
the persistence call it makes (``prisma.task.create(...)`` or
``Task.create(...)``), if any.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..core.errors import Diagnostic, ParseError
from ..core.ir import HTTP_METHODS, Route
from .component_parser import function_of
from .js import ast, parse_module

logger = logging.getLogger("shepimport.parsers.routes")

PERSISTENCE_OPERATIONS = frozenset(
    {
        "findMany",
        "findUnique",
        "findFirst",
        "create",
        "createMany",
        "update",
        "updateMany",
        "delete",
        "deleteMany",
        "upsert",
    }
)
# Model-class style (``Task.findById(...)``) adds these
MODEL_OPERATIONS = PERSISTENCE_OPERATIONS | {
    "find",
    "findOne",
    "findById",
    "findByIdAndUpdate",
    "findByIdAndDelete",
    "insertMany",
    "save",
}
PERSISTENCE_CLIENTS = ("prisma", "db")

_EXPORTED_METHOD_RE = re.compile(
    r"export\s+(?:async\s+)?(?:function\s+|const\s+|let\s+)(" + "|".join(HTTP_METHODS) + r")\b"
)


@dataclass
class RouteParseResult:
    routes: list[Route] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


# =============================================================================
# Paths
# =============================================================================


def convert_segment(segment: str) -> str:
    """
    Convert one file-system route segment to path-pattern syntax.

    Examples:
        >>> convert_segment("[id]")
        ':id'
        >>> convert_segment("[...slug]")
        ':slug+'
        >>> convert_segment("[[...slug]]")
        ':slug*'
    """
    if segment.startswith("[[...") and segment.endswith("]]"):
        return ":" + segment[5:-2] + "*"
    if segment.startswith("[...") and segment.endswith("]"):
        return ":" + segment[4:-1] + "+"
    if segment.startswith("[") and segment.endswith("]"):
        return ":" + segment[1:-1]
    return segment


def _api_segments(rel_path: str) -> tuple[list[str], bool] | None:
    """Path segments after ``api/`` and whether the file is pages-router."""
    path = PurePosixPath(rel_path)
    parts = path.parts
    dirs = parts[:-1]
    stem = path.name.split(".", 1)[0]

    for index, part in enumerate(dirs[:-1]):
        if part == "pages" and dirs[index + 1] == "api":
            segments = list(dirs[index + 2 :])
            if stem != "index":
                segments.append(stem)
            return segments, True

    if "app" in dirs and stem == "route":
        after_app = list(dirs[dirs.index("app") + 1 :])
        if "api" in after_app:
            return after_app[after_app.index("api") + 1 :], False
    return None


def route_path(rel_path: str, base_path: str = "/api") -> str:
    """
    Rebuild the URL path of a route file.

    Examples:
        >>> route_path("app/api/tasks/[id]/route.ts")
        '/api/tasks/:id'
        >>> route_path("pages/api/users/index.ts")
        '/api/users'
    """
    located = _api_segments(rel_path)
    segments = located[0] if located else []
    # Route groups like (admin) are not part of the URL
    converted = [convert_segment(s) for s in segments if not (s.startswith("(") and s.endswith(")"))]
    base = base_path.rstrip("/")
    path = "/".join([base, *converted]) if converted else base
    return path or "/"


def route_params(path: str) -> list[str]:
    """Names of the dynamic segments of a path pattern."""
    return [segment[1:].rstrip("+*") for segment in path.split("/") if segment.startswith(":")]


def is_pages_router(rel_path: str) -> bool:
    located = _api_segments(rel_path)
    return bool(located and located[1])


# =============================================================================
# Handler analysis
# =============================================================================


@dataclass
class HandlerInfo:
    body_fields: list[str] = field(default_factory=list)
    persistence_model: str | None = None
    persistence_operation: str | None = None
    status_code: int | None = None


def _is_body_source(node: ast.Node | None) -> bool:
    """``await request.json()`` or ``req.body``."""
    node = ast.unwrap(node)
    if isinstance(node, ast.Call) and isinstance(node.callee, ast.Member):
        return node.callee.property == "json" and not node.arguments
    name = ast.dotted_name(node)
    return name is not None and name.endswith(".body") and name.count(".") == 1


def _pattern_fields(pattern: ast.Object) -> list[str]:
    fields = []
    for prop in pattern.properties:
        if isinstance(prop, ast.Property) and prop.key is not None:
            fields.append(prop.key)
    return fields


def _persistence_call(call: ast.Call) -> tuple[str, str] | None:
    name = ast.dotted_name(call.callee)
    if name is None:
        return None
    parts = name.split(".")
    operation = parts[-1]
    if len(parts) >= 3 and operation in PERSISTENCE_OPERATIONS:
        client = parts[-3].lower()
        if any(c in client for c in PERSISTENCE_CLIENTS):
            return parts[-2], operation
    if len(parts) == 2 and parts[0][:1].isupper() and operation in MODEL_OPERATIONS:
        return parts[0], operation
    return None


def _status_code(node: ast.Object) -> int | None:
    value = node.get("status")
    if isinstance(value, ast.Literal) and value.literal_kind == "number" and value.value:
        try:
            return int(value.value)
        except ValueError:
            return None
    return None


def analyze_handler(nodes: list[ast.Node]) -> HandlerInfo:
    """Collect body fields, the persistence call and the status code under `nodes`."""
    info = HandlerInfo()
    descendants = [n for root in nodes for n in ast.walk(root)]

    body_variables = {
        node.target.name
        for node in descendants
        if isinstance(node, ast.VariableDeclarator)
        and isinstance(node.target, ast.Identifier)
        and _is_body_source(node.init)
    }

    for node in descendants:
        if isinstance(node, ast.VariableDeclarator) and isinstance(node.target, ast.Object):
            init = ast.unwrap(node.init)
            direct = _is_body_source(init)
            two_step = isinstance(init, ast.Identifier) and init.name in body_variables
            if direct or two_step:
                for name in _pattern_fields(node.target):
                    if name not in info.body_fields:
                        info.body_fields.append(name)
        elif isinstance(node, ast.Call):
            persistence = _persistence_call(node)
            if persistence is not None:
                info.persistence_model, info.persistence_operation = persistence
        elif isinstance(node, ast.Object):
            status = _status_code(node)
            if status is not None:
                info.status_code = status
    return info


# =============================================================================
# App router
# =============================================================================


def _app_router_handlers(program: ast.Program) -> list[tuple[str, ast.Function]]:
    """Exported HTTP method functions in declaration order."""
    local_functions: dict[str, ast.Function] = {}
    for statement in program.body:
        declaration = statement.declaration if isinstance(statement, ast.Export) else statement
        if isinstance(declaration, ast.Function) and declaration.name:
            local_functions[declaration.name] = declaration
        elif isinstance(declaration, ast.VariableDeclaration):
            for declarator in declaration.declarations:
                function = function_of(declarator.init)
                if isinstance(declarator.target, ast.Identifier) and function is not None:
                    local_functions[declarator.target.name] = function

    handlers: list[tuple[str, ast.Function]] = []
    for statement in program.body:
        if not isinstance(statement, ast.Export) or statement.is_default:
            continue
        declaration = statement.declaration
        if isinstance(declaration, ast.Function) and declaration.name in HTTP_METHODS:
            handlers.append((declaration.name, declaration))
        elif isinstance(declaration, ast.VariableDeclaration):
            for declarator in declaration.declarations:
                if isinstance(declarator.target, ast.Identifier) and declarator.target.name in HTTP_METHODS:
                    function = function_of(declarator.init)
                    if function is not None:
                        handlers.append((declarator.target.name, function))
        elif statement.source is None:
            # export { handler as GET, handler as POST }
            for specifier in statement.specifiers:
                if specifier.exported in HTTP_METHODS and specifier.local in local_functions:
                    handlers.append((specifier.exported, local_functions[specifier.local]))
    return handlers


# =============================================================================
# Pages router
# =============================================================================


def _default_handler(program: ast.Program) -> ast.Function | None:
    functions: dict[str, ast.Function] = {}
    for node in program.body:
        declaration = node.declaration if isinstance(node, ast.Export) and not node.is_default else node
        if isinstance(declaration, ast.Function) and declaration.name:
            functions[declaration.name] = declaration
        elif isinstance(declaration, ast.VariableDeclaration):
            for declarator in declaration.declarations:
                function = function_of(declarator.init)
                if isinstance(declarator.target, ast.Identifier) and function is not None:
                    functions[declarator.target.name] = function

    for node in program.body:
        if isinstance(node, ast.Export) and node.is_default:
            target = ast.unwrap(node.declaration)
            if isinstance(target, ast.Identifier):
                return functions.get(target.name)
            if isinstance(target, ast.Call) and target.arguments:
                # export default withAuth(handler)
                inner = ast.unwrap(target.arguments[0])
                if isinstance(inner, ast.Identifier):
                    return functions.get(inner.name)
                return function_of(inner)
            return function_of(target)
    return None


def _method_literal(left: ast.Node, right: ast.Node) -> str | None:
    for subject, other in ((left, right), (right, left)):
        name = ast.dotted_name(subject)
        value = ast.string_value(other)
        if name is not None and name.endswith(".method") and value is not None:
            method = value.upper()
            if method in HTTP_METHODS:
                return method
    return None


def _method_branches(handler: ast.Function) -> list[tuple[str, list[ast.Node]]]:
    """
    Find the method dispatch of a pages-router handler.

    Returns ``(method, nodes)`` pairs where `nodes` is the code that runs for
    that method, in source order; duplicates keep the first branch.
    """
    branches: list[tuple[str, list[ast.Node]]] = []
    seen: set[str] = set()

    def add(method: str, nodes: list[ast.Node]) -> None:
        if method not in seen:
            seen.add(method)
            branches.append((method, nodes))

    for node in ast.walk(handler):
        if isinstance(node, ast.If) and isinstance(node.test, ast.Binary) and node.test.operator in ("===", "=="):
            method = _method_literal(node.test.left, node.test.right)
            if method is not None:
                add(method, [node.consequent])
        elif isinstance(node, ast.Binary) and node.operator in ("===", "=="):
            method = _method_literal(node.left, node.right)
            if method is not None:
                add(method, [])
        elif isinstance(node, ast.Switch):
            discriminant = ast.dotted_name(node.discriminant)
            if discriminant is None or not discriminant.endswith(".method"):
                continue
            for case in node.cases:
                value = ast.string_value(case.test)
                if value is not None and value.upper() in HTTP_METHODS:
                    add(value.upper(), list(case.body))
    return branches


# =============================================================================
# Public API
# =============================================================================


def _fallback_routes(text: str, rel_path: str, base_path: str) -> list[Route]:
    """Routes for a file that did not parse: method names only."""
    path = route_path(rel_path, base_path)
    params = route_params(path)
    if is_pages_router(rel_path):
        methods = ["GET"]
    else:
        methods = list(dict.fromkeys(_EXPORTED_METHOD_RE.findall(text)))
    return [
        Route(method=method, path=path, file_path=rel_path, handler_name=method, params=params)
        for method in methods
    ]


def parse_routes(text: str, file_path: Path, rel_path: str, base_path: str = "/api") -> RouteParseResult:
    """
    Parse one route handler file.

    Args:
        text: Source text
        file_path: Absolute path (for diagnostics)
        rel_path: Project-relative POSIX path (drives the URL path)
        base_path: URL prefix that replaces the ``api`` directory
    """
    try:
        program = parse_module(text, file_path)
    except ParseError as e:
        logger.warning("Route file %s did not parse: %s", rel_path, e.message)
        routes = _fallback_routes(text, rel_path, base_path)
        return RouteParseResult(routes=routes, diagnostics=[Diagnostic.from_error(e, file_path)])

    path = route_path(rel_path, base_path)
    params = route_params(path)

    def make(method: str, handler_name: str | None, info: HandlerInfo) -> Route:
        return Route(
            method=method,
            path=path,
            file_path=rel_path,
            handler_name=handler_name,
            params=params,
            body_fields=info.body_fields,
            persistence_model=info.persistence_model,
            persistence_operation=info.persistence_operation,
            status_code=info.status_code,
        )

    routes: list[Route] = []
    if is_pages_router(rel_path):
        handler = _default_handler(program)
        if handler is None:
            # Unrecognized handler shape: keep the route, without hints
            routes.append(make("GET", None, HandlerInfo()))
        else:
            handler_name = handler.name or "handler"
            whole = analyze_handler([handler])
            branches = _method_branches(handler)
            if not branches:
                routes.append(make("GET", handler_name, whole))
            for method, nodes in branches:
                # A bare comparison has no branch of its own
                info = analyze_handler(nodes) if nodes else whole
                routes.append(make(method, handler_name, info))
    else:
        for method, function in _app_router_handlers(program):
            routes.append(make(method, method, analyze_handler([function])))

    logger.debug("Parsed %d routes from %s", len(routes), rel_path)
    return RouteParseResult(routes=routes)
