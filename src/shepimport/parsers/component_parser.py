"""
React component parser.

Turns one component source file into a `Component` record. The file is
parsed with the JS/TS/JSX front end; the extractor then picks the main
exported component and walks its syntax tree for JSX, handlers, hooks,
imports, styles and HTTP calls.

A file that does not parse, or that exports nothing component-shaped,
yields no component plus a diagnostic. Parse errors never escape.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..core.errors import Diagnostic, ParseError, Severity
from ..core.ir import (
    ApiCall,
    Component,
    ComponentKind,
    EffectKind,
    EffectSpec,
    ExportKind,
    HandlerSpec,
    JSXElement,
    PropSpec,
    StateSpec,
    StyleSpec,
)
from ..core.strings import is_pascal_case, to_pascal_case
from ..scanner import is_api_path
from .js import Parser, ast, parse_module
from .translator import HandlerTranslator

logger = logging.getLogger("shepimport.parsers.component")

# Exports that are server-side hooks or route handlers, never components
SERVER_FUNCTION_NAMES = frozenset(
    {
        "GET",
        "POST",
        "PUT",
        "PATCH",
        "DELETE",
        "HEAD",
        "OPTIONS",
        "getServerSideProps",
        "getStaticProps",
        "getStaticPaths",
        "generateMetadata",
        "generateStaticParams",
        "middleware",
        "handler",
        "config",
        "metadata",
        "revalidate",
        "loader",
        "action",
    }
)

# Intrinsic tags kept in the element tree; PascalCase component tags are
# always kept. Everything else is pruned and its children hoisted.
SEMANTIC_TAGS = frozenset(
    {
        # Form controls
        "form",
        "input",
        "textarea",
        "select",
        "option",
        "button",
        "label",
        "fieldset",
        # Lists and tables
        "ul",
        "ol",
        "li",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        # Headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # Layout containers
        "div",
        "main",
        "section",
        "header",
        "footer",
        "nav",
        "aside",
        "article",
        # Links
        "a",
    }
)

STATE_HOOKS = ("useState", "useReducer")
EFFECT_HOOKS = {kind.value: kind for kind in EffectKind}
CLEANUP_HOOKS = (EffectKind.EFFECT, EffectKind.LAYOUT_EFFECT)

# Objects whose .get/.post/... methods are HTTP requests
HTTP_CLIENT_NAMES = frozenset({"axios", "api", "http", "client", "apiClient", "request", "$http", "ky"})
HTTP_CLIENT_VERBS = {"get": "GET", "post": "POST", "put": "PUT", "patch": "PATCH", "delete": "DELETE"}

# Wrappers whose first argument is the real function
FUNCTION_WRAPPERS = frozenset({"useCallback", "memo", "forwardRef", "observer"})

LOCAL_IMPORT_PREFIXES = (".", "@/", "~/", "src/")
PAGE_EXCLUDED_STEMS = frozenset({"_app", "_document", "_error"})
_BASE_URL_HINTS = ("url", "base", "host", "origin", "endpoint")
_ORIGIN_RE = re.compile(r"^https?://[^/]+")
_TYPE_ARGUMENT_RE = re.compile(r"<\s*([A-Za-z_$][\w$]*)\s*>")


@dataclass
class ComponentParseResult:
    """Outcome of parsing one file: an optional component plus diagnostics."""

    component: Component | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class _Candidate:
    name: str | None
    function: ast.Function
    export_kind: ExportKind
    declared_type: str | None = None


# =============================================================================
# Public API
# =============================================================================


def parse_component(text: str, file_path: Path, rel_path: str) -> ComponentParseResult:
    """
    Parse one component source file.

    Args:
        text: Source text
        file_path: Absolute path (for diagnostics)
        rel_path: Project-relative POSIX path (drives naming and page classification)
    """
    try:
        program = parse_module(text, file_path)
    except ParseError as e:
        logger.warning("Skipping %s: %s", rel_path, e.message)
        return ComponentParseResult(diagnostics=[Diagnostic.from_error(e, file_path)])

    extractor = ComponentExtractor(text, file_path, rel_path, program)
    component = extractor.extract()
    if component is None:
        logger.debug("No component in %s", rel_path)
        return ComponentParseResult(
            diagnostics=[Diagnostic(Severity.INFO, "No component export found", file_path)]
        )
    logger.debug(
        "Parsed %s from %s: %d elements, %d handlers, %d api calls",
        component.name,
        rel_path,
        len(component.elements),
        len(component.handlers),
        len(component.api_calls),
    )
    return ComponentParseResult(component=component)


def is_page_path(rel_path: str) -> bool:
    """
    Classify a project-relative path as a page.

    Pages are ``app/**/page.*``, anything under ``pages/`` except
    ``_app`` / ``_document`` / ``_error`` and ``api/``, and ``src/App.*``.
    """
    path = PurePosixPath(rel_path)
    dirs = path.parts[:-1]
    stem = path.name.split(".", 1)[0]

    if "app" in dirs and stem == "page":
        return True
    if "pages" in dirs:
        after = dirs[dirs.index("pages") + 1 :]
        return not (after[:1] == ("api",) or stem in PAGE_EXCLUDED_STEMS)
    return dirs == ("src",) and stem == "App"


def component_name_from_path(rel_path: str) -> str:
    """
    Derive a component name from a file path.

    ``page`` / ``index`` / ``layout`` files take the name of the nearest
    meaningful directory: ``app/tasks/[id]/page.tsx`` -> "Tasks",
    ``app/page.tsx`` -> "Home".
    """
    path = PurePosixPath(rel_path)
    stem = path.name.split(".", 1)[0]
    if stem not in ("page", "index", "layout"):
        return to_pascal_case(stem) or "Component"
    for directory in reversed(path.parts[:-1]):
        if directory.startswith(("(", "[", "@")):
            continue
        if directory in ("app", "pages", "src"):
            break
        return to_pascal_case(directory)
    return "Home"


# =============================================================================
# Extraction
# =============================================================================


class ComponentExtractor:
    """Extracts a `Component` from a parsed program."""

    def __init__(self, text: str, file_path: Path, rel_path: str, program: ast.Program):
        self.text = text
        self.file_path = file_path
        self.rel_path = rel_path
        self.program = program
        self.functions = self._collect_functions()
        self.translator = HandlerTranslator(self, {})
        self.classes = {
            node.name: node for node in ast.walk(program) if isinstance(node, ast.Class) and node.name
        }
        self.type_declarations = {
            node.name: node
            for node in ast.walk(program)
            if isinstance(node, ast.TypeDeclaration) and node.name
        }

    def source(self, node: ast.Node) -> str:
        return self.text[node.start : node.end]

    def extract(self) -> Component | None:
        candidate = self._select_candidate(self._collect_candidates())
        if candidate is None:
            return None

        function = candidate.function
        name = candidate.name
        if name is None or name in SERVER_FUNCTION_NAMES:
            name = component_name_from_path(self.rel_path)
        elif not is_pascal_case(name):
            name = to_pascal_case(name)

        jsx_nodes = [n for n in ast.walk(function) if isinstance(n, ast.JSXElement)]
        state = self._state(function)
        self.translator = HandlerTranslator(self, {s.setter: s.name for s in state if s.setter})
        return Component(
            name=name,
            file_path=self.rel_path,
            kind=ComponentKind.PAGE if is_page_path(self.rel_path) else ComponentKind.COMPONENT,
            export_kind=candidate.export_kind,
            props=self._props(candidate),
            state=state,
            elements=self._elements(function),
            handlers=self._handlers(jsx_nodes),
            effects=self._effects(function),
            api_calls=self._api_calls(function),
            imports=self._imports(),
            child_components=self._child_components(jsx_nodes),
            styles=self._styles(jsx_nodes),
        )

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _collect_functions(self) -> dict[str, ast.Function]:
        """Named functions anywhere in the file, first declaration wins."""
        functions: dict[str, ast.Function] = {}
        for node in ast.walk(self.program):
            if isinstance(node, ast.Function) and node.is_declaration and node.name:
                functions.setdefault(node.name, node)
            elif isinstance(node, ast.VariableDeclarator) and isinstance(node.target, ast.Identifier):
                function = function_of(node.init)
                if function is not None:
                    functions.setdefault(node.target.name, function)
            elif isinstance(node, ast.ClassMember) and node.is_method and isinstance(node.value, ast.Function):
                functions.setdefault(node.name, node.value)
        return functions

    def _declared_type(self, name: str) -> str | None:
        for node in ast.walk(self.program):
            if (
                isinstance(node, ast.VariableDeclarator)
                and isinstance(node.target, ast.Identifier)
                and node.target.name == name
            ):
                return node.type_text
        return None

    def _candidate_for(self, node: ast.Node | None, name: str | None, export_kind: ExportKind) -> _Candidate | None:
        """Resolve an exported value to a component candidate."""
        node = ast.unwrap(node)
        if isinstance(node, ast.Identifier):
            if node.name in self.functions:
                return _Candidate(
                    name or node.name, self.functions[node.name], export_kind, self._declared_type(node.name)
                )
            if node.name in self.classes:
                return self._candidate_for(self.classes[node.name], name or node.name, export_kind)
            return None
        if isinstance(node, ast.Class):
            render = next(
                (m.value for m in node.members if m.name == "render" and isinstance(m.value, ast.Function)),
                None,
            )
            if render is None:
                return None
            return _Candidate(name or node.name, render, export_kind)
        if isinstance(node, ast.Call):
            # export default memo(TaskList) / forwardRef((props, ref) => ...)
            callee = ast.dotted_name(node.callee) or ""
            if callee.rsplit(".", 1)[-1] in FUNCTION_WRAPPERS and node.arguments:
                return self._candidate_for(node.arguments[0], name, export_kind)
            return None
        function = function_of(node)
        if function is not None:
            return _Candidate(name or function.name, function, export_kind)
        return None

    def _collect_candidates(self) -> list[_Candidate]:
        candidates: list[_Candidate] = []

        def add(candidate: _Candidate | None) -> None:
            if candidate is not None:
                candidates.append(candidate)

        for statement in self.program.body:
            if not isinstance(statement, ast.Export):
                continue
            declaration = statement.declaration
            if statement.is_default:
                add(self._candidate_for(declaration, None, ExportKind.DEFAULT))
            elif isinstance(declaration, ast.Function):
                add(self._candidate_for(declaration, declaration.name, ExportKind.NAMED))
            elif isinstance(declaration, ast.Class):
                add(self._candidate_for(declaration, declaration.name, ExportKind.NAMED))
            elif isinstance(declaration, ast.VariableDeclaration):
                for declarator in declaration.declarations:
                    if isinstance(declarator.target, ast.Identifier):
                        candidate = self._candidate_for(
                            declarator.init, declarator.target.name, ExportKind.NAMED
                        )
                        if candidate is not None:
                            candidate.declared_type = declarator.type_text
                        add(candidate)
            elif statement.source is None:
                for specifier in statement.specifiers:
                    identifier = ast.Identifier(name=specifier.local)
                    if specifier.exported == "default":
                        add(self._candidate_for(identifier, specifier.local, ExportKind.DEFAULT))
                    else:
                        add(self._candidate_for(identifier, specifier.exported, ExportKind.NAMED))
        return candidates

    def _select_candidate(self, candidates: list[_Candidate]) -> _Candidate | None:
        """
        Pick the main component.

        Default exports beat named ones and PascalCase beats lowerCamelCase.
        A file whose only candidates are server functions gets a component
        named after the file, unless it lives under an API directory.
        """
        allowed = [
            c for c in candidates if c.name not in SERVER_FUNCTION_NAMES and self._is_component_shaped(c)
        ]
        if allowed:
            allowed.sort(
                key=lambda c: (c.export_kind != ExportKind.DEFAULT, c.name is not None and not is_pascal_case(c.name))
            )
            return allowed[0]

        denied = [c for c in candidates if c.name in SERVER_FUNCTION_NAMES]
        if denied and not is_api_path(tuple(self.rel_path.split("/"))) and returns_jsx(denied[0].function):
            return denied[0]
        return None

    @staticmethod
    def _is_component_shaped(candidate: _Candidate) -> bool:
        return candidate.name is None or is_pascal_case(candidate.name) or returns_jsx(candidate.function)

    # ------------------------------------------------------------------
    # Props
    # ------------------------------------------------------------------

    def _type_members(self, type_text: str | None) -> dict[str, ast.TypeMember]:
        if not type_text:
            return {}
        type_text = type_text.strip()
        if type_text.startswith("{"):
            try:
                members = Parser(type_text, self.file_path).parse_type_members()
            except ParseError as e:
                logger.debug("Unreadable prop type in %s: %s", self.rel_path, e.message)
                return {}
            return {m.name: m for m in members}
        match = _TYPE_ARGUMENT_RE.search(type_text)
        type_name = match.group(1) if match else type_text
        declaration = self.type_declarations.get(type_name)
        if declaration is None:
            return {}
        return {m.name: m for m in declaration.members}

    def _props(self, candidate: _Candidate) -> list[PropSpec]:
        function = candidate.function
        if not function.params:
            return []
        param = function.params[0]
        members = self._type_members(param.type_text or candidate.declared_type)

        if isinstance(param.target, ast.Object):
            props = []
            for prop in param.target.properties:
                if not isinstance(prop, ast.Property) or prop.key is None:
                    continue
                member = members.get(prop.key)
                has_default = isinstance(prop.value, ast.Assign)
                props.append(
                    PropSpec(
                        name=prop.key,
                        type=member.type_text if member else None,
                        required=not has_default and not (member is not None and member.optional),
                    )
                )
            return props
        return [PropSpec(name=m.name, type=m.type_text, required=not m.optional) for m in members.values()]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _state(self, function: ast.Function) -> list[StateSpec]:
        state = []
        for node in ast.walk(function):
            if not isinstance(node, ast.VariableDeclarator) or not isinstance(node.target, ast.Array):
                continue
            call = ast.unwrap(node.init)
            if not isinstance(call, ast.Call):
                continue
            hook = hook_name(call)
            if hook not in STATE_HOOKS:
                continue
            elements = node.target.elements
            if not elements or not isinstance(elements[0], ast.Identifier):
                continue
            setter = elements[1] if len(elements) > 1 else None

            initial_index = 0 if hook == "useState" else 1
            initial = None
            if len(call.arguments) > initial_index:
                initial = self.source(call.arguments[initial_index])

            state.append(
                StateSpec(
                    name=elements[0].name,
                    setter=setter.name if isinstance(setter, ast.Identifier) else None,
                    type=_strip_angle_brackets(call.type_arguments) or node.type_text,
                    initial=initial,
                    hook=hook,
                )
            )
        return state

    def _effects(self, function: ast.Function) -> list[EffectSpec]:
        effects = []
        for node in ast.walk(function):
            if not isinstance(node, ast.Call):
                continue
            kind = EFFECT_HOOKS.get(hook_name(node) or "")
            if kind is None or not node.arguments:
                continue
            callback = ast.unwrap(node.arguments[0])
            body = self.function_body(callback) if isinstance(callback, ast.Function) else self.source(callback)

            dependencies = None
            if len(node.arguments) > 1 and isinstance(node.arguments[1], ast.Array):
                dependencies = [self.source(e) for e in node.arguments[1].elements if e is not None]

            cleanup = None
            if kind in CLEANUP_HOOKS and isinstance(callback, ast.Function):
                cleanup = self._cleanup(callback)
            effects.append(EffectSpec(kind=kind, dependencies=dependencies, body=body, cleanup=cleanup))
        return effects

    def _cleanup(self, callback: ast.Function) -> str | None:
        if not isinstance(callback.body, ast.Block):
            return None
        for statement in callback.body.body:
            if isinstance(statement, ast.Return) and statement.argument is not None:
                return self.source(statement.argument)
        return None

    def function_body(self, function: ast.Function) -> str:
        """Body text of a function, without the outer braces and dedented."""
        body = function.body
        if body is None:
            return ""
        if isinstance(body, ast.Block):
            inner = self.text[body.start + 1 : body.end - 1]
            return textwrap.dedent(inner.strip("\n")).strip()
        return self.source(body)

    # ------------------------------------------------------------------
    # JSX
    # ------------------------------------------------------------------

    def _elements(self, function: ast.Function) -> list[JSXElement]:
        roots = [
            node
            for node in ast.walk(function, prune=is_jsx)
            if isinstance(node, (ast.JSXElement, ast.JSXFragment))
        ]
        elements: list[JSXElement] = []
        for root in roots:
            kept, _ = self._convert(root)
            elements.extend(kept)
        return elements

    def _convert(self, node: ast.Node) -> tuple[list[JSXElement], list[str]]:
        """
        Convert a JSX subtree.

        Returns the kept elements and, for pruned subtrees, the text that
        bubbles up to the nearest kept ancestor.
        """
        if isinstance(node, ast.JSXText):
            return [], [node.value]
        if isinstance(node, ast.JSXExpression):
            return self._convert_expression(node.expression)
        if isinstance(node, ast.JSXFragment):
            return self._convert_children(node.children)
        if isinstance(node, ast.JSXElement):
            children, texts = self._convert_children(node.children)
            if not is_semantic_tag(node.name):
                return children, texts
            element = JSXElement(
                tag=node.name,
                attributes=self._attributes(node),
                children=children,
                text=" ".join(texts) or None,
                line=node.line,
            )
            return [element], []
        return self._convert_expression(node)

    def _convert_children(self, nodes: list[ast.Node]) -> tuple[list[JSXElement], list[str]]:
        elements: list[JSXElement] = []
        texts: list[str] = []
        for child in nodes:
            kept, text = self._convert(child)
            elements.extend(kept)
            texts.extend(text)
        return elements, texts

    def _convert_expression(self, expression: ast.Node | None) -> tuple[list[JSXElement], list[str]]:
        inner = ast.unwrap(expression)
        if inner is None:
            return [], []
        literal = ast.string_value(inner)
        if literal is not None:
            return [], [literal] if literal.strip() else []
        if isinstance(inner, (ast.Identifier, ast.Member)):
            return [], ["{" + self.source(inner) + "}"]
        if isinstance(inner, ast.TemplateLiteral):
            return [], [self.source(inner)]

        # Conditionals, .map() callbacks and the like: keep any JSX inside
        elements: list[JSXElement] = []
        for node in ast.walk(inner, prune=is_jsx):
            if isinstance(node, (ast.JSXElement, ast.JSXFragment)):
                kept, _ = self._convert(node)
                elements.extend(kept)
        collection = mapped_collection(inner)
        if collection is not None:
            elements = [
                e if e.iterates else e.model_copy(update={"iterates": collection})
                for e in elements
            ]
        return elements, []

    def _attributes(self, node: ast.JSXElement) -> dict[str, str]:
        attributes: dict[str, str] = {}
        for attribute in node.attributes:
            if isinstance(attribute, ast.JSXAttribute):
                attributes[attribute.name] = self.attribute_value(attribute)
        return attributes

    def attribute_value(self, attribute: ast.JSXAttribute) -> str:
        value = attribute.value
        if value is None:
            return "true"
        if isinstance(value, ast.Literal):
            return value.value or ""
        if isinstance(value, ast.JSXExpression):
            return self.source(value.expression) if value.expression is not None else ""
        return self.source(value)

    def _handlers(self, jsx_nodes: list[ast.JSXElement]) -> list[HandlerSpec]:
        handlers = []
        for element in jsx_nodes:
            for attribute in element.attributes:
                if isinstance(attribute, ast.JSXAttribute) and is_event_attribute(attribute.name):
                    handler = self._handler(attribute, element.name)
                    if handler is not None:
                        handlers.append(handler)
        return handlers

    def _handler(self, attribute: ast.JSXAttribute, tag: str) -> HandlerSpec | None:
        value = attribute.value
        expression = value.expression if isinstance(value, ast.JSXExpression) else value
        expression = ast.unwrap(expression)
        if expression is None:
            return None

        if isinstance(expression, ast.Function):
            delegate = self.delegated_function(expression)
            if delegate is not None:
                return self._resolved_handler(attribute.name, tag, delegate, inline=True)
            translation = self.translator.translate(expression)
            return HandlerSpec(
                event=attribute.name,
                inline=True,
                body=self.function_body(expression),
                params=expression.param_names,
                element_tag=tag,
                statements=translation.statements,
                skipped=dict(translation.skipped),
            )

        if isinstance(expression, (ast.Identifier, ast.Member)):
            dotted = ast.dotted_name(expression) or self.source(expression)
            return self._resolved_handler(attribute.name, tag, dotted.rsplit(".", 1)[-1], inline=False)

        if isinstance(expression, ast.Literal):
            return HandlerSpec(event=attribute.name, body=expression.value or "", element_tag=tag)

        return HandlerSpec(event=attribute.name, body=self.source(expression), element_tag=tag)

    def _resolved_handler(self, event: str, tag: str, name: str, inline: bool) -> HandlerSpec:
        resolved = self.functions.get(name)
        if resolved is None:
            return HandlerSpec(event=event, function_name=name, inline=inline, element_tag=tag)
        translation = self.translator.translate(resolved)
        return HandlerSpec(
            event=event,
            function_name=name,
            inline=inline,
            body=self.function_body(resolved),
            params=resolved.param_names,
            element_tag=tag,
            statements=translation.statements,
            skipped=dict(translation.skipped),
        )

    def delegated_function(self, function: ast.Function) -> str | None:
        """
        Local function an inline handler only forwards to.

        ``() => handleDelete(task.id)`` and ``() => { handleDelete(task.id); }``
        both give ``handleDelete``.
        """
        body = function.body
        if isinstance(body, ast.Block):
            if len(body.body) != 1:
                return None
            statement = body.body[0]
            if isinstance(statement, ast.ExpressionStatement):
                body = statement.expression
            elif isinstance(statement, ast.Return):
                body = statement.argument
            else:
                return None
        call = ast.unwrap(body)
        if isinstance(call, ast.Call) and isinstance(call.callee, ast.Identifier):
            if call.callee.name in self.functions:
                return call.callee.name
        return None

    def _child_components(self, jsx_nodes: list[ast.JSXElement]) -> list[str]:
        names: list[str] = []
        for element in jsx_nodes:
            name = element.name
            if name[:1].isupper() and name not in ("Fragment", "React.Fragment") and name not in names:
                names.append(name)
        return names

    def _styles(self, jsx_nodes: list[ast.JSXElement]) -> list[StyleSpec]:
        styles = []
        for element in jsx_nodes:
            class_attribute = element.get_attribute("className") or element.get_attribute("class")
            style_attribute = element.get_attribute("style")
            if class_attribute is None and style_attribute is None:
                continue
            has_class_value = class_attribute is not None and class_attribute.value is not None
            styles.append(
                StyleSpec(
                    element_tag=element.name,
                    class_name=self.attribute_value(class_attribute) if class_attribute else None,
                    class_expression=has_class_value and _literal_attribute(class_attribute) is None,
                    inline_style=self.attribute_value(style_attribute) if style_attribute else None,
                    inline_properties=self._inline_properties(style_attribute) if style_attribute else {},
                )
            )
        return styles

    def _inline_properties(self, attribute: ast.JSXAttribute) -> dict[str, str]:
        """
        Entries of a ``style`` attribute, keys as written.

        ``style={{ fontSize: 14 }}`` gives ``{"fontSize": "14"}`` and
        ``style="color: red"`` gives ``{"color": "red"}``.
        """
        properties: dict[str, str] = {}
        text = _literal_attribute(attribute)
        if text is not None:
            for declaration in text.split(";"):
                key, separator, value = declaration.partition(":")
                if separator and key.strip() and value.strip():
                    properties[key.strip()] = value.strip()
            return properties

        value = attribute.value
        style = ast.unwrap(value.expression) if isinstance(value, ast.JSXExpression) else None
        if not isinstance(style, ast.Object):
            return properties
        for prop in style.properties:
            if isinstance(prop, ast.Property) and prop.key:
                literal = ast.string_value(prop.value)
                properties[prop.key] = literal if literal is not None else self.source(prop.value)
        return properties

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _imports(self) -> list[str]:
        names: list[str] = []
        for statement in self.program.body:
            if not isinstance(statement, ast.Import) or statement.type_only:
                continue
            if not statement.source.startswith(LOCAL_IMPORT_PREFIXES):
                continue
            for specifier in statement.specifiers:
                if specifier.type_only or specifier.imported == "*":
                    continue
                if is_pascal_case(specifier.local) and specifier.local not in names:
                    names.append(specifier.local)
        return names

    # ------------------------------------------------------------------
    # HTTP calls
    # ------------------------------------------------------------------

    def _api_calls(self, component_function: ast.Function) -> list[ApiCall]:
        collector = _ApiCallCollector(self, component_function)
        collector.visit(self.program)
        return collector.calls

    def api_call(self, call: ast.Call, handler: str | None) -> ApiCall | None:
        """Recognize ``fetch``, ``axios(...)`` and ``<client>.<verb>(...)`` calls."""
        callee = ast.dotted_name(call.callee)
        if callee is None or not call.arguments:
            return None
        first = call.arguments[0]

        if callee in ("fetch", "window.fetch"):
            url = self.url_text(first)
            method = "GET"
            if len(call.arguments) > 1 and isinstance(call.arguments[1], ast.Object):
                method = ast.string_value(call.arguments[1].get("method")) or "GET"
            return _make_call(method, url, handler)

        if callee == "axios" and isinstance(first, ast.Object):
            url_node = first.get("url")
            url = self.url_text(url_node) if url_node is not None else None
            return _make_call(ast.string_value(first.get("method")) or "GET", url, handler)

        owner, _, verb = callee.rpartition(".")
        if verb in HTTP_CLIENT_VERBS and owner.rsplit(".", 1)[-1] in HTTP_CLIENT_NAMES:
            return _make_call(HTTP_CLIENT_VERBS[verb], self.url_text(first), handler)
        return None

    def url_text(self, node: ast.Node | None) -> str | None:
        """
        Render a URL expression as a path pattern.

        Interpolated values become ``:name`` segments and a leading base-URL
        variable or origin is dropped: ``${API_URL}/tasks/${task.id}`` ->
        ``/tasks/:id``.
        """
        node = ast.unwrap(node)
        if node is None:
            return None
        literal = ast.string_value(node)
        if literal is not None:
            return _strip_origin(literal)
        if isinstance(node, ast.TemplateLiteral):
            parts = []
            for index, quasi in enumerate(node.quasis):
                parts.append(quasi)
                if index < len(node.expressions):
                    expression = node.expressions[index]
                    if index == 0 and not quasi and _is_base_url(expression):
                        continue
                    parts.append(":" + _param_name(expression))
            return _strip_origin("".join(parts))
        if isinstance(node, ast.Binary) and node.operator == "+":
            pieces = _flatten_concatenation(node)
            rendered = []
            for index, piece in enumerate(pieces):
                value = ast.string_value(piece)
                if value is not None:
                    rendered.append(value)
                elif isinstance(piece, ast.TemplateLiteral):
                    rendered.append(self.url_text(piece) or "")
                elif not (index == 0 and _is_base_url(piece)):
                    rendered.append(":" + _param_name(piece))
            return _strip_origin("".join(rendered))
        return None


class _ApiCallCollector(ast.NodeVisitor):
    """
    Collects HTTP calls with the name of their nearest named enclosing function.

    The component function itself does not count as a handler: calls made
    directly in its body or in effect callbacks have no handler.
    """

    def __init__(self, extractor: ComponentExtractor, component_function: ast.Function):
        self.extractor = extractor
        self.component_function = component_function
        self.calls: list[ApiCall] = []
        self._names: list[str | None] = [None]

    def _visit_named(self, node: ast.Node, name: str | None) -> None:
        self._names.append(name)
        self.generic_visit(node)
        self._names.pop()

    def visit_function(self, node: ast.Function) -> None:
        if node is self.component_function:
            self._visit_named(node, None)
        elif node.is_declaration and node.name:
            self._visit_named(node, node.name)
        else:
            self.generic_visit(node)

    def visit_variable_declarator(self, node: ast.VariableDeclarator) -> None:
        function = function_of(node.init)
        if isinstance(node.target, ast.Identifier) and function is not None and function is not self.component_function:
            self._visit_named(node, node.target.name)
        else:
            self.generic_visit(node)

    def visit_class_member(self, node: ast.ClassMember) -> None:
        if node.is_method and node.value is not self.component_function:
            self._visit_named(node, node.name)
        else:
            self.generic_visit(node)

    def visit_property(self, node: ast.Property) -> None:
        if node.key and isinstance(ast.unwrap(node.value), ast.Function):
            self._visit_named(node, node.key)
        else:
            self.generic_visit(node)

    def visit_call(self, node: ast.Call) -> None:
        call = self.extractor.api_call(node, self._names[-1])
        if call is not None:
            self.calls.append(call)
        self.generic_visit(node)


# =============================================================================
# Helpers
# =============================================================================


def is_jsx(node: ast.Node) -> bool:
    return isinstance(node, (ast.JSXElement, ast.JSXFragment))


def returns_jsx(function: ast.Function) -> bool:
    return any(is_jsx(node) for node in ast.walk(function))


def is_semantic_tag(tag: str) -> bool:
    return tag in SEMANTIC_TAGS or tag[:1].isupper()


def is_event_attribute(name: str) -> bool:
    return len(name) > 2 and name.startswith("on") and name[2].isupper()


def hook_name(call: ast.Call) -> str | None:
    """``useState`` for both ``useState(...)`` and ``React.useState(...)``."""
    callee = ast.dotted_name(call.callee)
    return callee.rsplit(".", 1)[-1] if callee else None


def function_of(node: ast.Node | None) -> ast.Function | None:
    """The function a value evaluates to, looking through ``useCallback`` / ``memo`` wrappers."""
    node = ast.unwrap(node)
    if isinstance(node, ast.Function):
        return node
    if isinstance(node, ast.Call) and node.arguments:
        callee = ast.dotted_name(node.callee) or ""
        if callee.rsplit(".", 1)[-1] in FUNCTION_WRAPPERS:
            return function_of(node.arguments[0])
    return None


def mapped_collection(node: ast.Node) -> str | None:
    """
    Receiver of a ``.map()`` call, looking through chained array methods.

    ``tasks.filter(t => t.done).map(...)`` -> "tasks"
    """
    if not isinstance(node, ast.Call):
        return None
    callee = ast.unwrap(node.callee)
    if not isinstance(callee, ast.Member) or callee.property != "map":
        return None
    receiver = ast.unwrap(callee.object)
    while isinstance(receiver, ast.Call):
        inner = ast.unwrap(receiver.callee)
        if not isinstance(inner, ast.Member):
            return None
        receiver = ast.unwrap(inner.object)
    return ast.dotted_name(receiver)


def _make_call(method: str, url: str | None, handler: str | None) -> ApiCall | None:
    if not url:
        return None
    return ApiCall(method=method.upper(), url=url, handler=handler)


def _literal_attribute(attribute: ast.JSXAttribute) -> str | None:
    """Text of a string-valued attribute: ``a="x"`` or ``a={"x"}``."""
    value = attribute.value
    if isinstance(value, ast.JSXExpression):
        value = value.expression
    return ast.string_value(value)


def _strip_angle_brackets(text: str | None) -> str | None:
    if not text:
        return None
    return text.strip()[1:-1].strip() or None


def _strip_origin(url: str) -> str:
    stripped = _ORIGIN_RE.sub("", url)
    return stripped or "/"


def _is_base_url(node: ast.Node) -> bool:
    name = ast.dotted_name(node)
    if name is None:
        return False
    lowered = name.lower()
    return any(hint in lowered for hint in _BASE_URL_HINTS)


def _param_name(node: ast.Node) -> str:
    node = ast.unwrap(node)
    if isinstance(node, ast.Call) and node.arguments:
        # encodeURIComponent(id)
        return _param_name(node.arguments[0])
    name = ast.dotted_name(node)
    if name:
        return name.rsplit(".", 1)[-1]
    return "param"


def _flatten_concatenation(node: ast.Node) -> list[ast.Node]:
    if isinstance(node, ast.Binary) and node.operator == "+":
        return _flatten_concatenation(node.left) + _flatten_concatenation(node.right)
    return [node]
