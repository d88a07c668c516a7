"""
Handler body translation.

Walks the syntax tree of an event handler and rewrites each statement as a
ShepLang statement:

    await fetch("/api/tasks", {...})       ->  call POST "/api/tasks" with title
    setTasks([...tasks, task])             ->  add Task with task
    setTasks(tasks.filter(t => t.id !== id))  ->  remove Task where id == id
    router.push("/tasks")                  ->  show Tasks
    if (!title) return;                    ->  if not title: return

Statements with no ShepLang form are kept as raw code for the user to port.
Logging, ``preventDefault()`` and ``stopPropagation()`` calls are dropped
and counted so the output can say what was left out.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..core.ir import HandlerStatement, StatementKind
from ..core.strings import singularize, to_pascal_case
from .js import ast

if TYPE_CHECKING:
    from .component_parser import ComponentExtractor

logger = logging.getLogger("shepimport.parsers.translator")

NAVIGATION_CALLS = frozenset({"router.push", "router.replace", "navigate", "history.push", "redirect"})
CONSOLE_METHODS = frozenset({"log", "error", "warn", "info", "debug"})
SKIPPED_LABELS = {
    "console": "console call",
    "preventDefault": "preventDefault() call",
    "stopPropagation": "stopPropagation() call",
}

CONDITION_OPERATORS = {
    "===": "==",
    "==": "==",
    "!==": "!=",
    "!=": "!=",
    "&&": "and",
    "||": "or",
}


@dataclass
class Translation:
    """Translated statements plus what was dropped on the way."""

    statements: list[HandlerStatement] = field(default_factory=list)
    skipped: Counter[str] = field(default_factory=Counter)

    @property
    def raw_count(self) -> int:
        return sum(1 for statement in iter_statements(self.statements) if statement.kind == StatementKind.RAW)

    @property
    def confidence(self) -> float:
        """
        Share of translated statements that are not raw code.

        A body whose every statement was skipped counts as fully translated.
        """
        total = sum(1 for _ in iter_statements(self.statements))
        if total == 0:
            return 1.0
        return 1.0 - self.raw_count / total


def iter_statements(statements: list[HandlerStatement]) -> Iterator[HandlerStatement]:
    """Every statement, descending into ``if`` branches."""
    for statement in statements:
        yield statement
        yield from iter_statements(statement.then)
        yield from iter_statements(statement.otherwise)


def skipped_summary(skipped: dict[str, int]) -> str:
    """
    Examples:
        >>> skipped_summary({"console": 2, "preventDefault": 1})
        'Skipped: 2 console calls, 1 preventDefault() call (boilerplate)'
    """
    parts = []
    for kind, count in skipped.items():
        label = SKIPPED_LABELS.get(kind, kind)
        parts.append(f"{count} {label}{'s' if count > 1 else ''}")
    return f"Skipped: {', '.join(parts)} (boilerplate)"


def view_for_path(path: str) -> str:
    """
    View a navigation target lands on; dynamic segments are dropped.

    Examples:
        >>> view_for_path("/tasks/:id/edit")
        'TasksEdit'
        >>> view_for_path("/")
        'Home'
    """
    segments = [s for s in path.split("?", 1)[0].split("/") if s and not s.startswith(":")]
    return "".join(to_pascal_case(s) for s in segments) or "Home"


def entity_for_state(state: str) -> str:
    """``tasks`` -> ``Task``."""
    return to_pascal_case(singularize(state)) or to_pascal_case(state)


def object_fields(node: ast.Node | None) -> list[str]:
    """Field names sent in a request or appended to a list."""
    node = ast.unwrap(node)
    if isinstance(node, ast.Call) and ast.dotted_name(node.callee) == "JSON.stringify" and node.arguments:
        return object_fields(node.arguments[0])
    if isinstance(node, ast.Object):
        return [p.key for p in node.properties if isinstance(p, ast.Property) and p.key]
    if isinstance(node, ast.Identifier):
        return [node.name]
    return []


class HandlerTranslator:
    """
    Translates handler functions of one component.

    Args:
        extractor: The component's extractor; supplies source text and HTTP
            call recognition
        setters: State setter name -> state variable name
    """

    def __init__(self, extractor: ComponentExtractor, setters: dict[str, str]):
        self.extractor = extractor
        self.setters = setters

    def translate(self, function: ast.Function) -> Translation:
        translation = Translation()
        body = function.body
        if isinstance(body, ast.Block):
            translation.statements = self._block(body.body, translation.skipped)
        elif body is not None:
            translation.statements = self._expression(body, translation.skipped)
        if translation.raw_count:
            logger.debug(
                "%s: %d of the handler's statements kept as raw code",
                self.extractor.rel_path,
                translation.raw_count,
            )
        return translation

    def source(self, node: ast.Node) -> str:
        return " ".join(self.extractor.source(node).split())

    def _raw(self, node: ast.Node, comment: str) -> HandlerStatement:
        return HandlerStatement(kind=StatementKind.RAW, code=self.source(node), comment=comment)

    def _block(self, nodes: list[ast.Node], skipped: Counter[str]) -> list[HandlerStatement]:
        statements: list[HandlerStatement] = []
        for node in nodes:
            statements.extend(self._statement(node, skipped))
        return statements

    def _branch(self, node: ast.Node | None, skipped: Counter[str]) -> list[HandlerStatement]:
        if node is None:
            return []
        if isinstance(node, ast.Block):
            return self._block(node.body, skipped)
        return self._statement(node, skipped)

    def _statement(self, node: ast.Node, skipped: Counter[str]) -> list[HandlerStatement]:
        if isinstance(node, ast.Empty):
            return []
        if isinstance(node, ast.If):
            return [
                HandlerStatement(
                    kind=StatementKind.IF,
                    condition=self.condition(node.test),
                    then=self._branch(node.consequent, skipped),
                    otherwise=self._branch(node.alternate, skipped),
                )
            ]
        if isinstance(node, ast.Return):
            value = self.source(node.argument) if node.argument is not None else None
            return [HandlerStatement(kind=StatementKind.RETURN, value=value)]
        if isinstance(node, ast.ExpressionStatement):
            return self._expression(node.expression, skipped)
        if isinstance(node, ast.VariableDeclaration):
            statements: list[HandlerStatement] = []
            for declarator in node.declarations:
                statements.extend(self._declarator(declarator))
            return statements
        if isinstance(node, ast.Block):
            return self._block(node.body, skipped)
        if isinstance(node, ast.Try):
            statements = self._block(node.block.body, skipped)
            if node.handler is not None and node.handler.body:
                statements.append(self._raw(node.handler, "Error handling"))
            if node.finalizer is not None:
                statements.extend(self._block(node.finalizer.body, skipped))
            return statements
        return [self._raw(node, f"Untranslated {node.kind.value.replace('_', ' ')}")]

    def _declarator(self, declarator: ast.VariableDeclarator) -> list[HandlerStatement]:
        if declarator.init is None:
            return []
        variable = self.source(declarator.target)
        init = ast.unwrap(declarator.init)
        if isinstance(init, ast.Call):
            request = self._request(init)
            if request is not None:
                return [request.model_copy(update={"variable": variable})]
        return [HandlerStatement(kind=StatementKind.SET, variable=variable, value=self.source(init))]

    def _expression(self, node: ast.Node, skipped: Counter[str]) -> list[HandlerStatement]:
        node = ast.unwrap(node)
        if isinstance(node, ast.Call):
            return self._call(node, skipped)
        if isinstance(node, ast.Assign) and node.operator == "=":
            return [
                HandlerStatement(
                    kind=StatementKind.SET,
                    variable=self.source(node.target),
                    value=self.source(node.value),
                )
            ]
        return [self._raw(node, "Expression")]

    def _request(self, call: ast.Call) -> HandlerStatement | None:
        api_call = self.extractor.api_call(call, None)
        if api_call is None:
            return None
        return HandlerStatement(
            kind=StatementKind.CALL,
            method=api_call.method,
            path=api_call.url,
            fields=self._request_fields(call),
        )

    def _request_fields(self, call: ast.Call) -> list[str]:
        callee = ast.dotted_name(call.callee)
        if callee in ("fetch", "window.fetch"):
            options = ast.unwrap(call.arguments[1]) if len(call.arguments) > 1 else None
            return object_fields(options.get("body")) if isinstance(options, ast.Object) else []
        first = ast.unwrap(call.arguments[0])
        if callee == "axios" and isinstance(first, ast.Object):
            return object_fields(first.get("data"))
        return object_fields(call.arguments[1]) if len(call.arguments) > 1 else []

    def _call(self, call: ast.Call, skipped: Counter[str]) -> list[HandlerStatement]:
        request = self._request(call)
        if request is not None:
            return [request]

        callee = ast.dotted_name(call.callee) or ""
        owner, _, method = callee.rpartition(".")
        if owner == "console" and method in CONSOLE_METHODS:
            skipped["console"] += 1
            return []
        if method in ("preventDefault", "stopPropagation"):
            skipped[method] += 1
            return []

        if callee in NAVIGATION_CALLS and call.arguments:
            target = self.extractor.url_text(call.arguments[0])
            if target is not None:
                return [HandlerStatement(kind=StatementKind.SHOW, view=view_for_path(target))]

        if callee in self.setters and call.arguments:
            return [self._state_update(self.setters[callee], call.arguments[0])]

        return [self._raw(call, "Function call")]

    def _state_update(self, state: str, argument: ast.Node) -> HandlerStatement:
        """``setTasks(...)``: appends become ``add``, filters ``remove``, anything else ``set``."""
        value = ast.unwrap(argument)
        names = {state}
        # Updater form: setTasks(prev => [...prev, task])
        if isinstance(value, ast.Function) and value.param_names:
            names.add(value.param_names[0])
            value = _returned_expression(value) or value

        entity = entity_for_state(state)
        if isinstance(value, ast.Array):
            spreads = [
                e for e in value.elements if isinstance(e, ast.Spread) and ast.dotted_name(e.argument) in names
            ]
            added = [e for e in value.elements if e is not None and not isinstance(e, ast.Spread)]
            if spreads and len(added) == 1:
                return HandlerStatement(kind=StatementKind.ADD, entity=entity, fields=object_fields(added[0]))

        if (
            isinstance(value, ast.Call)
            and isinstance(value.callee, ast.Member)
            and value.callee.property == "filter"
            and ast.dotted_name(value.callee.object) in names
        ):
            return HandlerStatement(kind=StatementKind.REMOVE, entity=entity, value=self._removed_id(value))

        return HandlerStatement(kind=StatementKind.SET, variable=state, value=self.source(argument))

    def _removed_id(self, call: ast.Call) -> str | None:
        """The ``id`` in ``items.filter(item => item.id !== id)``."""
        callback = ast.unwrap(call.arguments[0]) if call.arguments else None
        if not isinstance(callback, ast.Function) or not callback.param_names:
            return None
        test = ast.unwrap(_returned_expression(callback))
        if not isinstance(test, ast.Binary) or test.operator not in ("!==", "!="):
            return None
        item = callback.param_names[0]
        for side, other in ((test.left, test.right), (test.right, test.left)):
            name = ast.dotted_name(side)
            if name is not None and name.startswith(f"{item}."):
                return self.source(other)
        return None

    def condition(self, node: ast.Node) -> str:
        """
        Render a test in ShepLang operators.

        ``!title.trim() || count === 0`` -> ``not title.trim() or count == 0``
        """
        node = ast.unwrap(node)
        if isinstance(node, ast.Unary) and node.operator == "!" and node.argument is not None:
            return f"not {self._operand(node.argument, '!')}"
        if isinstance(node, ast.Binary):
            operator = CONDITION_OPERATORS.get(node.operator, node.operator)
            left = self._operand(node.left, node.operator)
            right = self._operand(node.right, node.operator)
            return f"{left} {operator} {right}"
        return self.source(node)

    def _operand(self, node: ast.Node, parent_operator: str) -> str:
        text = self.condition(node)
        inner = ast.unwrap(node)
        if isinstance(inner, ast.Binary) and inner.operator != parent_operator and inner.operator in ("&&", "||"):
            return f"({text})"
        return text


def _returned_expression(function: ast.Function) -> ast.Node | None:
    body = function.body
    if isinstance(body, ast.Block):
        if len(body.body) == 1 and isinstance(body.body[0], ast.Return):
            return body.body[0].argument
        return None
    return body
