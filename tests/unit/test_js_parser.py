"""Unit tests for the JS/TS/JSX front end."""

from pathlib import Path

import pytest

from shepimport.core.errors import ParseError
from shepimport.parsers.js import ast, parse_module
from shepimport.parsers.js.lexer import TokenType, tokenize

FILE = Path("test.tsx")


def _first(program: ast.Program, node_type: type[ast.Node]) -> ast.Node:
    return next(n for n in ast.walk(program) if isinstance(n, node_type))


class TestLexer:
    """Tests for tokenize."""

    def test_basic_tokens(self) -> None:
        tokens = tokenize("const answer = 42;", FILE)
        assert [t.type for t in tokens] == [
            TokenType.NAME,
            TokenType.NAME,
            TokenType.PUNCT,
            TokenType.NUMBER,
            TokenType.PUNCT,
            TokenType.EOF,
        ]
        assert tokens[1].value == "answer"
        assert tokens[1].line == 1

    def test_longest_punctuator_wins(self) -> None:
        tokens = tokenize("a === b => c", FILE)
        assert [t.value for t in tokens if t.type == TokenType.PUNCT] == ["===", "=>"]

    def test_comments_are_skipped(self) -> None:
        tokens = tokenize("// line\n/* block */ x", FILE)
        assert [t.value for t in tokens if t.type != TokenType.EOF] == ["x"]
        assert tokens[0].line == 2

    def test_string_value_is_cooked(self) -> None:
        tokens = tokenize("'it\\'s'", FILE)
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "it's"

    def test_regex_after_statement_header(self) -> None:
        tokens = tokenize("if (x) /ab+c/.test(y);", FILE)
        assert (tokens[4].type, tokens[4].value) == (TokenType.REGEX, "/ab+c/")

        tokens = tokenize("while (f(a)) /x/g.exec(s);", FILE)
        assert [t.type for t in tokens].count(TokenType.REGEX) == 1

    def test_slash_after_call_is_division(self) -> None:
        tokens = tokenize("total = sum(a) / count / 2;", FILE)
        assert TokenType.REGEX not in [t.type for t in tokens]
        assert [t.value for t in tokens if t.type == TokenType.PUNCT].count("/") == 2


class TestStatements:
    """Tests for module-level statements."""

    def test_imports(self) -> None:
        program = parse_module('import React, { useState as useS } from "react";', FILE)
        node = program.body[0]
        assert isinstance(node, ast.Import)
        assert node.source == "react"
        assert [(s.imported, s.local) for s in node.specifiers] == [("default", "React"), ("useState", "useS")]

    def test_if_with_regex_consequent(self) -> None:
        program = parse_module("if (ok) /^a+$/.test(name);", FILE)
        node = program.body[0]
        assert isinstance(node, ast.If)
        regex = _first(node.consequent, ast.Literal)
        assert (regex.literal_kind, regex.value) == ("regex", "/^a+$/")

    def test_default_export_function(self) -> None:
        program = parse_module("export default function TaskList() { return null; }", FILE)
        export = program.body[0]
        assert isinstance(export, ast.Export)
        assert export.is_default
        assert isinstance(export.declaration, ast.Function)
        assert export.declaration.name == "TaskList"

    def test_typescript_syntax_is_skipped(self) -> None:
        text = """\
interface Task { id: string; title?: string }
type Props = { tasks: Task[] };
const count: number = value as number;
export function load(url: string): Promise<Response> {
  return fetch(url);
}
"""
        program = parse_module(text, FILE)
        declaration = next(n for n in program.body if isinstance(n, ast.TypeDeclaration))
        assert declaration.name == "Task"
        assert [m.name for m in declaration.members] == ["id", "title"]
        assert declaration.members[1].optional

    def test_switch_cases(self) -> None:
        program = parse_module("switch (req.method) { case 'GET': break; default: x(); }", FILE)
        switch = _first(program, ast.Switch)
        assert ast.dotted_name(switch.discriminant) == "req.method"
        assert [ast.string_value(c.test) for c in switch.cases] == ["GET", None]


class TestExpressions:
    """Tests for expressions and helpers."""

    def test_member_chain_dotted_name(self) -> None:
        program = parse_module("await prisma.task.create({ data });", FILE)
        call = _first(program, ast.Call)
        assert ast.dotted_name(call.callee) == "prisma.task.create"

    def test_template_literal(self) -> None:
        program = parse_module("const url = `/api/tasks/${id}`;", FILE)
        template = _first(program, ast.TemplateLiteral)
        assert template.quasis == ["/api/tasks/", ""]
        assert isinstance(template.expressions[0], ast.Identifier)

    def test_arrow_function(self) -> None:
        program = parse_module("const add = (a, b) => a + b;", FILE)
        function = _first(program, ast.Function)
        assert function.is_arrow
        assert function.param_names == ["a", "b"]
        assert isinstance(function.body, ast.Binary)


class TestJSX:
    """Tests for JSX parsing."""

    def test_element_with_attributes_and_text(self) -> None:
        program = parse_module('const el = <button type="submit" onClick={save} disabled>Save  now</button>;', FILE)
        element = _first(program, ast.JSXElement)
        assert element.name == "button"
        assert [a.name for a in element.attributes] == ["type", "onClick", "disabled"]
        assert element.get_attribute("disabled").value is None
        text = next(c for c in element.children if isinstance(c, ast.JSXText))
        assert text.value == "Save  now"

    def test_fragment_and_expression_children(self) -> None:
        program = parse_module("const el = <>{items.map(i => <li key={i}>{i}</li>)}</>;", FILE)
        fragment = _first(program, ast.JSXFragment)
        container = fragment.children[0]
        assert isinstance(container, ast.JSXExpression)
        assert isinstance(container.expression, ast.Call)

    def test_self_closing_component(self) -> None:
        program = parse_module("const el = <TaskList tasks={tasks} />;", FILE)
        element = _first(program, ast.JSXElement)
        assert element.self_closing
        assert element.name == "TaskList"

    def test_mismatched_closing_tag_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_module("const el = <div><span></div>;", FILE)

    def test_parse_error_has_location(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_module("const a = 1;\nconst b = (;\n", FILE)
        assert exc_info.value.context is not None
        assert exc_info.value.context.line == 2


class TestNodeTables:
    """Every node kind has a class and a child-field entry."""

    def test_tables_cover_every_kind(self) -> None:
        assert set(ast.NODE_CLASSES) == set(ast.NodeKind)
        assert set(ast.CHILD_FIELDS) == set(ast.NodeKind)

    @pytest.mark.parametrize("kind", list(ast.NodeKind))
    def test_child_fields_exist(self, kind: ast.NodeKind) -> None:
        fields = ast.NODE_CLASSES[kind].__dataclass_fields__
        assert all(name in fields for name in ast.CHILD_FIELDS[kind])
