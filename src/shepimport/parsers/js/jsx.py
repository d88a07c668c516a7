"""
JSX parser mixin.

Entered when ``<`` appears in operand position. Tag names, attribute names,
attribute strings and child text are read straight from the lexer in raw
mode; ``{...}`` containers drop back into normal token parsing. Each raw
section ends with the lexer positioned just after the last consumed
character and the stale current token left untouched until the caller
advances.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING, Any

from . import ast
from .lexer import Token


class JSXParserMixin:
    """Parser mixin for JSX elements and fragments."""

    if TYPE_CHECKING:
        text: str
        tok: Token
        lexer: Any
        last_end: int
        advance: Any
        at: Any
        expect: Any
        error: Any
        parse_expression: Any
        parse_assignment: Any

    def parse_jsx(self) -> ast.Node:
        """Parse a JSX element or fragment; the current token is ``<``."""
        start = self.tok
        if not start.is_punct("<"):
            raise self.error("Expected '<'")
        node = self._parse_jsx_after_lt(start.start, start.line)
        # Back to normal tokens after the closing '>'
        self.last_end = self.lexer.pos
        self.tok = self.lexer.next_token()
        return node

    # ------------------------------------------------------------------
    # Raw-mode helpers
    # ------------------------------------------------------------------

    def _raw_char(self) -> str | None:
        self.lexer.skip_trivia()
        return self.lexer.current_char()

    def _raw_expect(self, char: str) -> None:
        if self._raw_char() != char:
            found = self.lexer.current_char()
            raise self.lexer.error(f"Expected {char!r} in JSX, got {found!r}")
        self.lexer.advance()

    def _sync_last_end(self) -> None:
        self.last_end = self.lexer.pos

    def _enter_braces(self) -> None:
        """Lexer is at ``{``: load it and the following token as normal tokens."""
        self.tok = self.lexer.next_token()
        self.advance()

    def _leave_braces(self) -> None:
        """Current token must be ``}``; the lexer is already just past it."""
        if not self.tok.is_punct("}"):
            raise self.error(f"Expected '}}' in JSX, got {self.tok.value!r}")
        self.last_end = self.tok.end

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def _parse_jsx_after_lt(self, start: int, line: int) -> ast.Node:
        """Parse from just after ``<`` through the element's final ``>``."""
        if self._raw_char() == ">":
            self.lexer.advance()
            children = self._parse_jsx_children(closing_name="")
            self._sync_last_end()
            return ast.JSXFragment(children=children, start=start, end=self.last_end, line=line)

        name = self.lexer.read_jsx_name()
        if not name:
            raise self.lexer.error("Expected JSX tag name")

        # Type arguments on a component tag: <Select<Option> ...>
        if self._raw_char() == "<":
            self._skip_raw_type_arguments()

        attributes = self._parse_jsx_attributes()

        if self._raw_char() == "/":
            self.lexer.advance()
            self._raw_expect(">")
            self._sync_last_end()
            return ast.JSXElement(
                name=name, attributes=attributes, self_closing=True, start=start, end=self.last_end, line=line
            )

        self._raw_expect(">")
        children = self._parse_jsx_children(closing_name=name)
        self._sync_last_end()
        return ast.JSXElement(
            name=name, attributes=attributes, children=children, start=start, end=self.last_end, line=line
        )

    def _skip_raw_type_arguments(self) -> None:
        depth = 0
        while True:
            ch = self.lexer.current_char()
            if ch is None:
                raise self.lexer.error("Unterminated type arguments in JSX tag")
            self.lexer.advance()
            if ch == "<":
                depth += 1
            elif ch == ">":
                depth -= 1
                if depth == 0:
                    return

    def _parse_jsx_attributes(self) -> list[ast.Node]:
        attributes: list[ast.Node] = []
        while True:
            ch = self._raw_char()
            if ch is None:
                raise self.lexer.error("Unterminated JSX tag")
            if ch in ("/", ">"):
                return attributes

            attr_start, attr_line = self.lexer.pos, self.lexer.line
            if ch == "{":
                # {...spread}
                self._enter_braces()
                self.expect("...")
                argument = self.parse_assignment()
                self._leave_braces()
                attributes.append(
                    ast.JSXSpreadAttribute(
                        argument=argument, start=attr_start, end=self.last_end, line=attr_line
                    )
                )
                continue

            name = self.lexer.read_jsx_name()
            if not name:
                raise self.lexer.error(f"Unexpected {ch!r} in JSX tag")

            value: ast.Node | None = None
            if self._raw_char() == "=":
                self.lexer.advance()
                value = self._parse_jsx_attribute_value()
            self._sync_last_end()
            attributes.append(
                ast.JSXAttribute(name=name, value=value, start=attr_start, end=self.last_end, line=attr_line)
            )

    def _parse_jsx_attribute_value(self) -> ast.Node:
        ch = self._raw_char()
        value_start, value_line = self.lexer.pos, self.lexer.line
        if ch in ('"', "'"):
            raw_start = self.lexer.pos
            value = self.lexer.read_jsx_string()
            self._sync_last_end()
            return ast.Literal(
                value=html.unescape(value),
                literal_kind="string",
                raw=self.text[raw_start : self.lexer.pos],
                start=value_start,
                end=self.last_end,
                line=value_line,
            )
        if ch == "{":
            return self._parse_jsx_expression_container()
        if ch == "<":
            self.lexer.advance()
            return self._parse_jsx_after_lt(value_start, value_line)
        raise self.lexer.error(f"Unexpected {ch!r} in JSX attribute value")

    def _parse_jsx_expression_container(self) -> ast.JSXExpression:
        start, line = self.lexer.pos, self.lexer.line
        self._enter_braces()
        expression = None
        if not self.tok.is_punct("}"):
            expression = self.parse_expression()
        self._leave_braces()
        return ast.JSXExpression(expression=expression, start=start, end=self.last_end, line=line)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def _parse_jsx_children(self, closing_name: str) -> list[ast.Node]:
        children: list[ast.Node] = []
        while True:
            text_start, text_line = self.lexer.pos, self.lexer.line
            text = self.lexer.read_jsx_text()
            if text.strip():
                children.append(
                    ast.JSXText(
                        value=_normalize_jsx_text(text),
                        start=text_start,
                        end=self.lexer.pos,
                        line=text_line,
                    )
                )

            ch = self.lexer.current_char()
            if ch is None:
                raise self.lexer.error(f"Unclosed JSX element <{closing_name}>", text_line)

            if ch == "{":
                container = self._parse_jsx_expression_container()
                if container.expression is not None:
                    children.append(container)
                continue

            # ch == "<"
            element_start, element_line = self.lexer.pos, self.lexer.line
            self.lexer.advance()
            if self._raw_char() == "/":
                self.lexer.advance()
                self.lexer.skip_trivia()
                name = self.lexer.read_jsx_name()
                if name != closing_name:
                    raise self.lexer.error(
                        f"Expected closing tag </{closing_name}>, got </{name}>"
                    )
                self._raw_expect(">")
                return children
            children.append(self._parse_jsx_after_lt(element_start, element_line))


def _normalize_jsx_text(text: str) -> str:
    """Collapse JSX whitespace the way React renders it."""
    lines = [line.strip() for line in text.split("\n")]
    collapsed = " ".join(line for line in lines if line)
    return html.unescape(collapsed)
