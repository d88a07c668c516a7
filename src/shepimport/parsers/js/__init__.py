"""
JavaScript / TypeScript / JSX parser package.

The parser is built from mixins, one per syntactic area, over a shared
token-navigation base:

- StatementParserMixin: declarations, modules and control flow
- ExpressionParserMixin: operators, calls, literals and arrow functions
- JSXParserMixin: elements, attributes and children
- TypeParserMixin: TypeScript type skipping and member lists

Usage:
    from shepimport.parsers.js import parse_module

    program = parse_module(source_text, Path("app/page.tsx"))
"""

from pathlib import Path

from . import ast
from .base import BaseParser
from .expressions import ExpressionParserMixin
from .jsx import JSXParserMixin
from .statements import StatementParserMixin
from .types import TypeParserMixin


class Parser(
    BaseParser,
    StatementParserMixin,
    ExpressionParserMixin,
    JSXParserMixin,
    TypeParserMixin,
):
    """Complete JS/TS/JSX parser."""

    def sub_parser(self, start: int, end: int) -> "Parser":
        """Parser over a slice of the same text (template literal expressions)."""
        return Parser(self.text, self.file, start, end)


def parse_module(text: str, file: Path) -> ast.Program:
    """
    Parse a source file into a Program node.

    Raises:
        ParseError: On syntax the parser cannot follow
    """
    return Parser(text, file).parse_program()


__all__ = ["Parser", "parse_module", "ast"]
