"""
Base parser class for the JS/TS/JSX front end.

Provides token navigation, speculative-parse checkpoints and error
construction used by all parser mixins.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ...core.errors import ParseError, make_parse_error, snippet_around
from .lexer import Lexer, LexerState, Token, TokenType

if TYPE_CHECKING:
    from . import ast


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Interface available to parser mixins.

    Lets type checkers see the BaseParser methods and the cross-mixin entry
    points the final Parser class combines.
    """

    text: str
    file: Path
    lexer: Lexer
    tok: Token
    last_end: int

    def advance(self) -> Token: ...
    def peek(self) -> Token: ...
    def expect(self, value: str) -> Token: ...
    def expect_name(self) -> Token: ...
    def eat(self, value: str) -> bool: ...
    def at(self, *values: str) -> bool: ...
    def checkpoint(self) -> Checkpoint: ...
    def rewind(self, checkpoint: Checkpoint) -> None: ...
    def error(self, message: str, token: Token | None = None) -> ParseError: ...
    def span(self, start: Token) -> dict[str, int]: ...

    # Cross-mixin entry points
    def parse_statement(self) -> ast.Node: ...
    def parse_block(self) -> ast.Block: ...
    def parse_expression(self) -> ast.Node: ...
    def parse_assignment(self) -> ast.Node: ...
    def parse_jsx(self) -> ast.Node: ...
    def skip_type(self) -> str: ...
    def skip_type_parameters(self) -> None: ...
    def try_type_arguments(self) -> str | None: ...
    def parse_params(self) -> list[ast.Param]: ...
    def parse_function_rest(
        self, start: Token, name: str | None, is_async: bool, is_declaration: bool
    ) -> ast.Function: ...


@dataclass(frozen=True)
class Checkpoint:
    """Parser position to rewind to after a failed speculative parse."""

    lexer_state: LexerState
    tok: Token
    last_end: int


class BaseParser:
    """
    Base parser with token navigation utilities.

    The parser keeps exactly one token of lookahead (`tok`); the lexer is
    always positioned immediately after it, which is what lets the JSX
    mixin switch the lexer into raw mode.
    """

    def __init__(self, text: str, file: Path, start: int = 0, end: int | None = None):
        """
        Initialize parser.

        Args:
            text: Source text
            file: Source file path (for error reporting)
            start: Offset to start parsing at (template literal expressions)
            end: Offset to stop at
        """
        self.text = text
        self.file = file
        self.lexer = Lexer(text, file, start, end)
        self.last_end = start
        self.tok = self.lexer.next_token()

    # ------------------------------------------------------------------
    # Token navigation
    # ------------------------------------------------------------------

    def advance(self) -> Token:
        """Consume the current token and return it."""
        token = self.tok
        if token.type != TokenType.EOF:
            self.last_end = token.end
            self.tok = self.lexer.next_token()
        return token

    def peek(self) -> Token:
        """Look at the token after the current one without consuming."""
        state = self.lexer.save()
        token = self.lexer.next_token()
        self.lexer.restore(state)
        return token

    def at(self, *values: str) -> bool:
        """True if the current token is one of the punctuators or names given."""
        return self.tok.type in (TokenType.PUNCT, TokenType.NAME) and self.tok.value in values

    def at_eof(self) -> bool:
        return self.tok.type == TokenType.EOF

    def eat(self, value: str) -> bool:
        """Consume the current token if it matches `value`."""
        if self.at(value):
            self.advance()
            return True
        return False

    def expect(self, value: str) -> Token:
        """
        Expect a specific punctuator or keyword and consume it.

        Raises:
            ParseError: If the token doesn't match
        """
        if not self.at(value):
            raise self.error(f"Expected '{value}', got {self._describe(self.tok)}")
        return self.advance()

    def expect_name(self) -> Token:
        """Expect any identifier or keyword."""
        if self.tok.type != TokenType.NAME:
            raise self.error(f"Expected identifier, got {self._describe(self.tok)}")
        return self.advance()

    def consume_semicolon(self) -> None:
        """Consume a statement terminator, applying automatic semicolon insertion."""
        if self.eat(";"):
            return
        if self.at("}") or self.at_eof() or self.tok.newline_before:
            return
        raise self.error(f"Expected ';', got {self._describe(self.tok)}")

    # ------------------------------------------------------------------
    # Speculation
    # ------------------------------------------------------------------

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(self.lexer.save(), self.tok, self.last_end)

    def rewind(self, checkpoint: Checkpoint) -> None:
        self.lexer.restore(checkpoint.lexer_state)
        self.tok = checkpoint.tok
        self.last_end = checkpoint.last_end

    def skip_balanced(self, open_value: str, close_value: str) -> None:
        """Skip from the current opening token past its matching close."""
        depth = 0
        while True:
            if self.at_eof():
                raise self.error(f"Unbalanced '{open_value}'")
            if self.at(open_value):
                depth += 1
            elif self.at(close_value):
                depth -= 1
                if depth == 0:
                    self.advance()
                    return
            self.advance()

    # ------------------------------------------------------------------
    # Node helpers
    # ------------------------------------------------------------------

    def span(self, start: Token) -> dict[str, int]:
        """Location keywords for a node that began at `start`."""
        return {"start": start.start, "end": self.last_end, "line": start.line}

    def source_from(self, start: int) -> str:
        return self.text[start : self.last_end]

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of file"
        return f"{token.value!r}"

    def error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self.tok
        return make_parse_error(
            message,
            self.file,
            token.line,
            token.column,
            snippet=snippet_around(self.text, token.line),
        )
