"""
Lexer for JavaScript / TypeScript / JSX source.

Tokens are produced on demand: the parser pulls one token at a time and can
save and restore the lexer state for speculative parses (arrow functions,
generic call arguments). JSX children and tag names are read through the
raw ``read_jsx_*`` methods because their lexical grammar differs from the
expression grammar.

Whether a ``/`` starts a regular expression or is a division operator is
decided from the previously emitted token.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ...core.delimiters import find_matching
from ...core.errors import make_parse_error, snippet_around


class TokenType(Enum):
    """Token types produced by the lexer."""

    NAME = "NAME"  # identifiers and keywords
    STRING = "STRING"
    NUMBER = "NUMBER"
    TEMPLATE = "TEMPLATE"
    REGEX = "REGEX"
    PUNCT = "PUNCT"
    EOF = "EOF"


# Longest first; the lexer takes the first match.
PUNCTUATORS = (
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
    ">>",
)
SINGLE_PUNCTUATORS = set("{}()[];,<>+-*/%&|^!~?:=.@")

# After these keywords an expression (and so a regex) may start
_REGEX_AFTER_KEYWORDS = frozenset(
    {
        "return",
        "typeof",
        "instanceof",
        "in",
        "of",
        "new",
        "delete",
        "void",
        "throw",
        "case",
        "do",
        "else",
        "yield",
        "await",
    }
)

# A `(` after these opens a statement header; a regex may follow its `)`
_HEADER_KEYWORDS = ("if", "while", "for", "with")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


@dataclass
class Token:
    """
    A single token.

    Attributes:
        type: Type of token
        value: Cooked value (string contents, punctuator, name)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        start: Offset of the first character
        end: Offset one past the last character
        newline_before: A line break separates this token from the previous one
        parts: Template literal text chunks
        spans: Template literal ``${...}`` expression offsets
        closes_header: A ``)`` ending an ``if``, ``while``, ``for`` or ``with`` header
    """

    type: TokenType
    value: str
    line: int
    column: int
    start: int
    end: int
    newline_before: bool = False
    parts: tuple[str, ...] = ()
    spans: tuple[tuple[int, int], ...] = ()
    closes_header: bool = False

    def is_punct(self, *values: str) -> bool:
        return self.type == TokenType.PUNCT and self.value in values

    def is_name(self, *values: str) -> bool:
        return self.type == TokenType.NAME and (not values or self.value in values)

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


@dataclass(frozen=True)
class LexerState:
    pos: int
    line: int
    column: int
    prev: Token | None
    parens: tuple[bool, ...]


class Lexer:
    """
    On-demand tokenizer for JS/TS/JSX.

    Args:
        text: Full source text
        file: Source file path (for error reporting)
        start: Offset to begin lexing at
        end: Offset to stop at (exclusive); defaults to end of text
    """

    def __init__(self, text: str, file: Path, start: int = 0, end: int | None = None):
        self.text = text
        self.file = file
        self.pos = start
        self.limit = len(text) if end is None else end
        self.line = text.count("\n", 0, start) + 1
        self.column = start - (text.rfind("\n", 0, start) + 1) + 1
        self.prev: Token | None = None
        # One entry per open `(`: whether it opened a statement header
        self.parens: tuple[bool, ...] = ()

        # Shebang line
        if start == 0 and text.startswith("#!"):
            while self.current_char() not in (None, "\n"):
                self.advance()

    # ------------------------------------------------------------------
    # Character navigation
    # ------------------------------------------------------------------

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= self.limit:
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= self.limit:
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < self.limit:
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def advance_by(self, count: int) -> None:
        for _ in range(count):
            self.advance()

    def save(self) -> LexerState:
        return LexerState(self.pos, self.line, self.column, self.prev, self.parens)

    def restore(self, state: LexerState) -> None:
        self.pos = state.pos
        self.line = state.line
        self.column = state.column
        self.prev = state.prev
        self.parens = state.parens

    def error(self, message: str, line: int | None = None, column: int | None = None):
        line = self.line if line is None else line
        column = self.column if column is None else column
        return make_parse_error(
            message, self.file, line, column, snippet=snippet_around(self.text, line)
        )

    # ------------------------------------------------------------------
    # Trivia
    # ------------------------------------------------------------------

    def skip_trivia(self) -> bool:
        """Skip whitespace and comments. Returns True if a newline was crossed."""
        newline = False
        while True:
            ch = self.current_char()
            if ch is None:
                return newline
            if ch == "\n":
                newline = True
                self.advance()
            elif ch.isspace():
                self.advance()
            elif ch == "/" and self.peek_char() == "/":
                while self.current_char() not in (None, "\n"):
                    self.advance()
            elif ch == "/" and self.peek_char() == "*":
                start_line, start_col = self.line, self.column
                self.advance_by(2)
                while True:
                    current = self.current_char()
                    if current is None:
                        raise self.error("Unterminated comment", start_line, start_col)
                    if current == "*" and self.peek_char() == "/":
                        self.advance_by(2)
                        break
                    if current == "\n":
                        newline = True
                    self.advance()
            else:
                return newline

    # ------------------------------------------------------------------
    # Literal readers
    # ------------------------------------------------------------------

    def read_string(self) -> str:
        """Read a quoted string, returning its cooked value."""
        start_line = self.line
        start_col = self.column
        quote = self.current_char()
        self.advance()

        chars = []
        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self.error("Unterminated string literal", start_line, start_col)
            if current == quote:
                break
            if current == "\\":
                self.advance()
                escape_char = self.current_char()
                if escape_char is None:
                    raise self.error("Unterminated string literal", start_line, start_col)
                if escape_char == "\n":
                    pass  # line continuation
                elif escape_char in _ESCAPES:
                    chars.append(_ESCAPES[escape_char])
                else:
                    chars.append(escape_char)
                self.advance()
            else:
                chars.append(current)
                self.advance()

        self.advance()  # skip closing quote
        return "".join(chars)

    def read_number(self) -> str:
        start = self.pos
        if self.current_char() == "0" and (self.peek_char() or "").lower() in ("x", "o", "b"):
            self.advance_by(2)
            while (self.current_char() or "").isalnum() or self.current_char() == "_":
                self.advance()
            return self.text[start : self.pos]

        while True:
            ch = self.current_char()
            if ch is None:
                break
            if ch.isdigit() or ch in "._":
                self.advance()
            elif ch in "eE" and (self.peek_char() or "") in "+-0123456789":
                self.advance_by(2)
            else:
                break
        if self.current_char() == "n":  # BigInt
            self.advance()
        return self.text[start : self.pos]

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        start = self.pos
        current = self.current_char()
        while current and (current.isalnum() or current in "_$"):
            self.advance()
            current = self.current_char()
        return self.text[start : self.pos]

    def read_regex(self) -> str:
        start_line, start_col = self.line, self.column
        start = self.pos
        self.advance()  # opening /
        in_class = False
        while True:
            ch = self.current_char()
            if ch is None or ch == "\n":
                raise self.error("Unterminated regular expression", start_line, start_col)
            if ch == "\\":
                self.advance_by(2)
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                self.advance()
                break
            self.advance()
        while (self.current_char() or "").isalpha():
            self.advance()
        return self.text[start : self.pos]

    def read_template(self) -> tuple[str, tuple[str, ...], tuple[tuple[int, int], ...]]:
        """
        Read a template literal.

        Returns:
            Raw text, the literal text chunks and the ``${...}`` expression spans
        """
        start_line, start_col = self.line, self.column
        start = self.pos
        self.advance()  # opening backtick
        parts: list[str] = []
        spans: list[tuple[int, int]] = []
        chunk: list[str] = []
        while True:
            ch = self.current_char()
            if ch is None:
                raise self.error("Unterminated template literal", start_line, start_col)
            if ch == "`":
                self.advance()
                break
            if ch == "\\":
                self.advance()
                escaped = self.current_char()
                if escaped is not None:
                    chunk.append(_ESCAPES.get(escaped, escaped))
                    self.advance()
                continue
            if ch == "$" and self.peek_char() == "{":
                brace = self.pos + 1
                close = find_matching(self.text, brace, "{")
                if close is None or close >= self.limit:
                    raise self.error("Unterminated template expression", start_line, start_col)
                parts.append("".join(chunk))
                chunk = []
                spans.append((brace + 1, close))
                self.advance_by(close + 1 - self.pos)
                continue
            chunk.append(ch)
            self.advance()
        parts.append("".join(chunk))
        return self.text[start : self.pos], tuple(parts), tuple(spans)

    # ------------------------------------------------------------------
    # JSX raw readers
    # ------------------------------------------------------------------

    def read_jsx_name(self) -> str:
        """Read a JSX tag or attribute name (allows ``-``, ``:`` and ``.``)."""
        start = self.pos
        current = self.current_char()
        while current and (current.isalnum() or current in "_$-:."):
            self.advance()
            current = self.current_char()
        return self.text[start : self.pos]

    def read_jsx_text(self) -> str:
        """Read JSX child text up to the next ``{`` or ``<``."""
        start = self.pos
        while self.current_char() not in (None, "{", "<"):
            self.advance()
        return self.text[start : self.pos]

    def read_jsx_string(self) -> str:
        """Read a JSX attribute string; no escape processing."""
        start_line, start_col = self.line, self.column
        quote = self.current_char()
        self.advance()
        start = self.pos
        while self.current_char() != quote:
            if self.current_char() is None:
                raise self.error("Unterminated JSX attribute string", start_line, start_col)
            self.advance()
        value = self.text[start : self.pos]
        self.advance()
        return value

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _regex_allowed(self) -> bool:
        prev = self.prev
        if prev is None:
            return True
        if prev.type == TokenType.PUNCT:
            if prev.value == ")":
                return prev.closes_header
            return prev.value not in ("]", "}")
        if prev.type == TokenType.NAME:
            return prev.value in _REGEX_AFTER_KEYWORDS
        return False

    def next_token(self) -> Token:
        """
        Lex the next token.

        Raises:
            ParseError: On unterminated literals or unknown characters
        """
        newline = self.skip_trivia()
        line, column, start = self.line, self.column, self.pos
        ch = self.current_char()

        def make(token_type: TokenType, value: str, **extra) -> Token:
            if token_type == TokenType.PUNCT and value == "(":
                opens_header = self.prev is not None and self.prev.is_name(*_HEADER_KEYWORDS)
                self.parens = (*self.parens, opens_header)
            elif token_type == TokenType.PUNCT and value == ")" and self.parens:
                extra["closes_header"] = self.parens[-1]
                self.parens = self.parens[:-1]
            token = Token(token_type, value, line, column, start, self.pos, newline, **extra)
            self.prev = token
            return token

        if ch is None:
            return Token(TokenType.EOF, "", line, column, start, start, newline)

        if ch.isalpha() or ch in "_$" or (ch == "#" and (self.peek_char() or "").isalpha()):
            if ch == "#":
                self.advance()
            self.read_identifier()
            return make(TokenType.NAME, self.text[start : self.pos])

        if ch.isdigit() or (ch == "." and (self.peek_char() or "").isdigit()):
            return make(TokenType.NUMBER, self.read_number())

        if ch in ('"', "'"):
            return make(TokenType.STRING, self.read_string())

        if ch == "`":
            raw, parts, spans = self.read_template()
            return make(TokenType.TEMPLATE, raw, parts=parts, spans=spans)

        if ch == "/" and self._regex_allowed():
            return make(TokenType.REGEX, self.read_regex())

        for punct in PUNCTUATORS:
            if self.text.startswith(punct, self.pos) and self.pos + len(punct) <= self.limit:
                # `?.5` is a conditional followed by a number
                if punct == "?." and (self.peek_char(2) or "").isdigit():
                    continue
                self.advance_by(len(punct))
                return make(TokenType.PUNCT, punct)

        if ch in SINGLE_PUNCTUATORS:
            self.advance()
            return make(TokenType.PUNCT, ch)

        raise self.error(f"Unexpected character {ch!r}")


def tokenize(text: str, file: Path) -> list[Token]:
    """
    Tokenize a whole source text.

    JSX children are not handled here; only the parser knows when it is
    inside an element. Used for diagnostics and tests of plain code.
    """
    lexer = Lexer(text, file)
    tokens = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.type == TokenType.EOF:
            return tokens
