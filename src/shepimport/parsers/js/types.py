"""
TypeScript type skipping mixin.

Types are consumed, not modelled: each entry point advances past a type and
returns its source text. Object type literals and interface bodies can also
be read as a member list, which is what prop extraction needs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...core.errors import ParseError
from . import ast
from .lexer import Token, TokenType

_TYPE_PREFIX_OPERATORS = frozenset({"keyof", "typeof", "unique", "readonly", "infer", "asserts"})


class TypeParserMixin:
    """Parser mixin for TypeScript type syntax."""

    if TYPE_CHECKING:
        text: str
        tok: Token
        last_end: int
        advance: Any
        at: Any
        eat: Any
        expect: Any
        error: Any
        peek: Any
        checkpoint: Any
        rewind: Any
        skip_balanced: Any

    def skip_type(self) -> str:
        """
        Skip a full type expression and return its source text.

        Grammar (approximate):
            type := ('|' | '&')? operand (('|' | '&') operand)* conditional?
            conditional := 'extends' operand '?' type ':' type
        """
        start = self.tok.start
        if self.at("|", "&"):
            self.advance()
        self._skip_type_operand()
        while self.at("|", "&"):
            self.advance()
            self._skip_type_operand()
        if self.at("extends") and not self.tok.newline_before:
            self.advance()
            self._skip_type_operand()
            self.expect("?")
            self.skip_type()
            self.expect(":")
            self.skip_type()
        return self.text[start : self.last_end]

    def _skip_type_operand(self) -> None:
        while self.tok.type == TokenType.NAME and self.tok.value in _TYPE_PREFIX_OPERATORS:
            following = self.peek()
            if following.type == TokenType.PUNCT and following.value not in ("(", "[", "{", "<"):
                break  # the operator word is itself a type name here
            self.advance()

        if self.at("new"):
            self.advance()

        tok = self.tok
        if tok.type == TokenType.PUNCT:
            if tok.value == "(":
                self.skip_balanced("(", ")")
                if self.eat("=>"):
                    self.skip_type()
            elif tok.value == "<":
                # Generic function type: <T>(arg: T) => R
                self.skip_type_parameters()
                self.skip_balanced("(", ")")
                self.expect("=>")
                self.skip_type()
            elif tok.value == "{":
                self.skip_balanced("{", "}")
            elif tok.value == "[":
                self.skip_balanced("[", "]")
            elif tok.value == "-":
                self.advance()
                if self.tok.type != TokenType.NUMBER:
                    raise self.error("Expected number in type")
                self.advance()
            else:
                raise self.error(f"Unexpected {tok.value!r} in type")
        elif tok.type in (TokenType.STRING, TokenType.NUMBER, TokenType.TEMPLATE):
            self.advance()
        elif tok.type == TokenType.NAME:
            self.advance()
            while self.at(".") and self.peek().type == TokenType.NAME:
                self.advance()
                self.advance()
            if self.at("<") and not self.tok.newline_before:
                self._skip_type_argument_list()
            if self.at("is") and not self.tok.newline_before:
                self.advance()
                self.skip_type()
        else:
            raise self.error("Expected a type")

        # Array and indexed access suffixes
        while self.at("[") and not self.tok.newline_before:
            self.advance()
            if not self.eat("]"):
                self.skip_type()
                self.expect("]")

    def _skip_type_argument_list(self) -> None:
        self.expect("<")
        if not self.at(">"):
            self.skip_type()
            while self.eat(","):
                if self.at(">"):
                    break
                self.skip_type()
        self.eat_type_close()

    def eat_type_close(self) -> None:
        """
        Consume one ``>`` closing a type argument list.

        The lexer produces ``>>`` / ``>>>`` / ``>=`` for adjacent closers;
        those are split and the remainder becomes the current token.
        """
        tok = self.tok
        if tok.type != TokenType.PUNCT or not tok.value.startswith(">"):
            raise self.error(f"Expected '>', got {tok.value!r}")
        if tok.value == ">":
            self.advance()
            return
        self.last_end = tok.start + 1
        self.tok = Token(
            TokenType.PUNCT,
            tok.value[1:],
            tok.line,
            tok.column + 1,
            tok.start + 1,
            tok.end,
            False,
        )

    def skip_type_parameters(self) -> None:
        """Skip a ``<T extends X = Y, ...>`` declaration list."""
        self.expect("<")
        depth = 1
        while depth:
            if self.tok.type == TokenType.EOF:
                raise self.error("Unterminated type parameter list")
            if self.at("<"):
                depth += 1
                self.advance()
            elif self.tok.type == TokenType.PUNCT and self.tok.value.startswith(">") and self.tok.value != ">=":
                closers = self.tok.value.count(">")
                if closers > depth:
                    self.eat_type_close()
                    depth -= 1
                else:
                    depth -= closers
                    self.advance()
            else:
                self.advance()

    def try_type_arguments(self) -> str | None:
        """
        Speculatively read ``<...>`` type arguments before a call.

        Succeeds only when the list parses as types and is followed by ``(``
        or a template; otherwise the parser is rewound and None returned, so
        ``a < b && c > (d)`` stays a comparison.
        """
        checkpoint = self.checkpoint()
        start = self.tok.start
        try:
            self._skip_type_argument_list()
        except ParseError:
            self.rewind(checkpoint)
            return None
        if self.at("(") or self.tok.type == TokenType.TEMPLATE:
            return self.text[start : self.last_end]
        self.rewind(checkpoint)
        return None

    def parse_type_members(self) -> list[ast.TypeMember]:
        """
        Read the members of an object type literal or interface body.

        The current token must be ``{``. Unreadable members are skipped up
        to the next separator.
        """
        self.expect("{")
        members: list[ast.TypeMember] = []
        while not self.at("}"):
            if self.tok.type == TokenType.EOF:
                raise self.error("Unterminated type body")
            if self.eat(";") or self.eat(","):
                continue

            while self.at("readonly", "public", "private", "protected") and self.peek().type in (
                TokenType.NAME,
                TokenType.STRING,
            ):
                self.advance()

            if self.tok.type in (TokenType.NAME, TokenType.STRING, TokenType.NUMBER):
                name = self.advance().value
                optional = self.eat("?")
                if self.eat(":"):
                    members.append(ast.TypeMember(name, self.skip_type(), optional))
                elif self.at("(", "<"):
                    # Method signature
                    if self.at("<"):
                        self.skip_type_parameters()
                    start = self.tok.start
                    self.skip_balanced("(", ")")
                    if self.eat(":"):
                        self.skip_type()
                    members.append(ast.TypeMember(name, self.text[start : self.last_end], optional))
                else:
                    members.append(ast.TypeMember(name, None, optional))
            elif self.at("["):
                # Index signature or mapped type
                self.skip_balanced("[", "]")
                self.eat("?")
                if self.eat(":"):
                    self.skip_type()
            elif self.at("(", "<", "new"):
                # Call / construct signature
                if self.eat("new"):
                    pass
                if self.at("<"):
                    self.skip_type_parameters()
                self.skip_balanced("(", ")")
                if self.eat(":"):
                    self.skip_type()
            else:
                raise self.error(f"Unexpected {self.tok.value!r} in type body")
        self.expect("}")
        return members
