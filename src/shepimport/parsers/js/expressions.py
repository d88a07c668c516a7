"""
Expression parser mixin.

Precedence climbing over the binary operators, with assignment, arrow
functions and conditionals above it and unary / postfix / call / member
parsing below. Destructuring patterns are parsed as object and array
literals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...core.errors import ParseError
from . import ast
from .lexer import Token, TokenType

BINARY_PRECEDENCE: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "as": 8,
    "satisfies": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}

ASSIGNMENT_OPERATORS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", ">>=", ">>>=", "&=", "|=", "^=", "&&=", "||=", "??="}
)

UNARY_OPERATORS = frozenset({"!", "~", "+", "-"})
UNARY_KEYWORDS = frozenset({"typeof", "void", "delete", "await"})

# Tokens after which `yield` has no argument
_EXPRESSION_ENDERS = frozenset({")", "]", "}", ",", ";", ":"})


class ExpressionParserMixin:
    """Parser mixin for expressions."""

    if TYPE_CHECKING:
        text: str
        file: Any
        tok: Token
        last_end: int
        advance: Any
        at: Any
        at_eof: Any
        eat: Any
        expect: Any
        expect_name: Any
        error: Any
        peek: Any
        span: Any
        checkpoint: Any
        rewind: Any
        skip_balanced: Any
        skip_type: Any
        skip_type_parameters: Any
        try_type_arguments: Any
        parse_jsx: Any
        parse_block: Any
        parse_class: Any
        parse_params: Any
        parse_function_rest: Any
        sub_parser: Any

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse_expression(self) -> ast.Node:
        """Parse a comma-separated expression."""
        start = self.tok
        expression = self.parse_assignment()
        if not self.at(","):
            return expression
        expressions = [expression]
        while self.eat(","):
            expressions.append(self.parse_assignment())
        return ast.Sequence(expressions=expressions, **self.span(start))

    def parse_assignment(self) -> ast.Node:
        """Parse an assignment-level expression (arrow functions included)."""
        start = self.tok

        if self.at("yield"):
            return self._parse_yield()

        arrow = self._try_arrow_function()
        if arrow is not None:
            return arrow

        target = self._parse_conditional()
        if self.tok.type == TokenType.PUNCT and self.tok.value in ASSIGNMENT_OPERATORS:
            operator = self.advance().value
            value = self.parse_assignment()
            return ast.Assign(operator=operator, target=target, value=value, **self.span(start))
        return target

    # ------------------------------------------------------------------
    # Arrow functions
    # ------------------------------------------------------------------

    def _try_arrow_function(self) -> ast.Function | None:
        start = self.tok

        if start.type == TokenType.NAME:
            following = self.peek()
            if start.value == "async" and not following.newline_before:
                if following.type == TokenType.NAME and following.value != "function":
                    # async x => ...
                    checkpoint = self.checkpoint()
                    self.advance()
                    name_tok = self.advance()
                    if self.at("=>") and not self.tok.newline_before:
                        return self._finish_arrow(start, [self._simple_param(name_tok)], True, None)
                    self.rewind(checkpoint)
                    return None
                if following.is_punct("(", "<") and self._looks_like_arrow(is_async=True):
                    self.advance()
                    return self._parse_arrow_with_params(start, is_async=True)
            if following.is_punct("=>") and not following.newline_before:
                name_tok = self.advance()
                return self._finish_arrow(start, [self._simple_param(name_tok)], False, None)
            return None

        if start.is_punct("(", "<") and self._looks_like_arrow(is_async=False):
            return self._parse_arrow_with_params(start, is_async=False)
        return None

    def _parse_arrow_with_params(self, start: Token, is_async: bool) -> ast.Function:
        if self.at("<"):
            self.skip_type_parameters()
        params = self.parse_params()
        return_type = None
        if self.eat(":"):
            return_type = self.skip_type()
        return self._finish_arrow(start, params, is_async, return_type)

    def _looks_like_arrow(self, is_async: bool) -> bool:
        """Scan ahead: type parameters, balanced parens, return type, then ``=>``."""
        checkpoint = self.checkpoint()
        try:
            if is_async:
                self.advance()
            if self.at("<"):
                # `<T,>(x) =>` rather than a JSX element
                type_params = self.checkpoint()
                self.advance()
                if self.tok.type != TokenType.NAME:
                    return False
                self.advance()
                if not self.at(",", "extends", "="):
                    return False
                self.rewind(type_params)
                self.skip_type_parameters()
            if not self.at("("):
                return False
            self.skip_balanced("(", ")")
            if self.at(":"):
                self.advance()
                self.skip_type()
            return self.at("=>") and not self.tok.newline_before
        except ParseError:
            return False
        finally:
            self.rewind(checkpoint)

    def _simple_param(self, name_tok: Token) -> ast.Param:
        identifier = ast.Identifier(
            name=name_tok.value, start=name_tok.start, end=name_tok.end, line=name_tok.line
        )
        return ast.Param(target=identifier, start=name_tok.start, end=name_tok.end, line=name_tok.line)

    def _finish_arrow(
        self, start: Token, params: list[ast.Param], is_async: bool, return_type: str | None
    ) -> ast.Function:
        self.expect("=>")
        body: ast.Node
        if self.at("{"):
            body = self.parse_block()
        else:
            body = self.parse_assignment()
        return ast.Function(
            name=None,
            params=params,
            body=body,
            is_arrow=True,
            is_async=is_async,
            return_type=return_type,
            **self.span(start),
        )

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _parse_yield(self) -> ast.Node:
        start = self.advance()
        self.eat("*")
        argument = None
        if not (
            self.tok.newline_before
            or self.at_eof()
            or (self.tok.type == TokenType.PUNCT and self.tok.value in _EXPRESSION_ENDERS)
        ):
            argument = self.parse_assignment()
        return ast.Unary(operator="yield", argument=argument, **self.span(start))

    def _parse_conditional(self) -> ast.Node:
        start = self.tok
        test = self._parse_binary(0)
        if not self.at("?"):
            return test
        self.advance()
        consequent = self.parse_assignment()
        self.expect(":")
        alternate = self.parse_assignment()
        return ast.Conditional(
            test=test, consequent=consequent, alternate=alternate, **self.span(start)
        )

    def _binary_operator(self) -> str | None:
        tok = self.tok
        if tok.type == TokenType.PUNCT and tok.value in BINARY_PRECEDENCE:
            return tok.value
        if tok.type == TokenType.NAME and tok.value in ("instanceof", "in"):
            return tok.value
        if tok.type == TokenType.NAME and tok.value in ("as", "satisfies") and not tok.newline_before:
            return tok.value
        return None

    def _parse_binary(self, min_precedence: int) -> ast.Node:
        start = self.tok
        left = self._parse_unary()
        while True:
            operator = self._binary_operator()
            if operator is None:
                return left
            precedence = BINARY_PRECEDENCE[operator]
            if precedence <= min_precedence:
                return left
            self.advance()

            if operator in ("as", "satisfies"):
                type_text = self.skip_type()
                left = ast.TypeCast(
                    expression=left, operator=operator, type_text=type_text, **self.span(start)
                )
                continue

            # `**` is right-associative
            next_min = precedence - 1 if operator == "**" else precedence
            right = self._parse_binary(next_min)
            left = ast.Binary(operator=operator, left=left, right=right, **self.span(start))

    def _parse_unary(self) -> ast.Node:
        start = self.tok
        tok = self.tok

        if tok.type == TokenType.PUNCT and tok.value in UNARY_OPERATORS:
            self.advance()
            argument = self._parse_unary()
            return ast.Unary(operator=tok.value, argument=argument, **self.span(start))

        if tok.type == TokenType.PUNCT and tok.value in ("++", "--"):
            self.advance()
            argument = self._parse_unary()
            return ast.Update(operator=tok.value, argument=argument, prefix=True, **self.span(start))

        if tok.type == TokenType.NAME and tok.value in UNARY_KEYWORDS:
            following = self.peek()
            operand_follows = not (
                following.type == TokenType.EOF
                or (following.type == TokenType.PUNCT and following.value in _EXPRESSION_ENDERS | {"=", "=>", "."})
            )
            if operand_follows:
                self.advance()
                argument = self._parse_unary()
                return ast.Unary(operator=tok.value, argument=argument, **self.span(start))

        expression = self._parse_call_member()

        if self.at("++", "--") and not self.tok.newline_before:
            operator = self.advance().value
            return ast.Update(operator=operator, argument=expression, **self.span(start))
        return expression

    # ------------------------------------------------------------------
    # Calls and members
    # ------------------------------------------------------------------

    def parse_arguments(self) -> list[ast.Node]:
        self.expect("(")
        arguments: list[ast.Node] = []
        while not self.at(")"):
            arguments.append(self._parse_element())
            if not self.eat(","):
                break
        self.expect(")")
        return arguments

    def _parse_element(self) -> ast.Node:
        """An array element, call argument or spread."""
        if self.at("..."):
            start = self.advance()
            argument = self.parse_assignment()
            return ast.Spread(argument=argument, **self.span(start))
        return self.parse_assignment()

    def _parse_call_member(self, allow_calls: bool = True) -> ast.Node:
        start = self.tok
        if self.at("new"):
            expression = self._parse_new()
        else:
            expression = self._parse_primary()

        while True:
            tok = self.tok
            if tok.is_punct("."):
                self.advance()
                name = self.expect_name().value
                expression = ast.Member(object=expression, property=name, **self.span(start))
            elif tok.is_punct("?."):
                self.advance()
                if self.at("(") and allow_calls:
                    arguments = self.parse_arguments()
                    expression = ast.Call(
                        callee=expression, arguments=arguments, optional=True, **self.span(start)
                    )
                elif self.at("["):
                    self.advance()
                    computed = self.parse_expression()
                    self.expect("]")
                    expression = ast.Member(
                        object=expression, property=None, computed=computed, optional=True, **self.span(start)
                    )
                else:
                    name = self.expect_name().value
                    expression = ast.Member(
                        object=expression, property=name, optional=True, **self.span(start)
                    )
            elif tok.is_punct("["):
                self.advance()
                computed = self.parse_expression()
                self.expect("]")
                expression = ast.Member(
                    object=expression, property=None, computed=computed, **self.span(start)
                )
            elif tok.is_punct("(") and allow_calls:
                arguments = self.parse_arguments()
                expression = ast.Call(callee=expression, arguments=arguments, **self.span(start))
            elif tok.is_punct("<") and allow_calls and not tok.newline_before:
                type_arguments = self.try_type_arguments()
                if type_arguments is None:
                    return expression
                if self.tok.type == TokenType.TEMPLATE:
                    continue
                arguments = self.parse_arguments()
                expression = ast.Call(
                    callee=expression,
                    arguments=arguments,
                    type_arguments=type_arguments,
                    **self.span(start),
                )
            elif tok.type == TokenType.TEMPLATE:
                quasi = self._parse_template()
                expression = ast.TaggedTemplate(tag=expression, quasi=quasi, **self.span(start))
            elif tok.is_punct("!") and not tok.newline_before and not self._starts_expression(self.peek()):
                self.advance()
                expression = ast.TypeCast(expression=expression, operator="!", **self.span(start))
            else:
                return expression

    @staticmethod
    def _starts_expression(token: Token) -> bool:
        """Whether `token` could begin an operand (used to tell ``x!`` from ``x ! y``)."""
        if token.type in (TokenType.NAME, TokenType.STRING, TokenType.NUMBER, TokenType.TEMPLATE):
            return not (token.type == TokenType.NAME and token.value in ("as", "satisfies", "in", "instanceof"))
        return token.type == TokenType.PUNCT and token.value in ("(", "[", "{")

    def _parse_new(self) -> ast.Node:
        start = self.expect("new")
        if self.at("."):
            # new.target
            self.advance()
            name = self.expect_name().value
            return ast.Member(
                object=ast.Identifier(name="new", start=start.start, end=start.end, line=start.line),
                property=name,
                **self.span(start),
            )
        callee = self._parse_call_member(allow_calls=False)
        if self.at("<"):
            self.try_type_arguments()
        arguments = self.parse_arguments() if self.at("(") else []
        return ast.New(callee=callee, arguments=arguments, **self.span(start))

    # ------------------------------------------------------------------
    # Primary expressions
    # ------------------------------------------------------------------

    def _parse_primary(self) -> ast.Node:
        tok = self.tok

        if tok.type == TokenType.NAME:
            return self._parse_name_primary()

        if tok.type == TokenType.STRING:
            self.advance()
            raw = self.text[tok.start : tok.end]
            return ast.Literal(value=tok.value, literal_kind="string", raw=raw, **self.span(tok))

        if tok.type == TokenType.NUMBER:
            self.advance()
            return ast.Literal(value=tok.value, literal_kind="number", raw=tok.value, **self.span(tok))

        if tok.type == TokenType.REGEX:
            self.advance()
            return ast.Literal(value=tok.value, literal_kind="regex", raw=tok.value, **self.span(tok))

        if tok.type == TokenType.TEMPLATE:
            return self._parse_template()

        if tok.is_punct("("):
            self.advance()
            expression = self.parse_expression()
            self.expect(")")
            return expression

        if tok.is_punct("["):
            return self._parse_array()

        if tok.is_punct("{"):
            return self._parse_object()

        if tok.is_punct("<"):
            return self.parse_jsx()

        if tok.is_punct("@"):
            # Decorated class expression
            self._skip_decorators()
            return self._parse_primary()

        raise self.error(f"Unexpected token {tok.value!r}" if tok.value else "Unexpected end of file")

    def _parse_name_primary(self) -> ast.Node:
        tok = self.tok
        value = tok.value

        if value == "function":
            self.advance()
            return self._parse_function_expression(tok, is_async=False)
        if value == "async" and self.peek().is_name("function") and not self.peek().newline_before:
            self.advance()
            self.advance()
            return self._parse_function_expression(tok, is_async=True)
        if value == "class":
            return self.parse_class(is_declaration=False)
        if value in ("true", "false"):
            self.advance()
            return ast.Literal(value=value, literal_kind="boolean", raw=value, **self.span(tok))
        if value == "null":
            self.advance()
            return ast.Literal(value=None, literal_kind="null", raw=value, **self.span(tok))

        self.advance()
        return ast.Identifier(name=value, **self.span(tok))

    def _parse_function_expression(self, start: Token, is_async: bool) -> ast.Function:
        self.eat("*")
        name = None
        if self.tok.type == TokenType.NAME and not self.at("("):
            name = self.advance().value
        return self.parse_function_rest(start, name, is_async, is_declaration=False)

    def _skip_decorators(self) -> None:
        while self.at("@"):
            self.advance()
            self._parse_call_member()

    def _parse_template(self) -> ast.TemplateLiteral:
        tok = self.advance()
        expressions = []
        for span_start, span_end in tok.spans:
            sub = self.sub_parser(span_start, span_end)
            expressions.append(sub.parse_expression())
            if not sub.at_eof():
                raise sub.error("Unexpected token in template expression")
        return ast.TemplateLiteral(quasis=list(tok.parts), expressions=expressions, **self.span(tok))

    def _parse_array(self) -> ast.Array:
        start = self.expect("[")
        elements: list[ast.Node | None] = []
        while not self.at("]"):
            if self.at(","):
                self.advance()
                elements.append(None)
                continue
            elements.append(self._parse_element())
            if not self.eat(","):
                break
        self.expect("]")
        return ast.Array(elements=elements, **self.span(start))

    def _parse_object(self) -> ast.Object:
        start = self.expect("{")
        properties: list[ast.Node] = []
        while not self.at("}"):
            properties.append(self._parse_property())
            if not self.eat(","):
                break
        self.expect("}")
        return ast.Object(properties=properties, **self.span(start))

    def _parse_property_key(self) -> tuple[str | None, ast.Node | None]:
        tok = self.tok
        if tok.is_punct("["):
            self.advance()
            computed = self.parse_assignment()
            self.expect("]")
            return None, computed
        if tok.type in (TokenType.NAME, TokenType.STRING, TokenType.NUMBER):
            self.advance()
            return tok.value, None
        raise self.error(f"Unexpected {tok.value!r} in object literal")

    def _parse_property(self) -> ast.Node:
        start = self.tok
        if self.at("..."):
            self.advance()
            argument = self.parse_assignment()
            return ast.Spread(argument=argument, **self.span(start))

        is_async = False
        following = self.peek()
        modifier_follows = following.type in (TokenType.NAME, TokenType.STRING, TokenType.NUMBER) or (
            following.type == TokenType.PUNCT and following.value in ("[", "*")
        )
        if self.at("get", "set", "async") and modifier_follows:
            is_async = self.advance().value == "async"
        self.eat("*")

        key_tok = self.tok
        key, computed_key = self._parse_property_key()

        if self.at("(", "<"):
            method = self.parse_function_rest(key_tok, key, is_async, is_declaration=False)
            return ast.Property(
                key=key, value=method, computed_key=computed_key, is_method=True, **self.span(start)
            )

        if self.eat(":"):
            value = self.parse_assignment()
            return ast.Property(key=key, value=value, computed_key=computed_key, **self.span(start))

        if key is None:
            raise self.error("Computed property needs a value")
        identifier = ast.Identifier(name=key, start=key_tok.start, end=key_tok.end, line=key_tok.line)
        value: ast.Node = identifier
        if self.at("="):
            # Shorthand with default, only valid as a destructuring pattern
            self.advance()
            default = self.parse_assignment()
            value = ast.Assign(operator="=", target=identifier, value=default, **self.span(key_tok))
        return ast.Property(key=key, value=value, shorthand=True, **self.span(start))
