"""
Statement parser mixin.

Covers declarations (variables, functions, classes, imports, exports and
the TypeScript-only interface / type / enum / namespace forms), control
flow and expression statements. TypeScript declarations keep only what
the extractors read: names and member lists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...core.errors import ParseError
from . import ast
from .lexer import Token, TokenType

_DECLARATION_KEYWORDS = frozenset({"var", "let", "const"})
_PARAM_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override"})
_MEMBER_MODIFIERS = frozenset(
    {
        "static",
        "public",
        "private",
        "protected",
        "readonly",
        "abstract",
        "override",
        "declare",
        "accessor",
        "async",
        "get",
        "set",
    }
)
# A modifier word followed by one of these is itself the member name
_MEMBER_NAME_FOLLOWERS = frozenset({"(", "=", ";", ":", "?", "!", "}", "<"})


class StatementParserMixin:
    """Parser mixin for statements and declarations."""

    if TYPE_CHECKING:
        text: str
        tok: Token
        last_end: int
        advance: Any
        at: Any
        at_eof: Any
        eat: Any
        expect: Any
        expect_name: Any
        consume_semicolon: Any
        error: Any
        peek: Any
        span: Any
        checkpoint: Any
        rewind: Any
        skip_balanced: Any
        skip_type: Any
        skip_type_parameters: Any
        parse_type_members: Any
        parse_expression: Any
        parse_assignment: Any
        _parse_call_member: Any
        _parse_object: Any
        _parse_array: Any
        _parse_property_key: Any
        _skip_decorators: Any

    # ------------------------------------------------------------------
    # Program and blocks
    # ------------------------------------------------------------------

    def parse_program(self) -> ast.Program:
        start = self.tok
        body = []
        while not self.at_eof():
            body.append(self.parse_statement())
        return ast.Program(body=body, **self.span(start))

    def parse_block(self) -> ast.Block:
        start = self.expect("{")
        body = []
        while not self.at("}"):
            if self.at_eof():
                raise self.error("Unterminated block", start)
            body.append(self.parse_statement())
        self.expect("}")
        return ast.Block(body=body, **self.span(start))

    def parse_statement(self) -> ast.Node:
        tok = self.tok

        if tok.is_punct("{"):
            return self.parse_block()
        if tok.is_punct(";"):
            self.advance()
            return ast.Empty(**self.span(tok))
        if tok.is_punct("@"):
            self._skip_decorators()
            return self.parse_statement()

        if tok.type == TokenType.NAME:
            statement = self._parse_keyword_statement(tok)
            if statement is not None:
                return statement

        expression = self.parse_expression()
        self.consume_semicolon()
        return ast.ExpressionStatement(expression=expression, **self.span(tok))

    def _parse_keyword_statement(self, tok: Token) -> ast.Node | None:
        """Dispatch on a leading keyword; None means parse as an expression."""
        value = tok.value
        following = self.peek()
        same_line = not following.newline_before

        if value in _DECLARATION_KEYWORDS and (
            following.type == TokenType.NAME or following.is_punct("{", "[")
        ):
            if value == "const" and following.is_name("enum"):
                self.advance()
                return self._parse_enum(tok)
            declaration = self._parse_variable_declaration()
            self.consume_semicolon()
            declaration.end = self.last_end
            return declaration

        if value == "function":
            return self._parse_function_declaration(tok)
        if value == "async" and following.is_name("function") and same_line:
            return self._parse_function_declaration(tok)
        if value == "class":
            return self.parse_class(is_declaration=True)
        if value == "abstract" and following.is_name("class") and same_line:
            self.advance()
            return self.parse_class(is_declaration=True)

        if value == "import" and not following.is_punct("(", "."):
            return self._parse_import()
        if value == "export":
            return self._parse_export()

        if value == "if":
            return self._parse_if()
        if value == "for":
            return self._parse_for()
        if value == "while":
            return self._parse_while()
        if value == "do":
            return self._parse_do_while()
        if value == "switch":
            return self._parse_switch()
        if value == "try":
            return self._parse_try()
        if value == "return":
            return self._parse_return()
        if value == "throw":
            self.advance()
            argument = self.parse_expression()
            self.consume_semicolon()
            return ast.Throw(argument=argument, **self.span(tok))
        if value in ("break", "continue"):
            self.advance()
            label = None
            if self.tok.type == TokenType.NAME and not self.tok.newline_before:
                label = self.advance().value
            self.consume_semicolon()
            return ast.Jump(keyword=value, label=label, **self.span(tok))
        if value == "debugger":
            self.advance()
            self.consume_semicolon()
            return ast.Empty(**self.span(tok))

        # TypeScript declarations
        if same_line and following.type == TokenType.NAME:
            if value == "interface":
                return self._parse_interface()
            if value == "type":
                return self._parse_type_alias()
            if value == "enum":
                return self._parse_enum(tok)
            if value == "declare":
                self.advance()
                return self.parse_statement()
        if same_line and value in ("namespace", "module") and following.type in (TokenType.NAME, TokenType.STRING):
            return self._parse_namespace()
        if value == "global" and following.is_punct("{"):
            return self._parse_namespace()

        # Labeled statement
        if following.is_punct(":") and value not in ("default", "case"):
            self.advance()
            self.advance()
            return self.parse_statement()
        return None

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _parse_binding_target(self) -> ast.Node:
        if self.at("{"):
            return self._parse_object()
        if self.at("["):
            return self._parse_array()
        name = self.expect_name()
        return ast.Identifier(name=name.value, **self.span(name))

    def _parse_variable_declaration(self) -> ast.VariableDeclaration:
        """Parse ``const a = 1, b`` without the terminator."""
        start = self.advance()
        declarations = []
        while True:
            declarator_start = self.tok
            target = self._parse_binding_target()
            self.eat("!")
            type_text = self.skip_type() if self.eat(":") else None
            init = self.parse_assignment() if self.eat("=") else None
            declarations.append(
                ast.VariableDeclarator(
                    target=target, init=init, type_text=type_text, **self.span(declarator_start)
                )
            )
            if not self.eat(","):
                break
        return ast.VariableDeclaration(keyword=start.value, declarations=declarations, **self.span(start))

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _parse_function_declaration(self, start: Token) -> ast.Function:
        is_async = self.eat("async")
        self.expect("function")
        self.eat("*")
        name = None
        if self.tok.type == TokenType.NAME:
            name = self.advance().value
        return self.parse_function_rest(start, name, is_async, is_declaration=True)

    def parse_function_rest(
        self, start: Token, name: str | None, is_async: bool, is_declaration: bool
    ) -> ast.Function:
        """Parse type parameters, parameters, return type and body."""
        if self.at("<"):
            self.skip_type_parameters()
        params = self.parse_params()
        return_type = self.skip_type() if self.eat(":") else None

        body = None
        if self.at("{"):
            body = self.parse_block()
        else:
            # Overload or abstract signature
            self.consume_semicolon()
        return ast.Function(
            name=name,
            params=params,
            body=body,
            is_async=is_async,
            is_declaration=is_declaration,
            return_type=return_type,
            **self.span(start),
        )

    def parse_params(self) -> list[ast.Param]:
        self.expect("(")
        params: list[ast.Param] = []
        while not self.at(")"):
            start = self.tok
            self._skip_decorators()
            while self.tok.value in _PARAM_MODIFIERS and self.tok.type == TokenType.NAME:
                following = self.peek()
                if following.type != TokenType.NAME and not following.is_punct("{", "["):
                    break
                self.advance()
            rest = self.eat("...")
            target = self._parse_binding_target()
            optional = self.eat("?")
            type_text = self.skip_type() if self.eat(":") else None
            default = self.parse_assignment() if self.eat("=") else None
            params.append(
                ast.Param(
                    target=target,
                    default=default,
                    type_text=type_text,
                    rest=rest,
                    optional=optional,
                    **self.span(start),
                )
            )
            if not self.eat(","):
                break
        self.expect(")")
        return params

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def parse_class(self, is_declaration: bool) -> ast.Class:
        start = self.expect("class")
        name = None
        if self.tok.type == TokenType.NAME and not self.at("extends", "implements"):
            name = self.advance().value
        if self.at("<"):
            self.skip_type_parameters()

        superclass = None
        if self.eat("extends"):
            superclass = self._parse_call_member(allow_calls=False)
            if self.at("<"):
                self.skip_type_parameters()
        if self.eat("implements"):
            self.skip_type()
            while self.eat(","):
                self.skip_type()

        self.expect("{")
        members = []
        while not self.at("}"):
            if self.at_eof():
                raise self.error("Unterminated class body", start)
            if self.eat(";"):
                continue
            member = self._parse_class_member()
            if member is not None:
                members.append(member)
        self.expect("}")
        return ast.Class(
            name=name, superclass=superclass, members=members, is_declaration=is_declaration, **self.span(start)
        )

    def _parse_class_member(self) -> ast.ClassMember | None:
        start = self.tok
        self._skip_decorators()

        is_static = False
        is_async = False
        while self.tok.type == TokenType.NAME and self.tok.value in _MEMBER_MODIFIERS:
            following = self.peek()
            if following.type == TokenType.PUNCT and following.value in _MEMBER_NAME_FOLLOWERS:
                break
            if self.at("static") and following.is_punct("{"):
                self.advance()
                block = self.parse_block()
                return ast.ClassMember(name="static", value=block, is_static=True, **self.span(start))
            modifier = self.advance().value
            is_static = is_static or modifier == "static"
            is_async = is_async or modifier == "async"
        self.eat("*")

        key_tok = self.tok
        if self.at("["):
            checkpoint = self.checkpoint()
            try:
                self._parse_property_key()
            except ParseError:
                # Index signature: [key: string]: Type
                self.rewind(checkpoint)
                self.skip_balanced("[", "]")
                if self.eat(":"):
                    self.skip_type()
                self.consume_semicolon()
                return None
            name = self.text[key_tok.start : self.last_end]
        else:
            key, _ = self._parse_property_key()
            name = key or ""

        if self.at("(", "<"):
            method = self.parse_function_rest(key_tok, name, is_async, is_declaration=False)
            return ast.ClassMember(
                name=name, value=method, is_method=True, is_static=is_static, **self.span(start)
            )

        if not self.eat("?"):
            self.eat("!")
        type_text = self.skip_type() if self.eat(":") else None
        value = self.parse_assignment() if self.eat("=") else None
        self.consume_semicolon()
        return ast.ClassMember(
            name=name, value=value, is_static=is_static, type_text=type_text, **self.span(start)
        )

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _parse_paren_expression(self) -> ast.Node:
        self.expect("(")
        expression = self.parse_expression()
        self.expect(")")
        return expression

    def _parse_if(self) -> ast.If:
        start = self.expect("if")
        test = self._parse_paren_expression()
        consequent = self.parse_statement()
        alternate = self.parse_statement() if self.eat("else") else None
        return ast.If(test=test, consequent=consequent, alternate=alternate, **self.span(start))

    def _parse_for(self) -> ast.Loop:
        start = self.expect("for")
        self.eat("await")
        self.expect("(")

        init: ast.Node | None = None
        if self.at(*_DECLARATION_KEYWORDS) and (self.peek().type == TokenType.NAME or self.peek().is_punct("{", "[")):
            init = self._parse_variable_declaration()
        elif not self.at(";"):
            init = self.parse_expression()

        if self.at("of", "in") and init is not None:
            loop_kind = "for-" + self.advance().value
            iterable = self.parse_assignment() if loop_kind == "for-of" else self.parse_expression()
            self.expect(")")
            body = self.parse_statement()
            return ast.Loop(loop_kind=loop_kind, head=[init, iterable], body=body, **self.span(start))

        if isinstance(init, ast.Binary) and init.operator == "in" and self.at(")"):
            # `for (key in obj)` with an existing binding
            self.advance()
            body = self.parse_statement()
            return ast.Loop(loop_kind="for-in", head=[init.left, init.right], body=body, **self.span(start))

        self.expect(";")
        test = None if self.at(";") else self.parse_expression()
        self.expect(";")
        update = None if self.at(")") else self.parse_expression()
        self.expect(")")
        body = self.parse_statement()
        head = [part for part in (init, test, update) if part is not None]
        return ast.Loop(loop_kind="for", head=head, body=body, **self.span(start))

    def _parse_while(self) -> ast.Loop:
        start = self.expect("while")
        test = self._parse_paren_expression()
        body = self.parse_statement()
        return ast.Loop(loop_kind="while", head=[test], body=body, **self.span(start))

    def _parse_do_while(self) -> ast.Loop:
        start = self.expect("do")
        body = self.parse_statement()
        self.expect("while")
        test = self._parse_paren_expression()
        self.eat(";")
        return ast.Loop(loop_kind="do-while", head=[test], body=body, **self.span(start))

    def _parse_switch(self) -> ast.Switch:
        start = self.expect("switch")
        discriminant = self._parse_paren_expression()
        self.expect("{")
        cases = []
        while not self.at("}"):
            case_start = self.tok
            if self.eat("default"):
                test = None
            else:
                self.expect("case")
                test = self.parse_expression()
            self.expect(":")
            body = []
            while not self.at("case", "default", "}"):
                if self.at_eof():
                    raise self.error("Unterminated switch", start)
                body.append(self.parse_statement())
            cases.append(ast.SwitchCase(test=test, body=body, **self.span(case_start)))
        self.expect("}")
        return ast.Switch(discriminant=discriminant, cases=cases, **self.span(start))

    def _parse_try(self) -> ast.Try:
        start = self.expect("try")
        block = self.parse_block()
        param = None
        handler = None
        finalizer = None
        if self.eat("catch"):
            if self.eat("("):
                param = self._parse_binding_target()
                if self.eat(":"):
                    self.skip_type()
                self.expect(")")
            handler = self.parse_block()
        if self.eat("finally"):
            finalizer = self.parse_block()
        if handler is None and finalizer is None:
            raise self.error("Missing catch or finally after try", start)
        return ast.Try(block=block, param=param, handler=handler, finalizer=finalizer, **self.span(start))

    def _parse_return(self) -> ast.Return:
        start = self.expect("return")
        argument = None
        if not (self.at(";", "}") or self.at_eof() or self.tok.newline_before):
            argument = self.parse_expression()
        self.consume_semicolon()
        return ast.Return(argument=argument, **self.span(start))

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def _expect_module_source(self) -> str:
        if self.tok.type != TokenType.STRING:
            raise self.error("Expected module path string")
        source = self.advance().value
        if self.at("assert", "with") and self.peek().is_punct("{") and not self.tok.newline_before:
            self.advance()
            self.skip_balanced("{", "}")
        return source

    def _parse_import(self) -> ast.Import:
        start = self.expect("import")

        if self.tok.type == TokenType.STRING:
            source = self._expect_module_source()
            self.consume_semicolon()
            return ast.Import(source=source, **self.span(start))

        type_only = False
        following = self.peek()
        if self.at("type") and (
            following.is_punct("{", "*") or (following.type == TokenType.NAME and following.value != "from")
        ):
            self.advance()
            type_only = True

        specifiers: list[ast.ImportSpecifier] = []
        if self.tok.type == TokenType.NAME:
            local = self.advance()
            specifiers.append(ast.ImportSpecifier(imported="default", local=local.value, **self.span(local)))
            self.eat(",")
        if self.at("*"):
            star = self.advance()
            self.expect("as")
            local = self.expect_name()
            specifiers.append(ast.ImportSpecifier(imported="*", local=local.value, **self.span(star)))
        elif self.at("{"):
            self.advance()
            while not self.at("}"):
                spec_start = self.tok
                spec_type_only = False
                if self.at("type") and self.peek().type in (TokenType.NAME, TokenType.STRING):
                    self.advance()
                    spec_type_only = True
                imported = self.advance().value
                local = imported
                if self.eat("as"):
                    local = self.expect_name().value
                specifiers.append(
                    ast.ImportSpecifier(
                        imported=imported,
                        local=local,
                        type_only=type_only or spec_type_only,
                        **self.span(spec_start),
                    )
                )
                if not self.eat(","):
                    break
            self.expect("}")

        self.expect("from")
        source = self._expect_module_source()
        self.consume_semicolon()
        return ast.Import(source=source, specifiers=specifiers, type_only=type_only, **self.span(start))

    def _parse_export(self) -> ast.Export:
        start = self.expect("export")

        if self.eat("default"):
            tok = self.tok
            following = self.peek()
            if tok.is_name("function") or (tok.is_name("async") and following.is_name("function")):
                declaration: ast.Node = self._parse_function_declaration(tok)
            elif tok.is_name("class"):
                declaration = self.parse_class(is_declaration=True)
            elif tok.is_name("abstract") and following.is_name("class"):
                self.advance()
                declaration = self.parse_class(is_declaration=True)
            elif tok.is_name("interface") and following.type == TokenType.NAME:
                declaration = self._parse_interface()
            else:
                declaration = self.parse_assignment()
                self.consume_semicolon()
            return ast.Export(declaration=declaration, is_default=True, **self.span(start))

        if self.at("="):
            # export = value
            self.advance()
            declaration = self.parse_expression()
            self.consume_semicolon()
            return ast.Export(declaration=declaration, is_default=True, **self.span(start))

        if self.at("type") and self.peek().is_punct("{", "*"):
            self.advance()

        if self.at("*"):
            star = self.advance()
            exported = "*"
            if self.eat("as"):
                exported = self.advance().value
            self.expect("from")
            source = self._expect_module_source()
            self.consume_semicolon()
            specifier = ast.ExportSpecifier(local="*", exported=exported, **self.span(star))
            return ast.Export(specifiers=[specifier], source=source, **self.span(start))

        if self.at("{"):
            self.advance()
            specifiers = []
            while not self.at("}"):
                spec_start = self.tok
                if self.at("type") and self.peek().type in (TokenType.NAME, TokenType.STRING):
                    self.advance()
                local = self.advance().value
                exported = local
                if self.eat("as"):
                    exported = self.advance().value
                specifiers.append(ast.ExportSpecifier(local=local, exported=exported, **self.span(spec_start)))
                if not self.eat(","):
                    break
            self.expect("}")
            source = None
            if self.eat("from"):
                source = self._expect_module_source()
            self.consume_semicolon()
            return ast.Export(specifiers=specifiers, source=source, **self.span(start))

        declaration = self.parse_statement()
        return ast.Export(declaration=declaration, **self.span(start))

    # ------------------------------------------------------------------
    # TypeScript declarations
    # ------------------------------------------------------------------

    def _parse_interface(self) -> ast.TypeDeclaration:
        start = self.expect("interface")
        name = self.expect_name().value
        if self.at("<"):
            self.skip_type_parameters()
        if self.eat("extends"):
            self.skip_type()
            while self.eat(","):
                self.skip_type()
        body_start = self.tok.start
        members = self.parse_type_members()
        return ast.TypeDeclaration(
            keyword="interface",
            name=name,
            members=members,
            type_text=self.text[body_start : self.last_end],
            **self.span(start),
        )

    def _parse_type_alias(self) -> ast.TypeDeclaration:
        start = self.expect("type")
        name = self.expect_name().value
        if self.at("<"):
            self.skip_type_parameters()
        self.expect("=")

        type_start = self.tok.start
        members: list[ast.TypeMember] = []
        if self.at("{"):
            members = self.parse_type_members()
            while self.at("[") and not self.tok.newline_before:
                self.skip_balanced("[", "]")
            if self.at("&", "|"):
                self.advance()
                self.skip_type()
        else:
            self.skip_type()
        type_text = self.text[type_start : self.last_end]
        self.consume_semicolon()
        return ast.TypeDeclaration(
            keyword="type", name=name, members=members, type_text=type_text, **self.span(start)
        )

    def _parse_enum(self, start: Token) -> ast.TypeDeclaration:
        self.expect("enum")
        name = self.expect_name().value
        self.expect("{")
        members = []
        while not self.at("}"):
            member_name = self.advance().value
            value_text = None
            if self.eat("="):
                value_start = self.tok.start
                self.parse_assignment()
                value_text = self.text[value_start : self.last_end]
            members.append(ast.TypeMember(member_name, value_text))
            if not self.eat(","):
                break
        self.expect("}")
        return ast.TypeDeclaration(keyword="enum", name=name, members=members, **self.span(start))

    def _parse_namespace(self) -> ast.TypeDeclaration:
        start = self.advance()
        name = None
        if start.value != "global":
            name = self.advance().value
            while self.eat("."):
                name += "." + self.expect_name().value
        if self.at("{"):
            self.skip_balanced("{", "}")
        else:
            self.consume_semicolon()
        return ast.TypeDeclaration(keyword=start.value, name=name, **self.span(start))
