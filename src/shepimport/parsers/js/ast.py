"""
Syntax tree for JavaScript / TypeScript / JSX.

The node set is closed: every node class carries a `NodeKind`, and
`CHILD_FIELDS` names the child-bearing fields of each kind. Traversal goes
through that table, so adding a kind without listing its children fails the
completeness check in the test suite instead of being silently skipped.

TypeScript types are not represented as nodes; where a type matters it is
kept as source text (``type_text``).
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class NodeKind(str, Enum):
    # Module / statements
    PROGRAM = "program"
    VARIABLE_DECLARATION = "variable_declaration"
    VARIABLE_DECLARATOR = "variable_declarator"
    FUNCTION = "function"
    PARAM = "param"
    CLASS = "class"
    CLASS_MEMBER = "class_member"
    RETURN = "return"
    IF = "if"
    LOOP = "loop"
    SWITCH = "switch"
    SWITCH_CASE = "switch_case"
    TRY = "try"
    THROW = "throw"
    JUMP = "jump"
    BLOCK = "block"
    EXPRESSION_STATEMENT = "expression_statement"
    EMPTY = "empty"
    IMPORT = "import"
    IMPORT_SPECIFIER = "import_specifier"
    EXPORT = "export"
    EXPORT_SPECIFIER = "export_specifier"
    TYPE_DECLARATION = "type_declaration"
    # Expressions
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    TEMPLATE_LITERAL = "template_literal"
    TAGGED_TEMPLATE = "tagged_template"
    ARRAY = "array"
    OBJECT = "object"
    PROPERTY = "property"
    SPREAD = "spread"
    UNARY = "unary"
    UPDATE = "update"
    BINARY = "binary"
    ASSIGN = "assign"
    CONDITIONAL = "conditional"
    CALL = "call"
    NEW = "new"
    MEMBER = "member"
    SEQUENCE = "sequence"
    TYPE_CAST = "type_cast"
    # JSX
    JSX_ELEMENT = "jsx_element"
    JSX_FRAGMENT = "jsx_fragment"
    JSX_ATTRIBUTE = "jsx_attribute"
    JSX_SPREAD_ATTRIBUTE = "jsx_spread_attribute"
    JSX_TEXT = "jsx_text"
    JSX_EXPRESSION = "jsx_expression"


@dataclass(kw_only=True)
class Node:
    """Base of all nodes; offsets index into the parsed source text."""

    kind: ClassVar[NodeKind]

    start: int = 0
    end: int = 0
    line: int = 0

    def source(self, text: str) -> str:
        return text[self.start : self.end]


@dataclass(frozen=True)
class TypeMember:
    """A property of an interface or object type literal."""

    name: str
    type_text: str | None
    optional: bool = False


# =============================================================================
# Module / statements
# =============================================================================


@dataclass
class Program(Node):
    kind: ClassVar[NodeKind] = NodeKind.PROGRAM
    body: list[Node] = field(default_factory=list)


@dataclass
class VariableDeclaration(Node):
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DECLARATION
    keyword: str  # const | let | var
    declarations: list[VariableDeclarator] = field(default_factory=list)


@dataclass
class VariableDeclarator(Node):
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DECLARATOR
    target: Node
    init: Node | None = None
    type_text: str | None = None


@dataclass
class Function(Node):
    """Function declaration, function expression, method or arrow function."""

    kind: ClassVar[NodeKind] = NodeKind.FUNCTION
    name: str | None
    params: list[Param] = field(default_factory=list)
    body: Node | None = None  # Block, expression (arrow shorthand) or None (signature)
    is_arrow: bool = False
    is_async: bool = False
    is_declaration: bool = False
    return_type: str | None = None

    @property
    def param_names(self) -> list[str]:
        return [p.name for p in self.params if p.name]


@dataclass
class Param(Node):
    kind: ClassVar[NodeKind] = NodeKind.PARAM
    target: Node
    default: Node | None = None
    type_text: str | None = None
    rest: bool = False
    optional: bool = False

    @property
    def name(self) -> str | None:
        return self.target.name if isinstance(self.target, Identifier) else None


@dataclass
class Class(Node):
    kind: ClassVar[NodeKind] = NodeKind.CLASS
    name: str | None
    superclass: Node | None = None
    members: list[ClassMember] = field(default_factory=list)
    is_declaration: bool = False


@dataclass
class ClassMember(Node):
    kind: ClassVar[NodeKind] = NodeKind.CLASS_MEMBER
    name: str
    value: Node | None = None  # Function for methods, initializer for properties
    is_method: bool = False
    is_static: bool = False
    type_text: str | None = None


@dataclass
class Return(Node):
    kind: ClassVar[NodeKind] = NodeKind.RETURN
    argument: Node | None = None


@dataclass
class If(Node):
    kind: ClassVar[NodeKind] = NodeKind.IF
    test: Node
    consequent: Node
    alternate: Node | None = None


@dataclass
class Loop(Node):
    """``for``, ``for-in``, ``for-of``, ``while`` and ``do-while``."""

    kind: ClassVar[NodeKind] = NodeKind.LOOP
    loop_kind: str
    head: list[Node] = field(default_factory=list)
    body: Node | None = None


@dataclass
class Switch(Node):
    kind: ClassVar[NodeKind] = NodeKind.SWITCH
    discriminant: Node
    cases: list[SwitchCase] = field(default_factory=list)


@dataclass
class SwitchCase(Node):
    kind: ClassVar[NodeKind] = NodeKind.SWITCH_CASE
    test: Node | None  # None for default
    body: list[Node] = field(default_factory=list)


@dataclass
class Try(Node):
    kind: ClassVar[NodeKind] = NodeKind.TRY
    block: Block
    param: Node | None = None
    handler: Block | None = None
    finalizer: Block | None = None


@dataclass
class Throw(Node):
    kind: ClassVar[NodeKind] = NodeKind.THROW
    argument: Node


@dataclass
class Jump(Node):
    """``break`` or ``continue``."""

    kind: ClassVar[NodeKind] = NodeKind.JUMP
    keyword: str
    label: str | None = None


@dataclass
class Block(Node):
    kind: ClassVar[NodeKind] = NodeKind.BLOCK
    body: list[Node] = field(default_factory=list)


@dataclass
class ExpressionStatement(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION_STATEMENT
    expression: Node


@dataclass
class Empty(Node):
    kind: ClassVar[NodeKind] = NodeKind.EMPTY


@dataclass
class Import(Node):
    kind: ClassVar[NodeKind] = NodeKind.IMPORT
    source: str
    specifiers: list[ImportSpecifier] = field(default_factory=list)
    type_only: bool = False


@dataclass
class ImportSpecifier(Node):
    kind: ClassVar[NodeKind] = NodeKind.IMPORT_SPECIFIER
    imported: str  # "default", "*" or the exported name
    local: str
    type_only: bool = False


@dataclass
class Export(Node):
    """
    Any export form.

    ``export default <expr>`` and ``export <declaration>`` set `declaration`;
    ``export { a as b }`` sets `specifiers`.
    """

    kind: ClassVar[NodeKind] = NodeKind.EXPORT
    declaration: Node | None = None
    specifiers: list[ExportSpecifier] = field(default_factory=list)
    is_default: bool = False
    source: str | None = None


@dataclass
class ExportSpecifier(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXPORT_SPECIFIER
    local: str
    exported: str


@dataclass
class TypeDeclaration(Node):
    """``interface``, ``type``, ``enum``, ``declare`` and ``namespace`` blocks."""

    kind: ClassVar[NodeKind] = NodeKind.TYPE_DECLARATION
    keyword: str
    name: str | None
    members: list[TypeMember] = field(default_factory=list)
    type_text: str | None = None


# =============================================================================
# Expressions
# =============================================================================


@dataclass
class Identifier(Node):
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER
    name: str


@dataclass
class Literal(Node):
    kind: ClassVar[NodeKind] = NodeKind.LITERAL
    value: str | None
    literal_kind: str  # string | number | boolean | null | regex
    raw: str = ""


@dataclass
class TemplateLiteral(Node):
    kind: ClassVar[NodeKind] = NodeKind.TEMPLATE_LITERAL
    quasis: list[str] = field(default_factory=list)
    expressions: list[Node] = field(default_factory=list)


@dataclass
class TaggedTemplate(Node):
    kind: ClassVar[NodeKind] = NodeKind.TAGGED_TEMPLATE
    tag: Node
    quasi: TemplateLiteral


@dataclass
class Array(Node):
    kind: ClassVar[NodeKind] = NodeKind.ARRAY
    elements: list[Node | None] = field(default_factory=list)


@dataclass
class Object(Node):
    kind: ClassVar[NodeKind] = NodeKind.OBJECT
    properties: list[Node] = field(default_factory=list)  # Property | Spread

    def get(self, key: str) -> Node | None:
        """Value of the first non-computed property named `key`."""
        for prop in self.properties:
            if isinstance(prop, Property) and prop.key == key:
                return prop.value
        return None


@dataclass
class Property(Node):
    kind: ClassVar[NodeKind] = NodeKind.PROPERTY
    key: str | None  # None when computed
    value: Node
    computed_key: Node | None = None
    shorthand: bool = False
    is_method: bool = False


@dataclass
class Spread(Node):
    kind: ClassVar[NodeKind] = NodeKind.SPREAD
    argument: Node


@dataclass
class Unary(Node):
    """Prefix operators including ``await``, ``yield``, ``typeof`` and ``delete``."""

    kind: ClassVar[NodeKind] = NodeKind.UNARY
    operator: str
    argument: Node | None


@dataclass
class Update(Node):
    kind: ClassVar[NodeKind] = NodeKind.UPDATE
    operator: str
    argument: Node
    prefix: bool = False


@dataclass
class Binary(Node):
    """Arithmetic, comparison and logical operators."""

    kind: ClassVar[NodeKind] = NodeKind.BINARY
    operator: str
    left: Node
    right: Node


@dataclass
class Assign(Node):
    kind: ClassVar[NodeKind] = NodeKind.ASSIGN
    operator: str
    target: Node
    value: Node


@dataclass
class Conditional(Node):
    kind: ClassVar[NodeKind] = NodeKind.CONDITIONAL
    test: Node
    consequent: Node
    alternate: Node


@dataclass
class Call(Node):
    kind: ClassVar[NodeKind] = NodeKind.CALL
    callee: Node
    arguments: list[Node] = field(default_factory=list)
    optional: bool = False
    type_arguments: str | None = None


@dataclass
class New(Node):
    kind: ClassVar[NodeKind] = NodeKind.NEW
    callee: Node
    arguments: list[Node] = field(default_factory=list)


@dataclass
class Member(Node):
    kind: ClassVar[NodeKind] = NodeKind.MEMBER
    object: Node
    property: str | None  # None when computed
    computed: Node | None = None
    optional: bool = False


@dataclass
class Sequence(Node):
    kind: ClassVar[NodeKind] = NodeKind.SEQUENCE
    expressions: list[Node] = field(default_factory=list)


@dataclass
class TypeCast(Node):
    """``expr as T``, ``expr satisfies T`` and the non-null ``expr!``."""

    kind: ClassVar[NodeKind] = NodeKind.TYPE_CAST
    expression: Node
    operator: str
    type_text: str | None = None


# =============================================================================
# JSX
# =============================================================================


@dataclass
class JSXElement(Node):
    kind: ClassVar[NodeKind] = NodeKind.JSX_ELEMENT
    name: str
    attributes: list[Node] = field(default_factory=list)  # JSXAttribute | JSXSpreadAttribute
    children: list[Node] = field(default_factory=list)
    self_closing: bool = False

    def get_attribute(self, name: str) -> JSXAttribute | None:
        for attribute in self.attributes:
            if isinstance(attribute, JSXAttribute) and attribute.name == name:
                return attribute
        return None


@dataclass
class JSXFragment(Node):
    kind: ClassVar[NodeKind] = NodeKind.JSX_FRAGMENT
    children: list[Node] = field(default_factory=list)


@dataclass
class JSXAttribute(Node):
    kind: ClassVar[NodeKind] = NodeKind.JSX_ATTRIBUTE
    name: str
    value: Node | None = None  # Literal, JSXExpression or JSXElement; None for bare flags


@dataclass
class JSXSpreadAttribute(Node):
    kind: ClassVar[NodeKind] = NodeKind.JSX_SPREAD_ATTRIBUTE
    argument: Node


@dataclass
class JSXText(Node):
    kind: ClassVar[NodeKind] = NodeKind.JSX_TEXT
    value: str


@dataclass
class JSXExpression(Node):
    """``{expr}`` in attribute values and children; `expression` is None for ``{}``."""

    kind: ClassVar[NodeKind] = NodeKind.JSX_EXPRESSION
    expression: Node | None = None


# =============================================================================
# Traversal
# =============================================================================

NODE_CLASSES: dict[NodeKind, type[Node]] = {
    cls.kind: cls
    for cls in (
        Program,
        VariableDeclaration,
        VariableDeclarator,
        Function,
        Param,
        Class,
        ClassMember,
        Return,
        If,
        Loop,
        Switch,
        SwitchCase,
        Try,
        Throw,
        Jump,
        Block,
        ExpressionStatement,
        Empty,
        Import,
        ImportSpecifier,
        Export,
        ExportSpecifier,
        TypeDeclaration,
        Identifier,
        Literal,
        TemplateLiteral,
        TaggedTemplate,
        Array,
        Object,
        Property,
        Spread,
        Unary,
        Update,
        Binary,
        Assign,
        Conditional,
        Call,
        New,
        Member,
        Sequence,
        TypeCast,
        JSXElement,
        JSXFragment,
        JSXAttribute,
        JSXSpreadAttribute,
        JSXText,
        JSXExpression,
    )
}

# Child-bearing fields per kind, in source order
CHILD_FIELDS: dict[NodeKind, tuple[str, ...]] = {
    NodeKind.PROGRAM: ("body",),
    NodeKind.VARIABLE_DECLARATION: ("declarations",),
    NodeKind.VARIABLE_DECLARATOR: ("target", "init"),
    NodeKind.FUNCTION: ("params", "body"),
    NodeKind.PARAM: ("target", "default"),
    NodeKind.CLASS: ("superclass", "members"),
    NodeKind.CLASS_MEMBER: ("value",),
    NodeKind.RETURN: ("argument",),
    NodeKind.IF: ("test", "consequent", "alternate"),
    NodeKind.LOOP: ("head", "body"),
    NodeKind.SWITCH: ("discriminant", "cases"),
    NodeKind.SWITCH_CASE: ("test", "body"),
    NodeKind.TRY: ("block", "param", "handler", "finalizer"),
    NodeKind.THROW: ("argument",),
    NodeKind.JUMP: (),
    NodeKind.BLOCK: ("body",),
    NodeKind.EXPRESSION_STATEMENT: ("expression",),
    NodeKind.EMPTY: (),
    NodeKind.IMPORT: ("specifiers",),
    NodeKind.IMPORT_SPECIFIER: (),
    NodeKind.EXPORT: ("declaration", "specifiers"),
    NodeKind.EXPORT_SPECIFIER: (),
    NodeKind.TYPE_DECLARATION: (),
    NodeKind.IDENTIFIER: (),
    NodeKind.LITERAL: (),
    NodeKind.TEMPLATE_LITERAL: ("expressions",),
    NodeKind.TAGGED_TEMPLATE: ("tag", "quasi"),
    NodeKind.ARRAY: ("elements",),
    NodeKind.OBJECT: ("properties",),
    NodeKind.PROPERTY: ("computed_key", "value"),
    NodeKind.SPREAD: ("argument",),
    NodeKind.UNARY: ("argument",),
    NodeKind.UPDATE: ("argument",),
    NodeKind.BINARY: ("left", "right"),
    NodeKind.ASSIGN: ("target", "value"),
    NodeKind.CONDITIONAL: ("test", "consequent", "alternate"),
    NodeKind.CALL: ("callee", "arguments"),
    NodeKind.NEW: ("callee", "arguments"),
    NodeKind.MEMBER: ("object", "computed"),
    NodeKind.SEQUENCE: ("expressions",),
    NodeKind.TYPE_CAST: ("expression",),
    NodeKind.JSX_ELEMENT: ("attributes", "children"),
    NodeKind.JSX_FRAGMENT: ("children",),
    NodeKind.JSX_ATTRIBUTE: ("value",),
    NodeKind.JSX_SPREAD_ATTRIBUTE: ("argument",),
    NodeKind.JSX_TEXT: (),
    NodeKind.JSX_EXPRESSION: ("expression",),
}


def children(node: Node) -> Iterator[Node]:
    """Yield the direct children of `node` in source order."""
    for name in CHILD_FIELDS[node.kind]:
        value = getattr(node, name)
        if value is None:
            continue
        if isinstance(value, list):
            for item in value:
                if item is not None:
                    yield item
        else:
            yield value


def walk(node: Node, prune: Callable[[Node], bool] | None = None) -> Iterator[Node]:
    """
    Depth-first pre-order traversal.

    Args:
        node: Root of the traversal
        prune: When it returns True for a node, that node is yielded but its
            children are not visited
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if prune is not None and prune(current):
            continue
        stack.extend(reversed(list(children(current))))


class NodeVisitor:
    """
    Dispatching visitor.

    Subclasses define ``visit_<kind>`` methods (e.g. ``visit_call``); kinds
    without a method fall through to `generic_visit`, which visits children.
    """

    def visit(self, node: Node) -> Any:
        method = getattr(self, f"visit_{node.kind.value}", None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: Node) -> None:
        for child in children(node):
            self.visit(child)


# =============================================================================
# Helpers used by the extractors
# =============================================================================


def unwrap(node: Node | None) -> Node | None:
    """Strip TypeScript casts and ``await`` wrappers."""
    while node is not None:
        if isinstance(node, TypeCast):
            node = node.expression
        elif isinstance(node, Unary) and node.operator == "await":
            node = node.argument
        else:
            return node
    return None


def dotted_name(node: Node | None) -> str | None:
    """
    Render an identifier/member chain as a dotted name.

    Examples: ``axios.post`` -> "axios.post", ``prisma.task.create`` -> "prisma.task.create".
    Returns None for anything that is not a plain chain.
    """
    node = unwrap(node)
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, Member) and node.property is not None:
        base = dotted_name(node.object)
        if base is None:
            return None
        return f"{base}.{node.property}"
    return None


def string_value(node: Node | None) -> str | None:
    """Value of a string literal or a template literal without expressions."""
    node = unwrap(node)
    if isinstance(node, Literal) and node.literal_kind == "string":
        return node.value
    if isinstance(node, TemplateLiteral) and not node.expressions:
        return node.quasis[0] if node.quasis else ""
    return None
