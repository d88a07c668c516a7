"""
Prisma schema parser.

Turns schema text into a `SchemaDocument`. Block bodies are located with the
balanced delimiter scanner, so attribute payloads containing braces or
parentheses never truncate a model. Field declarations that do not fit the
grammar ``name Type[]? ? @attr...`` are dropped and logged at debug level;
the parser never raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection
from dataclasses import dataclass

from ..core.delimiters import extract_after, extract_balanced, find_matching, split_top_level
from ..core.ir import DefaultFunction, SchemaDocument, SchemaEnum, SchemaField, SchemaModel

logger = logging.getLogger("shepimport.parsers.schema")

# Prisma scalar -> ShepLang type
SCALAR_TYPE_MAP: dict[str, str] = {
    "String": "text",
    "Int": "number",
    "BigInt": "number",
    "Float": "number",
    "Decimal": "number",
    "Boolean": "yes/no",
    "DateTime": "datetime",
    "Json": "text",
    "Bytes": "text",
}

DEFAULT_FUNCTIONS = {f.value: f for f in DefaultFunction}

_BLOCK_HEADER = re.compile(r"^[ \t]*(model|enum)[ \t]+(\w+)\s*\{", re.MULTILINE)
_IDENT = re.compile(r"^[A-Za-z_]\w*$")
_TYPE = re.compile(r"^([A-Za-z_]\w*)(\[\])?(\?)?$")
_CALL = re.compile(r"^(\w+)\((.*)\)$", re.DOTALL)


def map_type(prisma_type: str) -> str:
    """
    Map a declared Prisma type to its ShepLang type.

    Scalars go through `SCALAR_TYPE_MAP`; enum and model names pass through
    unchanged.

    Examples:
        >>> map_type("Boolean")
        'yes/no'
        >>> map_type("Role")
        'Role'
    """
    if prisma_type in SCALAR_TYPE_MAP:
        return SCALAR_TYPE_MAP[prisma_type]
    return prisma_type


def is_scalar(prisma_type: str) -> bool:
    return prisma_type in SCALAR_TYPE_MAP


# =============================================================================
# Tokenizing
# =============================================================================


def _strip_comment(line: str) -> str:
    """Remove a trailing ``//`` comment that is not inside a string."""
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and in_string:
            i += 2
            continue
        if ch == '"':
            in_string = not in_string
        elif not in_string and line.startswith("//", i):
            return line[:i]
        i += 1
    return line


def _tokenize(line: str) -> list[str]:
    """
    Split a body line on whitespace, keeping parenthesised groups whole.

    ``@default(fn(x: {y: 1}))`` and ``@relation(fields: [a], references: [id])``
    each come back as a single token.
    """
    tokens: list[str] = []
    i = 0
    length = len(line)
    while i < length:
        if line[i].isspace():
            i += 1
            continue
        start = i
        while i < length and not line[i].isspace():
            if line[i] == "(":
                close = find_matching(line, i, "(", comments=False, quotes='"')
                i = length if close is None else close + 1
            elif line[i] == '"':
                close = line.find('"', i + 1)
                i = length if close == -1 else close + 1
            else:
                i += 1
        tokens.append(line[start:i])
    return tokens


def _split_declarations(tokens: list[str]) -> list[list[str]]:
    """
    Group a token stream into declarations.

    A declaration is a name, a type and any number of ``@`` attributes; a
    non-attribute token after a complete name/type pair starts the next one.
    ``@@`` directives stand alone.
    """
    declarations: list[list[str]] = []
    current: list[str] = []
    for token in tokens:
        if token.startswith("@@"):
            if current:
                declarations.append(current)
            declarations.append([token])
            current = []
        elif token.startswith("@") or len(current) < 2:
            current.append(token)
        else:
            declarations.append(current)
            current = [token]
    if current:
        declarations.append(current)
    return declarations


def _body_lines(body: str) -> list[str]:
    lines = []
    for raw in body.split("\n"):
        line = _strip_comment(raw).strip()
        if line:
            lines.append(line)
    return lines


# =============================================================================
# Attributes
# =============================================================================


@dataclass
class _Default:
    value: str | None = None
    function: DefaultFunction | None = None


def _parse_default(attributes_text: str) -> _Default:
    span = extract_after(attributes_text, "@default")
    if span is None:
        return _Default()
    payload = span.body.strip()

    call = _CALL.match(payload)
    if call and call.group(1) in DEFAULT_FUNCTIONS:
        return _Default(function=DEFAULT_FUNCTIONS[call.group(1)])

    if len(payload) >= 2 and payload[0] == payload[-1] and payload[0] in "\"'":
        payload = payload[1:-1]
    return _Default(value=payload)


@dataclass
class _Relation:
    name: str | None = None
    fields: list[str] | None = None
    on_delete: str | None = None


def _parse_relation(attributes_text: str) -> _Relation:
    span = extract_after(attributes_text, "@relation")
    if span is None:
        return _Relation()

    relation = _Relation()
    for arg in split_top_level(span.body):
        key, sep, value = arg.partition(":")
        if not sep:
            # Positional argument is the relation name
            relation.name = arg.strip().strip('"')
            continue
        key = key.strip()
        value = value.strip()
        if key == "name":
            relation.name = value.strip('"')
        elif key == "fields":
            relation.fields = [f.strip() for f in value.strip("[]").split(",") if f.strip()]
        elif key == "onDelete":
            relation.on_delete = value
    return relation


def _has_flag(attributes: list[str], flag: str) -> bool:
    return any(a == flag or a.startswith(flag + "(") for a in attributes)


# =============================================================================
# Blocks
# =============================================================================


def _parse_field(
    declaration: list[str], enum_names: Collection[str], model_name: str
) -> SchemaField | None:
    if len(declaration) < 2 or not _IDENT.match(declaration[0]):
        logger.debug("Dropping malformed field in %s: %s", model_name, " ".join(declaration))
        return None

    type_match = _TYPE.match(declaration[1])
    if not type_match:
        logger.debug("Dropping field with unsupported type in %s: %s", model_name, " ".join(declaration))
        return None

    name = declaration[0]
    field_type, array_marker, optional_marker = type_match.groups()
    attributes = declaration[2:]
    if any(not a.startswith("@") for a in attributes):
        logger.debug("Dropping field with stray tokens in %s: %s", model_name, " ".join(declaration))
        return None
    attributes_text = " ".join(attributes)

    is_relation = not is_scalar(field_type) and field_type not in enum_names
    default = _parse_default(attributes_text)
    relation = _parse_relation(attributes_text) if is_relation else _Relation()

    return SchemaField(
        name=name,
        type=field_type,
        shep_type=map_type(field_type),
        is_array=array_marker is not None,
        is_optional=optional_marker is not None,
        is_unique=_has_flag(attributes, "@unique"),
        is_id=_has_flag(attributes, "@id"),
        is_updated_at=_has_flag(attributes, "@updatedAt"),
        default_value=default.value,
        default_function=default.function,
        is_relation=is_relation,
        relation_model=field_type if is_relation else None,
        relation_name=relation.name,
        relation_fields=relation.fields or [],
        on_delete=relation.on_delete,
        attributes_text=attributes_text,
    )


def _parse_model(name: str, body: str, enum_names: Collection[str]) -> SchemaModel:
    fields: list[SchemaField] = []
    model_attributes: list[str] = []
    for line in _body_lines(body):
        for declaration in _split_declarations(_tokenize(line)):
            if declaration[0].startswith("@@"):
                model_attributes.append(declaration[0])
                continue
            schema_field = _parse_field(declaration, enum_names, name)
            if schema_field is not None:
                fields.append(schema_field)
    return SchemaModel(name=name, fields=fields, model_attributes=model_attributes)


def _parse_enum(name: str, body: str) -> SchemaEnum:
    values = []
    for line in _body_lines(body):
        for token in _tokenize(line):
            if token.startswith("@"):
                continue
            if _IDENT.match(token):
                values.append(token)
    return SchemaEnum(name=name, values=values)


def _find_blocks(text: str) -> list[tuple[str, str, str]]:
    """Return ``(keyword, name, body)`` for each top-level block in order."""
    blocks = []
    pos = 0
    while True:
        match = _BLOCK_HEADER.search(text, pos)
        if match is None:
            break
        open_index = match.end() - 1
        span = extract_balanced(text, open_index, "{", quotes='"')
        if span is None:
            logger.debug("Unbalanced %s block %s; skipping", match.group(1), match.group(2))
            pos = match.end()
            continue
        blocks.append((match.group(1), match.group(2), span.body))
        pos = span.end
    return blocks


def parse_schema(text: str) -> SchemaDocument:
    """
    Parse Prisma schema text.

    Returns an empty document when there are no model or enum blocks.

    Example:
        >>> doc = parse_schema("model Task { id String @id done Boolean @default(false) }")
        >>> [f.name for f in doc.models[0].fields]
        ['id', 'done']
    """
    if not text.strip():
        return SchemaDocument()

    blocks = _find_blocks(text)

    # Enums first so relation detection can tell enum types from models
    enums = [_parse_enum(name, body) for keyword, name, body in blocks if keyword == "enum"]
    enum_names = frozenset(e.name for e in enums)

    models = [
        _parse_model(name, body, enum_names) for keyword, name, body in blocks if keyword == "model"
    ]

    logger.debug("Parsed schema: %d models, %d enums", len(models), len(enums))
    return SchemaDocument(models=models, enums=enums)
