"""
Entity construction.

Schema models become entities directly. Without a schema, entities are
inferred from component state typed as a list of some named type.
"""

from __future__ import annotations

import re

from ..core.ir import (
    Component,
    Entity,
    EntityField,
    EntityRelation,
    EntitySource,
    RelationKind,
    SchemaDocument,
    SchemaModel,
)

# Fields every synthesized entity starts with.
DEFAULT_FIELDS: tuple[EntityField, ...] = (
    EntityField(name="id", type="text"),
    EntityField(name="name", type="text"),
)

# Fields that are never user input.
GENERATED_FIELD_NAMES = frozenset({"id", "createdAt", "updatedAt", "created_at", "updated_at"})

_LIST_TYPE_RE = re.compile(r"^(?:([A-Z]\w*)\[\]|Array<\s*([A-Z]\w*)\s*>)$")


def entity_from_model(model: SchemaModel) -> Entity:
    fields = [
        EntityField(name=f.name, type=f.shep_type, required=f.is_required)
        for f in model.fields
        if not f.is_relation
    ]
    relations = [
        EntityRelation(
            field_name=f.name,
            target=f.relation_model or f.type,
            kind=RelationKind.HAS_MANY if f.is_array else RelationKind.BELONGS_TO,
        )
        for f in model.fields
        if f.is_relation
    ]
    return Entity(name=model.name, source=EntitySource.SCHEMA, fields=fields, relations=relations)


def entities_from_schema(schema: SchemaDocument) -> list[Entity]:
    """One entity per schema model, in schema order."""
    return [entity_from_model(model) for model in schema.models]


def synthesized_entity(name: str, source: EntitySource = EntitySource.INFERRED) -> Entity:
    """An entity with only the default ``id`` / ``name`` text fields."""
    return Entity(name=name, source=source, fields=list(DEFAULT_FIELDS))


def list_type_name(type_text: str | None) -> str | None:
    """
    Element type of a list-typed state declaration.

    Examples:
        >>> list_type_name("Task[]")
        'Task'
        >>> list_type_name("Array<User> | null")
        'User'
        >>> list_type_name("string[]")
    """
    if not type_text:
        return None
    for part in type_text.split("|"):
        match = _LIST_TYPE_RE.match(part.strip())
        if match:
            return match.group(1) or match.group(2)
    return None


def state_entity_names(component: Component) -> list[str]:
    """Entity names implied by ``useState<Foo[]>`` declarations, in order."""
    names: list[str] = []
    for state in component.state:
        name = list_type_name(state.type)
        if name and name not in names:
            names.append(name)
    return names


def input_fields(entity: Entity) -> list[str]:
    """Field names a create/update call would send."""
    return [f.name for f in entity.fields if f.name not in GENERATED_FIELD_NAMES]
