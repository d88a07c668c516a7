"""
shepimport Intermediate Representation (IR) types.

Parse records (schema, component, route) and the aggregated application
model. All types are re-exported from this package.
"""

from .app_model import (
    Action,
    ActionApiCall,
    ActionSource,
    AppModel,
    ButtonWidget,
    ElementStyle,
    Entity,
    EntityField,
    EntityRelation,
    EntitySource,
    FormWidget,
    GeneratedFile,
    InputWidget,
    ListWidget,
    RelationKind,
    StyleProperty,
    UnknownWidget,
    View,
    Widget,
)
from .component import (
    ApiCall,
    Component,
    ComponentKind,
    EffectKind,
    EffectSpec,
    ExportKind,
    HandlerSpec,
    HandlerStatement,
    JSXElement,
    PropSpec,
    StatementKind,
    StateSpec,
    StyleSpec,
)
from .routes import HTTP_METHODS, Route
from .schema import DefaultFunction, SchemaDocument, SchemaEnum, SchemaField, SchemaModel

__all__ = [
    # App model
    "Action",
    "ActionApiCall",
    "ActionSource",
    "AppModel",
    "ButtonWidget",
    "ElementStyle",
    "Entity",
    "EntityField",
    "EntityRelation",
    "EntitySource",
    "FormWidget",
    "GeneratedFile",
    "InputWidget",
    "ListWidget",
    "RelationKind",
    "StyleProperty",
    "UnknownWidget",
    "View",
    "Widget",
    # Components
    "ApiCall",
    "Component",
    "ComponentKind",
    "EffectKind",
    "EffectSpec",
    "ExportKind",
    "HandlerSpec",
    "HandlerStatement",
    "JSXElement",
    "PropSpec",
    "StatementKind",
    "StateSpec",
    "StyleSpec",
    # Routes
    "HTTP_METHODS",
    "Route",
    # Schema
    "DefaultFunction",
    "SchemaDocument",
    "SchemaEnum",
    "SchemaField",
    "SchemaModel",
]
