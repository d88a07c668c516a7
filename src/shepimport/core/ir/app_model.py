"""
Application model types for shepimport IR.

`AppModel` is the aggregate root handed from the semantic aggregator to the
emitters. It is rebuilt from source on every run and never persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .component import HandlerStatement


class EntitySource(str, Enum):
    SCHEMA = "schema"
    INFERRED = "inferred"
    USER = "user"


class RelationKind(str, Enum):
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"


class EntityField(BaseModel):
    name: str
    type: str
    required: bool = True

    model_config = ConfigDict(frozen=True)


class EntityRelation(BaseModel):
    """A link from one entity field to another entity."""

    field_name: str
    target: str
    kind: RelationKind

    model_config = ConfigDict(frozen=True)


class Entity(BaseModel):
    """
    A data concept with typed fields.

    Names are canonical: unique within one `AppModel` under case-insensitive
    comparison.
    """

    name: str
    source: EntitySource
    fields: list[EntityField] = Field(default_factory=list)
    relations: list[EntityRelation] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Widgets
# =============================================================================


class ListWidget(BaseModel):
    kind: Literal["list"] = "list"
    entity_name: str

    model_config = ConfigDict(frozen=True)


class ButtonWidget(BaseModel):
    kind: Literal["button"] = "button"
    label: str
    action_name: str

    model_config = ConfigDict(frozen=True)


class FormWidget(BaseModel):
    kind: Literal["form"] = "form"
    action_name: str

    model_config = ConfigDict(frozen=True)


class InputWidget(BaseModel):
    kind: Literal["input"] = "input"
    field_name: str

    model_config = ConfigDict(frozen=True)


class UnknownWidget(BaseModel):
    """An element no widget rule recognised; emitted as a TODO comment."""

    kind: Literal["unknown"] = "unknown"
    tag: str

    model_config = ConfigDict(frozen=True)


Widget = Annotated[
    ListWidget | ButtonWidget | FormWidget | InputWidget | UnknownWidget,
    Field(discriminator="kind"),
]


class StyleProperty(BaseModel):
    """
    One CSS-like property of a styled element.

    Examples:
        - ``p-4`` -> StyleProperty(property="padding", value="1rem")
        - ``md:flex`` -> StyleProperty(property="display", value="flex", responsive="md")
        - ``hover:bg-white`` -> StyleProperty(property="background-color", value="#ffffff", state="hover")
    """

    property: str
    value: str
    responsive: str | None = None
    state: str | None = None

    model_config = ConfigDict(frozen=True)


class ElementStyle(BaseModel):
    """Styling of one element in a view."""

    element_tag: str
    properties: list[StyleProperty] = Field(default_factory=list)
    module_classes: list[str] = Field(default_factory=list)  # styles.card -> "card"
    dynamic_class: str | None = None

    model_config = ConfigDict(frozen=True)


class View(BaseModel):
    """A screen with an ordered list of widgets."""

    name: str
    source_file: str
    route: str | None = None
    widgets: list[Widget] = Field(default_factory=list)
    styles: list[ElementStyle] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def list_entities(self) -> list[str]:
        return [w.entity_name for w in self.widgets if isinstance(w, ListWidget)]


# =============================================================================
# Actions
# =============================================================================


class ActionSource(str, Enum):
    HANDLER = "handler"
    API_ROUTE = "api-route"


class ActionApiCall(BaseModel):
    """
    One HTTP call an action makes.

    Route actions also record the storage call the route makes
    (``prisma.task.findMany`` gives model ``task``, operation ``findMany``).
    """

    method: str
    path: str
    persistence_model: str | None = None
    persistence_operation: str | None = None

    model_config = ConfigDict(frozen=True)


class Action(BaseModel):
    """A named operation. Names are unique within one `AppModel`."""

    name: str
    source: ActionSource
    parameters: list[str] = Field(default_factory=list)
    api_calls: list[ActionApiCall] = Field(default_factory=list)
    todos: list[str] = Field(default_factory=list)
    # Translated handler body; empty for route actions and untranslated handlers
    statements: list[HandlerStatement] = Field(default_factory=list)
    skipped: dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Aggregate root
# =============================================================================


class AppModel(BaseModel):
    app_name: str
    project_root: str
    entities: list[Entity] = Field(default_factory=list)
    views: list[View] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    todos: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_entity(self, name: str) -> Entity | None:
        lower = name.lower()
        for entity in self.entities:
            if entity.name.lower() == lower:
                return entity
        return None

    def get_view(self, name: str) -> View | None:
        for view in self.views:
            if view.name == name:
                return view
        return None

    def get_action(self, name: str) -> Action | None:
        for action in self.actions:
            if action.name == name:
                return action
        return None


class GeneratedFile(BaseModel):
    """A file produced by an emitter; written by the caller, never by the core."""

    file_name: str
    content: str

    model_config = ConfigDict(frozen=True)
