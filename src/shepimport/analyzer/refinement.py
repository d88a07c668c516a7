"""
User refinement of an aggregated model.

A refinement carries what a person knows better than the inference: what
kind of app this is, which entities it tracks, and free-text instructions.
Supplied entity names replace the inferred entity set.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..core.ir import AppModel, Entity, EntitySource, ListWidget, View
from ..core.strings import app_identifier, to_pascal_case
from .entities import synthesized_entity
from .naming import resolve_entity

logger = logging.getLogger("shepimport.analyzer.refinement")


class UserRefinement(BaseModel):
    """
    Refinement input.

    Attributes:
        app_type: Label such as "Task Tracker"; becomes the app name
        entities: Entity names that replace the inferred set
        instructions: Free text carried into the model's TODOs
    """

    app_type: str | None = None
    entities: list[str] = Field(default_factory=list)
    instructions: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_text(
        cls,
        app_type: str | None = None,
        entities: str | None = None,
        instructions: str | None = None,
    ) -> UserRefinement:
        """Build from raw text, with `entities` comma separated."""
        names = [n.strip() for n in (entities or "").split(",") if n.strip()]
        return cls(
            app_type=(app_type or "").strip() or None,
            entities=names,
            instructions=(instructions or "").strip() or None,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.app_type or self.entities or self.instructions)


def _refined_entities(model: AppModel, names: list[str]) -> list[Entity]:
    existing = {entity.name: entity for entity in model.entities}
    entities: list[Entity] = []
    taken: set[str] = set()
    for raw in names:
        matched = resolve_entity(raw, existing)
        if matched is not None:
            entity = existing[matched]
        else:
            entity = synthesized_entity(to_pascal_case(raw) or raw, EntitySource.USER)
        if entity.name.lower() in taken:
            continue
        taken.add(entity.name.lower())
        entities.append(entity)
    return entities


def _repoint(view: View, names: list[str]) -> View:
    widgets = []
    for widget in view.widgets:
        if isinstance(widget, ListWidget):
            target = resolve_entity(widget.entity_name, names) or names[0]
            widget = ListWidget(entity_name=target)
        widgets.append(widget)
    return view.model_copy(update={"widgets": widgets})


def apply_refinement(model: AppModel, refinement: UserRefinement) -> AppModel:
    """Return a new model with the refinement applied; `model` is unchanged."""
    update: dict = {}

    if refinement.app_type:
        name = app_identifier(refinement.app_type)
        if name:
            update["app_name"] = name
        else:
            logger.warning("App type %r has no usable name; keeping %s", refinement.app_type, model.app_name)

    if refinement.entities:
        entities = _refined_entities(model, refinement.entities)
        names = [entity.name for entity in entities]
        update["entities"] = entities
        update["views"] = [_repoint(view, names) for view in model.views]
        logger.info("Entity set replaced by refinement: %s", ", ".join(names))

    if refinement.instructions:
        update["todos"] = [f"Custom instruction: {refinement.instructions}", *model.todos]

    return model.model_copy(update=update) if update else model
