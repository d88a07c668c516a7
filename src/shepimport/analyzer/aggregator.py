"""
Semantic aggregation.

Combines the schema, the parsed components and the reconstructed routes into
one `AppModel`:

1. Entities from the schema (or, without one, from list-typed state)
2. Views from page components
3. List-widget hints resolved against the entities; unresolved hints are
   consolidated and backfilled as inferred entities
4. Actions from handlers, bare API calls and routes, first name wins
5. Stub actions for widget references nothing defines
6. TODOs for frontend calls with no matching route

Every collection keeps insertion order from the scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..core.config import ImportConfig
from ..core.ir import (
    Action,
    AppModel,
    ButtonWidget,
    Component,
    Entity,
    FormWidget,
    ListWidget,
    Route,
    SchemaDocument,
    View,
)
from ..core.strings import app_identifier
from .actions import call_actions, handler_actions, route_actions, stub_action
from .correlator import correlate
from .entities import entities_from_schema, state_entity_names, synthesized_entity
from .naming import consolidate, resolve_entity
from .views import build_view

logger = logging.getLogger("shepimport.analyzer")


@dataclass
class ModelBuilder:
    """
    Mutable state of one aggregation.

    Entities are unique case-insensitively and actions by exact name; in
    both cases the first occurrence wins.
    """

    entities: dict[str, Entity] = field(default_factory=dict)
    views: list[View] = field(default_factory=list)
    actions: dict[str, Action] = field(default_factory=dict)
    todos: list[str] = field(default_factory=list)

    @property
    def entity_names(self) -> list[str]:
        return [entity.name for entity in self.entities.values()]

    def add_entity(self, entity: Entity) -> Entity:
        """Add `entity` unless one with the same name exists; return the kept one."""
        key = entity.name.lower()
        existing = self.entities.get(key)
        if existing is not None:
            logger.debug("Duplicate entity %s ignored", entity.name)
            return existing
        self.entities[key] = entity
        return entity

    def add_action(self, action: Action) -> bool:
        if action.name in self.actions:
            logger.debug("Duplicate action %s ignored", action.name)
            return False
        self.actions[action.name] = action
        return True

    def add_view(self, view: View) -> View:
        """Add `view`, renaming it with a numeric suffix if the name is taken."""
        taken = {v.name for v in self.views}
        if view.name in taken:
            counter = 2
            while f"{view.name}{counter}" in taken:
                counter += 1
            view = view.model_copy(update={"name": f"{view.name}{counter}"})
        self.views.append(view)
        return view

    def add_todo(self, todo: str) -> None:
        if todo not in self.todos:
            self.todos.append(todo)

    def build(self, app_name: str, project_root: str) -> AppModel:
        return AppModel(
            app_name=app_name,
            project_root=project_root,
            entities=list(self.entities.values()),
            views=self.views,
            actions=list(self.actions.values()),
            todos=self.todos,
        )


def default_app_name(project_root: str | Path) -> str:
    """
    App name derived from the project directory.

    Examples:
        >>> default_app_name("/work/my-next-app")
        'MyNextApp'
    """
    return app_identifier(Path(project_root).name) or "MyApp"


class Aggregator:
    """Runs the aggregation steps over one set of parse results."""

    def __init__(
        self,
        schema: SchemaDocument | None,
        components: list[Component],
        routes: list[Route],
        config: ImportConfig,
    ):
        self.schema = schema
        self.components = components
        self.routes = routes
        self.config = config
        self.builder = ModelBuilder()

    def run(self, app_name: str, project_root: str) -> AppModel:
        self._entities()
        self._views()
        self._resolve_lists()
        self._actions()
        self._stub_widget_actions()
        self._correlate()
        model = self.builder.build(app_name, project_root)
        logger.info(
            "Aggregated %s: %d entities, %d views, %d actions, %d todos",
            model.app_name,
            len(model.entities),
            len(model.views),
            len(model.actions),
            len(model.todos),
        )
        return model

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _entities(self) -> None:
        if self.schema is not None and self.schema.models:
            for entity in entities_from_schema(self.schema):
                self.builder.add_entity(entity)
            return

        self.builder.add_todo("No data schema found; entities were inferred from the UI. Review their fields.")
        for component in self.components:
            for name in state_entity_names(component):
                if resolve_entity(name, self.builder.entity_names) is None:
                    self.builder.add_entity(synthesized_entity(name))

    def _views(self) -> None:
        for component in self.components:
            if component.is_page:
                self.builder.add_view(build_view(component))

    def _resolve_hint(self, hint: str, view_name: str) -> str:
        resolved = resolve_entity(hint, self.builder.entity_names)
        if resolved is not None:
            return resolved

        canonical = consolidate(hint, self.config.consolidation_rules)
        resolved = resolve_entity(canonical, self.builder.entity_names)
        if resolved is not None:
            return resolved

        entity = self.builder.add_entity(synthesized_entity(canonical))
        self.builder.add_todo(
            f"Entity {entity.name} was inferred from view {view_name}; add its real fields."
        )
        return entity.name

    def _resolve_lists(self) -> None:
        resolved_views = []
        for view in self.builder.views:
            widgets = []
            for widget in view.widgets:
                if isinstance(widget, ListWidget):
                    widget = ListWidget(entity_name=self._resolve_hint(widget.entity_name, view.name))
                widgets.append(widget)
            resolved_views.append(view.model_copy(update={"widgets": widgets}))
        self.builder.views = resolved_views

    def _actions(self) -> None:
        entities = list(self.builder.entities.values())
        for component in self.components:
            for action in handler_actions(component, entities):
                self.builder.add_action(action)
        for component in self.components:
            for action in call_actions(component, entities):
                self.builder.add_action(action)
        for action in route_actions(self.routes):
            self.builder.add_action(action)

    def _stub_widget_actions(self) -> None:
        for view in self.builder.views:
            for widget in view.widgets:
                if isinstance(widget, (ButtonWidget, FormWidget)) and widget.action_name not in self.builder.actions:
                    self.builder.add_action(stub_action(widget.action_name, view.name))

    def _correlate(self) -> None:
        if not self.routes:
            return
        correlation = correlate(self.components, self.routes)
        for call in correlation.unmatched_frontend:
            self.builder.add_todo(
                f"No backend route found for {call.method} {call.url} (called from {call.component})"
            )
        logger.debug("Correlation:\n%s", correlation.summary())


def aggregate(
    schema: SchemaDocument | None,
    components: list[Component],
    routes: list[Route],
    config: ImportConfig | None = None,
    project_root: str | Path = "",
    app_name: str | None = None,
) -> AppModel:
    """
    Build the `AppModel` for one project.

    Args:
        schema: Parsed schema, or None when the project has none
        components: Parsed components in scan order
        routes: Reconstructed routes in scan order
        config: Import settings (consolidation rules, app name)
        project_root: Recorded on the model and used to derive a default app name
        app_name: Overrides both the configured and the derived name
    """
    config = config or ImportConfig()
    name = app_identifier(app_name or config.app_name or "") or default_app_name(project_root)
    return Aggregator(schema, components, routes, config).run(name, str(project_root))
