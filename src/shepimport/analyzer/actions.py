"""
Action inference.

Three disjoint sources, consumed in this order:

1. Named event handlers: one action per unique handler name.
2. API calls outside any named handler: one ``<Verb><Resource>`` action per
   unique name.
3. Backend routes: the same ``<Verb><Resource>`` naming, parameters from the
   request-body fields.

Collisions are settled by the caller: the first action with a given name wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.ir import (
    Action,
    ActionApiCall,
    ActionSource,
    ApiCall,
    Component,
    Entity,
    HandlerStatement,
    Route,
    StatementKind,
)
from ..parsers.translator import iter_statements
from .entities import input_fields
from .naming import action_name_for_call, format_action_name, resource_segment, resolve_entity

logger = logging.getLogger("shepimport.analyzer.actions")

MUTATING_METHODS = ("POST", "PUT", "PATCH")


def infer_parameters(calls: Iterable[ApiCall | ActionApiCall], entities: list[Entity]) -> list[str]:
    """
    Parameters for an action from the first create/update call it makes.

    The call's resource segment is matched against the entities; a match
    contributes that entity's input fields.
    """
    by_name = {entity.name: entity for entity in entities}
    for call in calls:
        if call.method not in MUTATING_METHODS:
            continue
        path = call.url if isinstance(call, ApiCall) else call.path
        segment = resource_segment(path)
        if segment is None:
            return []
        resolved = resolve_entity(segment, by_name)
        if resolved is None:
            return []
        return input_fields(by_name[resolved])
    return []


def _api_call(call: ApiCall) -> ActionApiCall:
    return ActionApiCall(method=call.method, path=call.url)


def _resolve_statements(statements: list[HandlerStatement], by_name: dict[str, Entity]) -> list[HandlerStatement]:
    """Point ``add``/``remove`` statements at the entity their state variable holds."""
    resolved = []
    for statement in statements:
        update: dict[str, object] = {}
        if statement.entity is not None:
            update["entity"] = resolve_entity(statement.entity, by_name) or statement.entity
        if statement.then or statement.otherwise:
            update["then"] = _resolve_statements(statement.then, by_name)
            update["otherwise"] = _resolve_statements(statement.otherwise, by_name)
        resolved.append(statement.model_copy(update=update) if update else statement)
    return resolved


def handler_actions(component: Component, entities: list[Entity]) -> list[Action]:
    """
    One action per uniquely named event handler of a component.

    A handler with neither an HTTP call nor a translated statement gets a
    porting TODO; one whose body is partly raw code gets a review TODO.
    """
    by_name = {entity.name: entity for entity in entities}
    actions: list[Action] = []
    seen: set[str] = set()
    for handler in component.handlers:
        if not handler.function_name or handler.function_name in seen:
            continue
        seen.add(handler.function_name)

        calls = [c for c in component.api_calls if c.handler == handler.function_name]
        raw = sum(1 for s in iter_statements(handler.statements) if s.kind == StatementKind.RAW)
        translated = sum(1 for _ in iter_statements(handler.statements)) - raw
        todos: list[str] = []
        if not calls and not translated:
            todos.append(f"TODO: Port {handler.function_name} from {component.file_path}")
        elif raw:
            todos.append(f"TODO: Review {raw} untranslated statement(s) in {handler.function_name}")
        actions.append(
            Action(
                name=format_action_name(handler.function_name),
                source=ActionSource.HANDLER,
                parameters=infer_parameters(calls, entities),
                api_calls=[_api_call(c) for c in calls],
                todos=todos,
                statements=_resolve_statements(handler.statements, by_name),
                skipped=dict(handler.skipped),
            )
        )
    return actions


def call_actions(component: Component, entities: list[Entity]) -> list[Action]:
    """Synthetic actions for API calls that no named event handler wraps."""
    handler_names = {h.function_name for h in component.handlers if h.function_name}
    actions: list[Action] = []
    seen: set[str] = set()
    for call in component.api_calls:
        if call.handler in handler_names:
            continue
        name = action_name_for_call(call.method, call.url)
        if name in seen:
            continue
        seen.add(name)
        actions.append(
            Action(
                name=name,
                source=ActionSource.HANDLER,
                parameters=infer_parameters([call], entities),
                api_calls=[_api_call(call)],
            )
        )
    return actions


def route_actions(routes: Iterable[Route]) -> list[Action]:
    """
    One action per ``<Verb><Resource>`` name over the backend routes.

    Routes sharing a name (``GET /tasks`` and ``GET /tasks/:id``) fold into
    one action that keeps every call and the first route's parameters.
    """
    actions: dict[str, Action] = {}
    for route in routes:
        name = action_name_for_call(route.method, route.path)
        call = ActionApiCall(
            method=route.method,
            path=route.path,
            persistence_model=route.persistence_model,
            persistence_operation=route.persistence_operation,
        )
        existing = actions.get(name)
        if existing is not None:
            logger.debug("Route %s %s folds into action %s", route.method, route.path, name)
            if call not in existing.api_calls:
                actions[name] = existing.model_copy(update={"api_calls": [*existing.api_calls, call]})
            continue
        actions[name] = Action(
            name=name,
            source=ActionSource.API_ROUTE,
            parameters=list(route.body_fields),
            api_calls=[call],
        )
    return list(actions.values())


def stub_action(name: str, referenced_by: str) -> Action:
    """Placeholder for an action a widget names but no source defines."""
    return Action(
        name=name,
        source=ActionSource.HANDLER,
        todos=[f"TODO: Implement {name} (referenced by view {referenced_by})"],
    )
