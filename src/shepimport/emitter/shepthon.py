"""
ShepThon (``.shepthon``) backend emitter.

Renders one ``model`` block per entity, then one endpoint line per backend
route found during import. Entities no route touches get the standard CRUD
endpoints.
"""

from __future__ import annotations

from ..analyzer.naming import resolve_entity, resource_segment
from ..core.ir import ActionApiCall, ActionSource, AppModel, Entity
from ..core.strings import pluralize, to_snake_case

TYPE_MAP = {
    "text": "String",
    "number": "Int",
    "yes/no": "Boolean",
    "date": "DateTime",
    "datetime": "DateTime",
}


def shepthon_type(shep_type: str) -> str:
    """
    Map a ShepLang field type; enum and unknown types become ``String``.

    Examples:
        >>> shepthon_type("yes/no")
        'Boolean'
        >>> shepthon_type("Role")
        'String'
    """
    return TYPE_MAP.get(shep_type, "String")


def collection_name(entity_name: str) -> str:
    """
    Examples:
        >>> collection_name("TodoItem")
        'todo_items'
    """
    return pluralize(to_snake_case(entity_name))


def _path_param(path: str) -> str | None:
    for segment in path.split("/"):
        if segment.startswith(":"):
            return segment[1:].rstrip("+*")
    return None


# Storage operation -> db verb; unknown operations fall back to the HTTP method
DB_VERBS = {
    "findMany": "all",
    "find": "all",
    "findUnique": "find",
    "findFirst": "find",
    "findOne": "find",
    "findById": "find",
    "create": "add",
    "createMany": "add",
    "insertMany": "add",
    "save": "add",
    "update": "update",
    "updateMany": "update",
    "upsert": "update",
    "findByIdAndUpdate": "update",
    "delete": "remove",
    "deleteMany": "remove",
    "findByIdAndDelete": "remove",
}
METHOD_VERBS = {"POST": "add", "PUT": "update", "PATCH": "update", "DELETE": "remove"}


def _db_verb(call: ActionApiCall, has_param: bool) -> str:
    verb = DB_VERBS.get(call.persistence_operation or "")
    if verb is None:
        verb = METHOD_VERBS.get(call.method, "find" if has_param and call.method == "GET" else "all")
    return verb


def endpoint_line(call: ActionApiCall, collection: str) -> str:
    """
    One endpoint line for a route.

    The route's storage call decides the db verb when it was recognised,
    otherwise the HTTP method does.

    Examples:
        >>> endpoint_line(ActionApiCall(method="GET", path="/tasks/:id"), "tasks")
        'GET /tasks/:id -> db.find("tasks", params.id)'
        >>> endpoint_line(ActionApiCall(method="POST", path="/tasks/search", persistence_operation="findMany"), "tasks")
        'POST /tasks/search -> db.all("tasks")'
    """
    param = _path_param(call.path)
    key = f"params.{param}" if param else "body.id"
    target = f'"{collection}"'
    verb = _db_verb(call, param is not None)
    if verb == "all":
        body = f"db.all({target})"
    elif verb == "find":
        body = f"db.find({target}, {key})"
    elif verb == "add":
        body = f"db.add({target}, body)"
    elif verb == "update":
        body = f"db.update({target}, {key}, body)"
    else:
        body = f"db.remove({target}, {key})"
    return f"{call.method} {call.path} -> {body}"


def crud_lines(entity: Entity) -> list[str]:
    collection = collection_name(entity.name)
    base = f"/{collection}"
    return [
        endpoint_line(ActionApiCall(method="GET", path=base), collection),
        endpoint_line(ActionApiCall(method="GET", path=f"{base}/:id"), collection),
        endpoint_line(ActionApiCall(method="POST", path=base), collection),
        endpoint_line(ActionApiCall(method="PUT", path=f"{base}/:id"), collection),
        endpoint_line(ActionApiCall(method="DELETE", path=f"{base}/:id"), collection),
    ]


def model_block(entity: Entity) -> list[str]:
    lines = [f"model {entity.name} {{"]
    for entity_field in entity.fields:
        lines.append(f"  {entity_field.name}: {shepthon_type(entity_field.type)}")
    for relation in entity.relations:
        lines.append(f"  # {relation.field_name}: {relation.kind.value.replace('_', ' ')} {relation.target}")
    lines.append("}")
    return lines


def render_shepthon(model: AppModel) -> str:
    """Render the ``.shepthon`` backend for `model`."""
    entity_names = [e.name for e in model.entities]
    lines = [
        f"# {model.app_name} backend",
        f"# Generated from project: {model.project_root}",
        "",
    ]

    for entity in model.entities:
        lines.extend(model_block(entity))
        lines.append("")

    covered: list[str] = []
    route_lines: list[str] = []
    for action in model.actions:
        if action.source != ActionSource.API_ROUTE:
            continue
        for call in action.api_calls:
            segment = resource_segment(call.path) or "items"
            entity = resolve_entity(call.persistence_model or segment, entity_names)
            if entity is not None and entity not in covered:
                covered.append(entity)
            if entity is not None:
                collection = collection_name(entity)
            elif call.persistence_model:
                collection = collection_name(call.persistence_model)
            else:
                collection = segment
            route_lines.append(endpoint_line(call, collection))

    if route_lines:
        lines.append("# Endpoints from API routes")
        lines.extend(route_lines)
        lines.append("")

    for entity in model.entities:
        if entity.name in covered:
            continue
        lines.append(f"# {entity.name} CRUD")
        lines.extend(crud_lines(entity))
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"
