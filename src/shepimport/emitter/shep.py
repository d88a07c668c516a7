"""
ShepLang (``.shep``) emitter.

Block order is fixed: header comment, app opening, model TODOs, data blocks,
view blocks, action blocks, footer. Inside each block lines follow model
order, so equal models always render to identical text.
"""

from __future__ import annotations

from ..core.ir import (
    Action,
    AppModel,
    ButtonWidget,
    Entity,
    EntitySource,
    FormWidget,
    HandlerStatement,
    InputWidget,
    ListWidget,
    RelationKind,
    StatementKind,
    UnknownWidget,
    View,
)
from ..parsers.translator import skipped_summary

BANNER = "// " + "=" * 40

DEFAULT_VIEW_NAME = "MainView"
DASHBOARD_VIEW_NAME = "Dashboard"

_SOURCE_COMMENTS = {
    EntitySource.SCHEMA: "// From schema model",
    EntitySource.USER: "// Supplied during import",
    EntitySource.INFERRED: "// Inferred from views",
}

_SOURCE_TODOS = {
    EntitySource.USER: "  // TODO: Add the specific fields you need for {name}",
    EntitySource.INFERRED: "  // TODO: Add more fields as needed",
}

_RELATION_WORDS = {
    RelationKind.HAS_MANY: "has many",
    RelationKind.BELONGS_TO: "belongs to",
}


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _section(title: str) -> list[str]:
    return [BANNER, f"// {title}", BANNER, ""]


def variable_for_path(path: str) -> str:
    """
    Variable a ``load`` stores into: the last static path segment.

    Examples:
        >>> variable_for_path("/api/tasks/:id")
        'tasks'
    """
    parts = [p for p in path.split("?", 1)[0].split("/") if p and not p.startswith(":")]
    resource = parts[-1] if parts else "items"
    cleaned = "".join(ch for ch in resource if ch.isalnum() or ch == "_")
    return cleaned.lower() or "items"


def reload_path(path: str) -> str:
    """Collection path re-read after a mutation: ``/api/tasks/:id`` -> ``/api/tasks``."""
    parts = [p for p in path.split("/") if not p.startswith(":")]
    return "/".join(parts) or "/"


# =============================================================================
# Blocks
# =============================================================================


def data_block(entity: Entity) -> list[str]:
    lines = [_SOURCE_COMMENTS[entity.source], f"data {entity.name} {{", "  fields: {"]
    for entity_field in entity.fields:
        optional = "" if entity_field.required else " // optional"
        lines.append(f"    {entity_field.name}: {entity_field.type}{optional}")
    lines.append("  }")
    for relation in entity.relations:
        lines.append(f"  // {relation.field_name}: {_RELATION_WORDS[relation.kind]} {relation.target}")
    todo = _SOURCE_TODOS.get(entity.source)
    if todo:
        lines.append(todo.format(name=entity.name))
    lines.append("}")
    return lines


def widget_lines(view: View) -> list[str]:
    if not view.widgets:
        return [
            "  // TODO: Add widgets for this view",
            "  // Example: list EntityName",
            '  // Example: button "Click me" -> HandleAction',
        ]

    lines: list[str] = []
    for widget in view.widgets:
        if isinstance(widget, ListWidget):
            lines.append(f"  list {widget.entity_name}")
        elif isinstance(widget, ButtonWidget):
            lines.append(f"  button {_quote(widget.label)} -> {widget.action_name}")
        elif isinstance(widget, FormWidget):
            lines.append("  // TODO: Define form inputs")
            lines.append(f"  // form for {widget.action_name}")
        elif isinstance(widget, InputWidget):
            lines.append(f"  // input {widget.field_name}")
        elif isinstance(widget, UnknownWidget):
            lines.append(f"  // TODO: Unrecognized element <{widget.tag}>")
    return lines


def style_lines(view: View) -> list[str]:
    """
    Element styles as comments, one property per line; ShepLang has no style block yet.

    ``md:p-4`` renders as ``//   padding: 1rem @md``.
    """
    lines: list[str] = []
    for style in view.styles:
        lines.append(f"  // style {style.element_tag}:")
        for prop in style.properties:
            line = f"  //   {prop.property}: {prop.value}"
            if prop.responsive:
                line += f" @{prop.responsive}"
            if prop.state:
                line += f" :{prop.state}"
            lines.append(line)
        lines.extend(f"  //   css module: {name}" for name in style.module_classes)
        if style.dynamic_class:
            lines.append(f"  //   dynamic class: {style.dynamic_class}")
    return lines


def view_block(view: View) -> list[str]:
    lines = []
    if view.source_file:
        lines.append(f"// From: {view.source_file}")
    lines.append(f"view {view.name} {{")
    if view.route:
        lines.append(f"  // route: {view.route}")
    lines.extend(widget_lines(view))
    lines.extend(style_lines(view))
    lines.append("}")
    return lines


def target_view(action: Action, model: AppModel) -> str:
    """
    View shown after an action: the first view listing an entity the action
    name mentions, else the dashboard.
    """
    for entity in model.entities:
        if entity.name not in action.name:
            continue
        for view in model.views:
            if entity.name in view.list_entities:
                return view.name
    return DASHBOARD_VIEW_NAME


def statement_lines(statements: list[HandlerStatement], indent: int = 1) -> list[str]:
    """
    Render translated handler statements, nesting ``if`` branches.

    Raw code is commented out so the scaffold stays valid ShepLang.

    Examples:
        >>> statement_lines([HandlerStatement(kind="show", view="Tasks")])
        ['  show Tasks']
    """
    prefix = "  " * indent
    lines: list[str] = []
    for statement in statements:
        kind = statement.kind
        if kind == StatementKind.CALL:
            line = f"{prefix}call {statement.method} {_quote(statement.path or '/')}"
            if statement.fields:
                line += f" with {', '.join(statement.fields)}"
            if statement.variable:
                line += f" into {statement.variable}"
            lines.append(line)
        elif kind == StatementKind.SET:
            lines.append(f"{prefix}set {statement.variable} to {statement.value}")
        elif kind == StatementKind.IF:
            lines.append(f"{prefix}if {statement.condition}:")
            lines.extend(statement_lines(statement.then, indent + 1) or [f"{prefix}  // (empty)"])
            if statement.otherwise:
                lines.append(f"{prefix}else:")
                lines.extend(statement_lines(statement.otherwise, indent + 1))
        elif kind == StatementKind.RETURN:
            lines.append(f"{prefix}return {statement.value}" if statement.value else f"{prefix}return")
        elif kind == StatementKind.ADD:
            fields = f" with {', '.join(statement.fields)}" if statement.fields else ""
            lines.append(f"{prefix}add {statement.entity}{fields}")
        elif kind == StatementKind.REMOVE:
            where = f" where id == {statement.value}" if statement.value else ""
            lines.append(f"{prefix}remove {statement.entity}{where}")
        elif kind == StatementKind.SHOW:
            lines.append(f"{prefix}show {statement.view}")
        else:
            if statement.comment:
                lines.append(f"{prefix}// {statement.comment}")
            lines.append(f"{prefix}// {statement.code}")
    return lines


def _translated_body(action: Action, model: AppModel) -> list[str]:
    lines = statement_lines(action.statements)
    if action.skipped:
        lines.append(f"  // {skipped_summary(action.skipped)}")
    if not any(s.kind == StatementKind.SHOW for s in action.statements):
        lines.append(f"  show {target_view(action, model)}")
    return lines


def action_block(action: Action, model: AppModel) -> list[str]:
    params = ", ".join(action.parameters) if action.parameters else "params"
    lines = [f"// Source: {action.source.value}", f"action {action.name}({params}) {{"]
    for todo in action.todos:
        lines.append(f"  // {todo}")

    if action.statements:
        lines.extend(_translated_body(action, model))
        lines.append("}")
        return lines

    if not action.api_calls:
        lines.append("  // TODO: Implement action logic")
        lines.append(f"  show {target_view(action, model)}")
        lines.append("}")
        return lines

    for call in action.api_calls:
        if call.method == "GET":
            lines.append(f'  load GET "{call.path}" into {variable_for_path(call.path)}')
            continue
        with_clause = f" with {', '.join(action.parameters)}" if action.parameters else ""
        lines.append(f'  call {call.method} "{call.path}"{with_clause}')
        reload = reload_path(call.path)
        lines.append(f'  load GET "{reload}" into {variable_for_path(reload)}')
    lines.append(f"  show {target_view(action, model)}")
    lines.append("}")
    return lines


# =============================================================================
# File
# =============================================================================


def rendered_views(model: AppModel) -> list[View]:
    """Model views plus the default and dashboard views the actions rely on."""
    views = list(model.views) or [View(name=DEFAULT_VIEW_NAME, source_file="")]
    needs_dashboard = any(target_view(a, model) == DASHBOARD_VIEW_NAME for a in model.actions)
    if needs_dashboard and not any(v.name == DASHBOARD_VIEW_NAME for v in views):
        views.append(
            View(
                name=DASHBOARD_VIEW_NAME,
                source_file="",
                widgets=[ListWidget(entity_name=e.name) for e in model.entities],
            )
        )
    return views


def render_shep(model: AppModel) -> str:
    """Render the whole ``.shep`` file for `model`."""
    lines = [
        f"// {model.app_name}",
        f"// Generated from project: {model.project_root}",
        "//",
        "// This is a generated ShepLang scaffold. Review and customize:",
        "// - Fill in TODO comments with your business logic",
        "// - Refine entity fields as needed",
        "// - Add validation rules",
        "// - Customize view layouts",
        "",
        f"app {model.app_name} {{",
        "",
    ]

    if model.todos:
        lines.append("// TODOs from import:")
        lines.extend(f"// - {todo}" for todo in model.todos)
        lines.append("")

    if model.entities:
        lines.extend(_section("Data Models"))
        for entity in model.entities:
            lines.extend(data_block(entity))
            lines.append("")

    lines.extend(_section("Views (Screens)"))
    for view in rendered_views(model):
        lines.extend(view_block(view))
        lines.append("")

    if model.actions:
        lines.extend(_section("Actions (Business Logic)"))
        for action in model.actions:
            lines.extend(action_block(action, model))
            lines.append("")

    lines.extend([BANNER, f"// End of {model.app_name}", BANNER, "}"])
    return "\n".join(lines) + "\n"
