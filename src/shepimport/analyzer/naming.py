"""
Naming rules for entities, views and actions.

Every heuristic here is an ordered table evaluated first-match-wins, so each
rule can be tested on its own and extended without touching control flow.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ..core.config import DEFAULT_CONSOLIDATION_RULES, ConsolidationRule
from ..core.strings import pluralize, sanitize_name, singularize, split_words, to_pascal_case

# =============================================================================
# Rule tables
# =============================================================================

# Button-label verbs, in priority order.
LABEL_VERB_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(add|new|create)\b", re.IGNORECASE), "Create"),
    (re.compile(r"\b(edit|update|save)\b", re.IGNORECASE), "Update"),
    (re.compile(r"\b(delete|remove)\b", re.IGNORECASE), "Delete"),
    (re.compile(r"\b(load|refresh|fetch)\b", re.IGNORECASE), "Load"),
)

METHOD_VERBS: dict[str, str] = {
    "GET": "Load",
    "POST": "Create",
    "PUT": "Update",
    "PATCH": "Update",
    "DELETE": "Delete",
}

# Words removed from screen and button names before an entity name is formed.
ENTITY_AFFIXES = frozenset({"List", "Create", "Add", "New", "Edit", "Detail", "Screen", "View"})

VIEW_SUFFIXES = ("Page", "View", "Component")

HANDLER_PREFIXES = ("handle", "on")

_IDENTIFIER_RE = re.compile(r"[^A-Za-z0-9_]")


# =============================================================================
# Views
# =============================================================================


def view_name(component_name: str) -> str:
    """
    Sanitized view name without a trailing ``Page`` / ``View`` / ``Component``.

    Examples:
        >>> view_name("TasksPage")
        'Tasks'
        >>> view_name("Page")
        'Page'
    """
    name = to_pascal_case(component_name) or "Main"
    for suffix in VIEW_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


# =============================================================================
# Actions
# =============================================================================


def format_action_name(reference: str) -> str:
    """
    Turn a handler reference into an action name.

    Strips a ``handle`` / ``on`` prefix and PascalCases the rest.

    Examples:
        >>> format_action_name("handleAddTask")
        'AddTask'
        >>> format_action_name("onSubmit")
        'Submit'
        >>> format_action_name("saveDraft")
        'SaveDraft'
    """
    name = reference.rsplit(".", 1)[-1]
    for prefix in HANDLER_PREFIXES:
        rest = name[len(prefix) :]
        if name.startswith(prefix) and rest[:1].isupper():
            name = rest
            break
    name = _IDENTIFIER_RE.sub("", to_pascal_case(name))
    return name or "Action"


def action_name_for_label(label: str) -> str:
    """
    Action name for a button label.

    The first verb rule that matches supplies the verb; the remaining words
    form the object. Labels that match no rule are PascalCased as-is.

    Examples:
        >>> action_name_for_label("Add User")
        'CreateUser'
        >>> action_name_for_label("Save")
        'Update'
        >>> action_name_for_label("Mark complete")
        'MarkComplete'
    """
    for pattern, verb in LABEL_VERB_RULES:
        if pattern.search(label):
            rest = pattern.sub(" ", label)
            return verb + sanitize_name(rest)
    return sanitize_name(label) or "Action"


def resource_segment(path: str) -> str | None:
    """
    Last static segment of an API path, ignoring ``:param`` segments and queries.

    Examples:
        >>> resource_segment("/api/users/:id")
        'users'
    """
    clean = path.split("?", 1)[0]
    static = [s for s in clean.split("/") if s and not s.startswith(":") and s != "api"]
    return static[-1] if static else None


def resource_name(path: str) -> str:
    """
    Singular PascalCase resource for an API path.

    Examples:
        >>> resource_name("/api/users/:id")
        'User'
        >>> resource_name("/api/todo-items")
        'TodoItem'
    """
    segment = resource_segment(path)
    if segment is None:
        return "Resource"
    return singularize(to_pascal_case(segment)) or "Resource"


def action_name_for_call(method: str, path: str) -> str:
    """
    ``<Verb><Resource>`` for an HTTP call.

    Examples:
        >>> action_name_for_call("POST", "/api/users")
        'CreateUser'
        >>> action_name_for_call("PATCH", "/api/tasks/:id")
        'UpdateTask'
    """
    verb = METHOD_VERBS.get(method.upper(), to_pascal_case(method.lower()))
    return verb + resource_name(path)


# =============================================================================
# Entities
# =============================================================================


def strip_entity_affixes(name: str) -> str:
    """
    Remove screen/button vocabulary and PascalCase what remains.

    Examples:
        >>> strip_entity_affixes("SimpleList")
        'Simple'
        >>> strip_entity_affixes("AddUserScreen")
        'User'
    """
    words = [w for w in split_words(name) if to_pascal_case(w) not in ENTITY_AFFIXES]
    return "".join(to_pascal_case(w) for w in words)


def consolidate(
    name: str,
    rules: Sequence[ConsolidationRule] = DEFAULT_CONSOLIDATION_RULES,
) -> str:
    """
    Fold a surface name onto its canonical entity name.

    Examples:
        >>> consolidate("TaskWithTags")
        'Task'
        >>> consolidate("Invoices")
        'Invoice'
    """
    stripped = strip_entity_affixes(name) or to_pascal_case(name)
    for rule in rules:
        if rule.matches(stripped):
            return rule.canonical
    return singularize(stripped) or "Item"


def resolve_entity(hint: str, names: Iterable[str]) -> str | None:
    """
    Resolve an entity-name hint against known names.

    Exact case-insensitive match first, then the hint singularized or
    pluralized against each name, then each name singularized or pluralized
    against the hint.

    Examples:
        >>> resolve_entity("Tasks", ["Task"])
        'Task'
        >>> resolve_entity("task", ["Tasks"])
        'Tasks'
    """
    candidates = list(names)
    lowered = {name.lower(): name for name in reversed(candidates)}
    hint_lower = hint.lower()

    if hint_lower in lowered:
        return lowered[hint_lower]

    for variant in (singularize(hint), pluralize(hint), hint.removesuffix("s")):
        if variant.lower() in lowered:
            return lowered[variant.lower()]

    for name in candidates:
        for variant in (singularize(name), pluralize(name), name + "s"):
            if variant.lower() == hint_lower:
                return name
    return None
