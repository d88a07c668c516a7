"""
Page components to views.

Each kept JSX element yields at most one widget. The rules are tried in a
fixed order: list, button, form, input. Elements that match none are either
structural (no widget) or recorded as unknown so the emitter can leave a
TODO line for them.

List widgets carry an entity-name hint here; the aggregator resolves hints
against the entity set once every view has been built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from ..core.ir import (
    ButtonWidget,
    Component,
    FormWidget,
    InputWidget,
    JSXElement,
    ListWidget,
    UnknownWidget,
    View,
    Widget,
)
from ..core.strings import to_pascal_case
from ..parsers.route_parser import convert_segment
from .entities import state_entity_names
from .naming import action_name_for_label, format_action_name, strip_entity_affixes, view_name
from .styles import element_styles

LIST_TAGS = frozenset({"ul", "ol", "table"})
LIST_COMPONENT_SUFFIXES = ("List", "Table", "Grid")
INPUT_TAGS = frozenset({"input", "textarea", "select"})
BUTTON_INPUT_TYPES = frozenset({"submit", "button", "reset"})

# Elements that organise other elements and never become widgets themselves.
STRUCTURAL_TAGS = frozenset(
    {
        "div",
        "main",
        "section",
        "header",
        "footer",
        "nav",
        "aside",
        "article",
        "li",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "label",
        "fieldset",
        "option",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "Fragment",
        "React.Fragment",
        "Suspense",
    }
)
STRUCTURAL_COMPONENT_SUFFIXES = ("Provider", "Layout", "Boundary")

_REFERENCE_RE = re.compile(r"^[A-Za-z_$][\w$]*(?:\??\.[A-Za-z_$][\w$]*)*$")
_HANDLER_CALL_RE = re.compile(r"\b((?:handle|on)[A-Z][\w$]*|[\w$]+Handler)\s*\(")
_INTERPOLATION_RE = re.compile(r"\{[^}]*\}")


def page_route(rel_path: str) -> str | None:
    """
    URL route of a page file.

    Examples:
        >>> page_route("app/tasks/[id]/page.tsx")
        '/tasks/:id'
        >>> page_route("src/pages/index.jsx")
        '/'
        >>> page_route("components/TaskList.tsx")
    """
    path = PurePosixPath(rel_path)
    dirs = list(path.parts[:-1])
    stem = path.name.split(".", 1)[0]

    if "app" in dirs and stem == "page":
        segments = dirs[dirs.index("app") + 1 :]
    elif "pages" in dirs:
        segments = dirs[dirs.index("pages") + 1 :]
        if stem != "index":
            segments.append(stem)
    elif dirs == ["src"] and stem == "App":
        return "/"
    else:
        return None

    converted = [
        convert_segment(s)
        for s in segments
        if not (s.startswith("(") and s.endswith(")")) and not s.startswith("@")
    ]
    return "/" + "/".join(converted)


def handler_reference(value: str | None) -> str | None:
    """
    Name of the function an event attribute is bound to.

    A plain reference is returned as-is; an inline arrow that calls a
    handler-named function yields that function.

    Examples:
        >>> handler_reference("handleSave")
        'handleSave'
        >>> handler_reference("() => handleDelete(task.id)")
        'handleDelete'
        >>> handler_reference("() => setOpen(true)")
    """
    if not value:
        return None
    value = value.strip()
    if _REFERENCE_RE.match(value):
        return value.replace("?.", ".")
    if "=>" in value:
        match = _HANDLER_CALL_RE.search(value.split("=>", 1)[1])
        if match:
            return match.group(1)
    return None


def element_label(element: JSXElement) -> str | None:
    """Visible text of an element with interpolations removed."""
    text = _INTERPOLATION_RE.sub(" ", element.full_text)
    text = " ".join(text.split())
    if text:
        return text
    for attribute in ("aria-label", "title", "value"):
        value = element.attributes.get(attribute)
        if value and not _INTERPOLATION_RE.search(value):
            return value
    return None


def _is_structural(tag: str) -> bool:
    return tag in STRUCTURAL_TAGS or tag.endswith(STRUCTURAL_COMPONENT_SUFFIXES)


def _is_list(element: JSXElement, inside_list: bool) -> bool:
    tag = element.tag
    if tag in LIST_TAGS:
        return True
    if tag[:1].isupper() and tag.endswith(LIST_COMPONENT_SUFFIXES):
        return True
    # A repeated element with no list container around it
    return bool(element.iterates) and not inside_list


def _is_button(element: JSXElement) -> bool:
    if element.tag == "button" or "onClick" in element.attributes:
        return True
    if element.tag == "input" and element.attributes.get("type") in BUTTON_INPUT_TYPES:
        return True
    return element.tag[:1].isupper() and element.tag.endswith("Button")


def _field_name(element: JSXElement) -> str:
    for attribute in ("name", "id"):
        value = element.attributes.get(attribute)
        if value and _REFERENCE_RE.match(value):
            return value
    bound = element.attributes.get("value")
    if bound and _REFERENCE_RE.match(bound):
        return bound.rsplit(".", 1)[-1]
    placeholder = element.attributes.get("placeholder")
    if placeholder:
        words = to_pascal_case(placeholder)
        if words:
            return words[:1].lower() + words[1:]
    return "input"


@dataclass
class ViewBuilder:
    """Translates one page component into a `View`."""

    component: Component
    name: str = ""
    widgets: list[Widget] = field(default_factory=list)
    _seen: set[tuple[str, str]] = field(default_factory=set)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = view_name(self.component.name)

    def build(self) -> View:
        for element in self.component.elements:
            self._visit(element, inside_list=False, form_action=None)
        return View(
            name=self.name,
            source_file=self.component.file_path,
            route=page_route(self.component.file_path),
            widgets=self.widgets,
            styles=element_styles(self.component.styles),
        )

    def _add(self, widget: Widget, key: str) -> None:
        identity = (widget.kind, key)
        if identity in self._seen:
            return
        self._seen.add(identity)
        self.widgets.append(widget)

    def _visit(self, element: JSXElement, inside_list: bool, form_action: str | None) -> None:
        tag = element.tag

        if _is_list(element, inside_list):
            hint = self.list_hint(element)
            self._add(ListWidget(entity_name=hint), hint.lower())
            inside_list = True
        elif _is_button(element):
            label = element_label(element) or "Button"
            action = self.button_action(element, label, form_action)
            self._add(ButtonWidget(label=label, action_name=action), f"{label}->{action}")
            if tag == "button" or tag == "input":
                return
        elif tag == "form":
            form_action = self.form_action(element)
            self._add(FormWidget(action_name=form_action), form_action)
        elif tag in INPUT_TAGS:
            name = _field_name(element)
            self._add(InputWidget(field_name=name), name)
            return
        elif not _is_structural(tag):
            self._add(UnknownWidget(tag=tag), tag)

        for child in element.children:
            self._visit(child, inside_list, form_action)

    # ------------------------------------------------------------------
    # Hints and names
    # ------------------------------------------------------------------

    def list_hint(self, element: JSXElement) -> str:
        """
        Entity-name hint for a list element.

        In order: an explicit ``data-entity`` attribute, the collection the
        list (or one of its items) iterates, the list component's own name,
        the first list-typed state, the view name.
        """
        explicit = element.attributes.get("data-entity")
        if explicit:
            return explicit

        for node in element.walk():
            if node.iterates:
                return to_pascal_case(node.iterates.rsplit(".", 1)[-1])

        if element.tag[:1].isupper():
            stripped = strip_entity_affixes(element.tag.removesuffix("Table").removesuffix("Grid"))
            if stripped:
                return stripped

        state_names = state_entity_names(self.component)
        if state_names:
            return state_names[0]
        return strip_entity_affixes(self.name) or self.name

    def button_action(self, element: JSXElement, label: str, form_action: str | None) -> str:
        reference = handler_reference(element.attributes.get("onClick"))
        if reference:
            return format_action_name(reference)
        if form_action and element.attributes.get("type", "submit") == "submit" and element.tag == "button":
            return form_action
        return action_name_for_label(label)

    def form_action(self, element: JSXElement) -> str:
        reference = handler_reference(element.attributes.get("onSubmit"))
        if reference:
            return format_action_name(reference)
        action = element.attributes.get("action")
        if action and _REFERENCE_RE.match(action):
            return format_action_name(action)
        return f"Submit{self.name}"


def build_view(component: Component, name: str | None = None) -> View:
    """Build the view for a page component; list widgets hold unresolved hints."""
    return ViewBuilder(component, name=name or "").build()
