"""Unit tests for page-to-view translation."""

import pytest

from shepimport.analyzer.views import build_view, element_label, handler_reference, page_route
from shepimport.core.ir import (
    ButtonWidget,
    Component,
    ComponentKind,
    FormWidget,
    InputWidget,
    JSXElement,
    ListWidget,
    StateSpec,
    UnknownWidget,
)


def _page(*elements: JSXElement, name: str = "TasksPage", state: list[StateSpec] | None = None) -> Component:
    return Component(
        name=name,
        file_path="app/tasks/page.tsx",
        kind=ComponentKind.PAGE,
        elements=list(elements),
        state=state or [],
    )


def _el(tag: str, *children: JSXElement, text: str | None = None, iterates: str | None = None, **attributes: str):
    return JSXElement(
        tag=tag,
        attributes={k.replace("_", "-"): v for k, v in attributes.items()},
        children=list(children),
        text=text,
        iterates=iterates,
    )


class TestHelpers:
    """Tests for route, label and handler helpers."""

    @pytest.mark.parametrize(
        ("rel_path", "expected"),
        [
            ("app/page.tsx", "/"),
            ("app/tasks/[id]/page.tsx", "/tasks/:id"),
            ("app/(shop)/cart/page.tsx", "/cart"),
            ("pages/index.tsx", "/"),
            ("pages/users/[id].tsx", "/users/:id"),
            ("src/App.jsx", "/"),
            ("components/TaskList.tsx", None),
        ],
    )
    def test_page_route(self, rel_path: str, expected: str | None) -> None:
        assert page_route(rel_path) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("handleSave", "handleSave"),
            ("props?.onSave", "props.onSave"),
            ("() => handleDelete(task.id)", "handleDelete"),
            ("(e) => { e.preventDefault(); onSubmit(e); }", "onSubmit"),
            ("() => setOpen(true)", None),
            (None, None),
        ],
    )
    def test_handler_reference(self, value: str | None, expected: str | None) -> None:
        assert handler_reference(value) == expected

    def test_element_label(self) -> None:
        assert element_label(_el("button", text="Delete {task.title}")) == "Delete"
        assert element_label(_el("button", aria_label="Close")) == "Close"
        assert element_label(_el("button")) is None


class TestBuildView:
    """Tests for widget extraction."""

    def test_name_and_route(self) -> None:
        view = build_view(_page())
        assert view.name == "Tasks"
        assert view.route == "/tasks"
        assert view.source_file == "app/tasks/page.tsx"
        assert view.widgets == []

    def test_list_hint_from_mapped_items(self) -> None:
        view = build_view(_page(_el("ul", _el("li", text="{t.title}", iterates="tasks"))))
        assert view.widgets == [ListWidget(entity_name="Tasks")]

    def test_list_hint_precedence(self) -> None:
        explicit = build_view(_page(_el("table", data_entity="Order")))
        assert explicit.widgets == [ListWidget(entity_name="Order")]

        component_tag = build_view(_page(_el("UserList")))
        assert component_tag.widgets == [ListWidget(entity_name="User")]

        typed_state = build_view(_page(_el("ol"), state=[StateSpec(name="items", type="Invoice[]")]))
        assert typed_state.widgets == [ListWidget(entity_name="Invoice")]

        fallback = build_view(_page(_el("ul")))
        assert fallback.widgets == [ListWidget(entity_name="Tasks")]

    def test_mapped_element_without_container_is_a_list(self) -> None:
        view = build_view(_page(_el("div", _el("TaskCard", iterates="data.tasks"))))
        assert view.widgets == [ListWidget(entity_name="Tasks")]

    def test_buttons(self) -> None:
        view = build_view(
            _page(
                _el("button", text="Add Task"),
                _el("button", text="Remove", onClick="() => handleRemove(id)"),
                _el("button", text="Add Task"),
            )
        )
        assert view.widgets == [
            ButtonWidget(label="Add Task", action_name="CreateTask"),
            ButtonWidget(label="Remove", action_name="Remove"),
        ]

    def test_form_inputs_and_submit_button(self) -> None:
        form = _el(
            "form",
            _el("input", name="title"),
            _el("textarea", placeholder="Task notes"),
            _el("button", type="submit", text="Save"),
            onSubmit="handleCreate",
        )
        view = build_view(_page(form))
        assert view.widgets == [
            FormWidget(action_name="Create"),
            InputWidget(field_name="title"),
            InputWidget(field_name="taskNotes"),
            ButtonWidget(label="Save", action_name="Create"),
        ]

    def test_form_without_handler(self) -> None:
        view = build_view(_page(_el("form")))
        assert view.widgets == [FormWidget(action_name="SubmitTasks")]

    def test_unknown_and_structural_elements(self) -> None:
        view = build_view(_page(_el("main", _el("h1", text="Tasks"), _el("a", href="/"), _el("AuthProvider"))))
        assert view.widgets == [UnknownWidget(tag="a")]

    def test_list_precedes_button(self) -> None:
        view = build_view(_page(_el("ul", onClick="handleOpen")))
        assert [w.kind for w in view.widgets] == ["list"]
