"""Unit tests for entity, view and action naming rules."""

import pytest

from shepimport.analyzer.naming import (
    action_name_for_call,
    action_name_for_label,
    consolidate,
    format_action_name,
    resolve_entity,
    resource_name,
    resource_segment,
    strip_entity_affixes,
    view_name,
)
from shepimport.core.config import ConsolidationRule


class TestViewAndActionNames:
    """Tests for view and action naming."""

    @pytest.mark.parametrize(
        ("component", "expected"),
        [("TasksPage", "Tasks"), ("UserView", "User"), ("Page", "Page"), ("settings-panel", "SettingsPanel")],
    )
    def test_view_name(self, component: str, expected: str) -> None:
        assert view_name(component) == expected

    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            ("handleAddTask", "AddTask"),
            ("onSubmit", "Submit"),
            ("saveDraft", "SaveDraft"),
            ("handler", "Handler"),
            ("props.onDelete", "Delete"),
        ],
    )
    def test_format_action_name(self, reference: str, expected: str) -> None:
        assert format_action_name(reference) == expected

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Add User", "CreateUser"),
            ("New task", "CreateTask"),
            ("Save", "Update"),
            ("Remove item", "DeleteItem"),
            ("Refresh", "Load"),
            ("Mark complete", "MarkComplete"),
            ("!!!", "Action"),
        ],
    )
    def test_action_name_for_label(self, label: str, expected: str) -> None:
        assert action_name_for_label(label) == expected

    @pytest.mark.parametrize(
        ("method", "path", "expected"),
        [
            ("GET", "/api/tasks", "LoadTask"),
            ("POST", "/api/users", "CreateUser"),
            ("PUT", "/api/tasks/:id", "UpdateTask"),
            ("PATCH", "/api/tasks/:id", "UpdateTask"),
            ("DELETE", "/api/todo-items/:id", "DeleteTodoItem"),
            ("GET", "/api", "LoadResource"),
        ],
    )
    def test_action_name_for_call(self, method: str, path: str, expected: str) -> None:
        assert action_name_for_call(method, path) == expected

    def test_resource_segment(self) -> None:
        assert resource_segment("/api/users/:id?expand=1") == "users"
        assert resource_segment("/api/:id") is None
        assert resource_name("/api/categories") == "Category"


class TestConsolidation:
    """Tests for entity-name consolidation."""

    @pytest.mark.parametrize("name", ["SimpleList", "TaskWithTags", "SubTasks", "TodoItem", "Dashboard"])
    def test_task_variants(self, name: str) -> None:
        assert consolidate(name) == "Task"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("UserProfile", "User"), ("BlogPosts", "Post"), ("ReplyList", "Comment"), ("Invoices", "Invoice")],
    )
    def test_other_rules_and_fallback(self, name: str, expected: str) -> None:
        assert consolidate(name) == expected

    def test_strip_entity_affixes(self) -> None:
        assert strip_entity_affixes("SimpleList") == "Simple"
        assert strip_entity_affixes("AddUserScreen") == "User"
        assert strip_entity_affixes("ListView") == ""

    def test_custom_rules(self) -> None:
        rules = (ConsolidationRule(contains=("bill",), canonical="Invoice"),)
        assert consolidate("BillList", rules) == "Invoice"
        assert consolidate("SubTasks", rules) == "SubTask"

    def test_empty_rules_singularize(self) -> None:
        assert consolidate("Orders", ()) == "Order"


class TestResolveEntity:
    """Tests for fuzzy entity resolution."""

    def test_exact_case_insensitive(self) -> None:
        assert resolve_entity("task", ["User", "Task"]) == "Task"

    def test_plural_hint_to_singular_entity(self) -> None:
        assert resolve_entity("Tasks", ["Task"]) == "Task"
        assert resolve_entity("categories", ["Category"]) == "Category"

    def test_singular_hint_to_plural_entity(self) -> None:
        assert resolve_entity("Task", ["Tasks"]) == "Tasks"
        assert resolve_entity("category", ["Categories"]) == "Categories"

    def test_no_match(self) -> None:
        assert resolve_entity("Order", ["Task", "User"]) is None
        assert resolve_entity("Task", []) is None

    def test_first_name_wins_on_ties(self) -> None:
        assert resolve_entity("task", ["Task", "TASK"]) == "Task"
