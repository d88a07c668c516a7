"""Unit tests for semantic aggregation."""

from pathlib import Path

from shepimport.analyzer.aggregator import ModelBuilder, aggregate, default_app_name
from shepimport.core.config import ConsolidationRule, ImportConfig
from shepimport.core.ir import (
    Action,
    ActionApiCall,
    ActionSource,
    ApiCall,
    ButtonWidget,
    Component,
    ComponentKind,
    EntitySource,
    FormWidget,
    JSXElement,
    ListWidget,
    Route,
    StateSpec,
    View,
)
from shepimport.analyzer.entities import synthesized_entity
from shepimport.parsers.component_parser import parse_component
from shepimport.parsers.schema_parser import parse_schema


def _users_page() -> Component:
    return Component(
        name="UsersPage",
        file_path="pages/users.tsx",
        kind=ComponentKind.PAGE,
        elements=[
            JSXElement(
                tag="div",
                children=[
                    JSXElement(tag="ul", children=[JSXElement(tag="li", text="{u.name}", iterates="users")]),
                    JSXElement(tag="button", text="Add User"),
                ],
            )
        ],
    )


def _page(name: str, rel_path: str, *elements: JSXElement, **kwargs) -> Component:
    return Component(name=name, file_path=rel_path, kind=ComponentKind.PAGE, elements=list(elements), **kwargs)


class TestModelBuilder:
    """Tests for ModelBuilder collision handling."""

    def test_entities_unique_case_insensitively(self) -> None:
        builder = ModelBuilder()
        first = builder.add_entity(synthesized_entity("Task"))
        kept = builder.add_entity(synthesized_entity("TASK", EntitySource.USER))
        assert kept is first
        assert builder.entity_names == ["Task"]

    def test_first_action_wins(self) -> None:
        builder = ModelBuilder()
        assert builder.add_action(Action(name="Save", source=ActionSource.HANDLER))
        assert not builder.add_action(Action(name="Save", source=ActionSource.API_ROUTE))
        assert builder.actions["Save"].source == ActionSource.HANDLER

    def test_view_names_get_numeric_suffix(self) -> None:
        builder = ModelBuilder()
        names = [builder.add_view(View(name="Tasks", source_file=f"{i}.tsx")).name for i in range(3)]
        assert names == ["Tasks", "Tasks2", "Tasks3"]

    def test_todos_deduplicated(self) -> None:
        builder = ModelBuilder()
        builder.add_todo("Review")
        builder.add_todo("Review")
        assert builder.todos == ["Review"]


class TestAggregate:
    """Tests for aggregate."""

    def test_users_scenario(self) -> None:
        routes = [Route(method="POST", path="/users", body_fields=["name", "email"])]
        model = aggregate(None, [_users_page()], routes, project_root="/work/user-admin")

        assert model.app_name == "UserAdmin"
        assert [(e.name, e.source) for e in model.entities] == [("User", EntitySource.INFERRED)]

        (view,) = model.views
        assert view.name == "Users"
        assert view.widgets == [
            ListWidget(entity_name="User"),
            ButtonWidget(label="Add User", action_name="CreateUser"),
        ]

        (action,) = model.actions
        assert action.name == "CreateUser"
        assert action.source == ActionSource.API_ROUTE
        assert action.parameters == ["name", "email"]
        assert [(c.method, c.path) for c in action.api_calls] == [("POST", "/users")]

        assert model.todos == [
            "No data schema found; entities were inferred from the UI. Review their fields.",
            "Entity User was inferred from view Users; add its real fields.",
        ]

    def test_list_widgets_always_resolve(self, task_schema: str) -> None:
        pages = [
            _page("TasksPage", "app/tasks/page.tsx", JSXElement(tag="ul", iterates="tasks")),
            _page("Board", "app/board/page.tsx", JSXElement(tag="SimpleList")),
            _page("Orders", "app/orders/page.tsx", JSXElement(tag="table", attributes={"data-entity": "orders"})),
        ]
        model = aggregate(parse_schema(task_schema), pages, [])
        names = {e.name.lower() for e in model.entities}
        assert len(names) == len(model.entities)
        listed = [w.entity_name for v in model.views for w in v.widgets if isinstance(w, ListWidget)]
        assert listed == ["Task", "Task", "Order"]
        assert all(model.get_entity(name) is not None for name in listed)
        assert model.get_entity("Order").source == EntitySource.INFERRED
        assert model.get_entity("Task").source == EntitySource.SCHEMA

    def test_schema_suppresses_state_inference(self, task_schema: str) -> None:
        page = _page("Home", "app/page.tsx", state=[StateSpec(name="notes", type="Note[]")])
        model = aggregate(parse_schema(task_schema), [page], [])
        assert [e.name for e in model.entities] == ["Task"]
        assert model.todos == []

    def test_state_types_infer_entities_without_schema(self) -> None:
        page = _page("Home", "app/page.tsx", state=[StateSpec(name="notes", type="Note[]")])
        model = aggregate(None, [page], [])
        assert [e.name for e in model.entities] == ["Note"]

    def test_only_pages_become_views(self) -> None:
        widget = Component(name="TaskCard", file_path="components/TaskCard.tsx")
        model = aggregate(None, [widget], [])
        assert model.views == []

    def test_handler_actions_precede_route_actions(self) -> None:
        page = _page(
            "Users",
            "app/users/page.tsx",
            JSXElement(tag="button", text="Add", attributes={"onClick": "handleCreateUser"}),
            api_calls=[ApiCall(method="POST", url="/api/users", handler="createUser")],
        )
        routes = [Route(method="POST", path="/api/users", body_fields=["email"])]
        model = aggregate(None, [page], routes)
        create = model.get_action("CreateUser")
        assert create.source == ActionSource.HANDLER
        assert [a.name for a in model.actions] == ["CreateUser"]

    def test_stub_for_dangling_form_action(self) -> None:
        page = _page("Settings", "app/settings/page.tsx", JSXElement(tag="form", attributes={"onSubmit": "handleSave"}))
        model = aggregate(None, [page], [])
        assert model.views[0].widgets == [FormWidget(action_name="Save")]
        assert model.get_action("Save").todos == ["TODO: Implement Save (referenced by view Settings)"]

    def test_unmatched_frontend_calls_add_todos(self) -> None:
        page = _page("Tasks", "app/tasks/page.tsx", api_calls=[ApiCall(method="GET", url="/api/tasks")])
        routes = [Route(method="POST", path="/api/tasks")]
        model = aggregate(None, [page], routes)
        assert "No backend route found for GET /api/tasks (called from Tasks)" in model.todos

    def test_configured_rules_and_app_name(self) -> None:
        config = ImportConfig(
            app_name="Billing",
            consolidation_rules=(ConsolidationRule(contains=("bill",), canonical="Invoice"),),
        )
        page = _page("Bills", "app/bills/page.tsx", JSXElement(tag="BillList"))
        model = aggregate(None, [page], [], config=config)
        assert model.app_name == "Billing"
        assert [e.name for e in model.entities] == ["Invoice"]
        assert aggregate(None, [page], [], config=config, app_name="Override").app_name == "Override"

    def test_default_app_name(self) -> None:
        assert default_app_name("/work/my-next-app") == "MyNextApp"
        assert default_app_name("") == "MyApp"

    def test_app_name_is_sanitized(self) -> None:
        config = ImportConfig(app_name="../../Task Tracker!")
        assert aggregate(None, [], [], config=config).app_name == "TaskTracker"
        assert aggregate(None, [], [], app_name="/etc/", project_root="/work/shop").app_name == "Etc"
        assert aggregate(None, [], [], app_name="..", project_root="/work/shop").app_name == "Shop"

    def test_forwarding_button_wires_to_handler_action(self) -> None:
        text = """\
export default function TasksPage() {
  async function handleDelete(id) {
    await fetch(`/api/tasks/${id}`, { method: "DELETE" });
  }
  return <button onClick={() => handleDelete(1)}>Delete</button>;
}
"""
        component = parse_component(text, Path("/p/app/tasks/page.tsx"), "app/tasks/page.tsx").component
        model = aggregate(None, [component], [])

        assert model.views[0].widgets == [ButtonWidget(label="Delete", action_name="Delete")]
        (action,) = model.actions
        assert action.name == "Delete"
        assert action.api_calls == [ActionApiCall(method="DELETE", path="/api/tasks/:id")]
        assert action.todos == []
