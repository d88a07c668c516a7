"""Unit tests for the .shep, .shepthon and report emitters."""

from pathlib import Path

from shepimport.core.errors import Diagnostic, Severity
from shepimport.core.ir import (
    Action,
    ActionApiCall,
    ActionSource,
    AppModel,
    ButtonWidget,
    Entity,
    EntityField,
    EntityRelation,
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
from shepimport.emitter import emit, render_report, render_shep, render_shepthon
from shepimport.emitter.shep import BANNER, reload_path, variable_for_path
from shepimport.emitter.shepthon import collection_name, endpoint_line, shepthon_type


def _tracker() -> AppModel:
    task = Entity(
        name="Task",
        source=EntitySource.SCHEMA,
        fields=[
            EntityField(name="id", type="text"),
            EntityField(name="title", type="text"),
            EntityField(name="done", type="yes/no"),
            EntityField(name="notes", type="text", required=False),
        ],
        relations=[EntityRelation(field_name="owner", target="User", kind=RelationKind.BELONGS_TO)],
    )
    user = Entity(
        name="User",
        source=EntitySource.INFERRED,
        fields=[EntityField(name="id", type="text"), EntityField(name="name", type="text")],
    )
    view = View(
        name="Tasks",
        source_file="app/tasks/page.tsx",
        route="/tasks",
        widgets=[
            ListWidget(entity_name="Task"),
            ButtonWidget(label="Add Task", action_name="CreateTask"),
            FormWidget(action_name="Save"),
            InputWidget(field_name="title"),
            UnknownWidget(tag="Chart"),
        ],
    )
    actions = [
        Action(
            name="CreateTask",
            source=ActionSource.API_ROUTE,
            parameters=["title"],
            api_calls=[ActionApiCall(method="POST", path="/tasks")],
        ),
        Action(
            name="LoadTask",
            source=ActionSource.API_ROUTE,
            api_calls=[
                ActionApiCall(method="GET", path="/tasks"),
                ActionApiCall(method="GET", path="/tasks/:id"),
            ],
        ),
        Action(
            name="Archive",
            source=ActionSource.HANDLER,
            todos=["TODO: Port handleArchive from app/tasks/page.tsx"],
        ),
        Action(
            name="LoadHealth",
            source=ActionSource.API_ROUTE,
            api_calls=[ActionApiCall(method="GET", path="/health")],
        ),
    ]
    return AppModel(
        app_name="Tracker",
        project_root="/work/tracker",
        entities=[task, user],
        views=[view],
        actions=actions,
        todos=["Entity User was inferred from view Tasks; add its real fields."],
    )


def _block(text: str, opening: str) -> list[str]:
    """Lines from `opening` through the next line that is exactly ``}``."""
    lines = text.splitlines()
    start = lines.index(opening)
    end = lines.index("}", start)
    return lines[start : end + 1]


class TestShepHelpers:
    """Tests for the small path helpers."""

    def test_variable_for_path(self) -> None:
        assert variable_for_path("/api/tasks/:id") == "tasks"
        assert variable_for_path("/api/todo-items?page=1") == "todoitems"
        assert variable_for_path("/:id") == "items"

    def test_reload_path(self) -> None:
        assert reload_path("/api/tasks/:id") == "/api/tasks"
        assert reload_path("/api/tasks") == "/api/tasks"


class TestRenderShep:
    """Tests for render_shep."""

    def test_header_and_footer(self) -> None:
        text = render_shep(_tracker())
        lines = text.splitlines()
        assert lines[0] == "// Tracker"
        assert lines[1] == "// Generated from project: /work/tracker"
        assert "app Tracker {" in lines
        assert lines[-4:] == [BANNER, "// End of Tracker", BANNER, "}"]
        assert text.endswith("}\n")

    def test_sections_in_order(self) -> None:
        text = render_shep(_tracker())
        positions = [
            text.index("// TODOs from import:"),
            text.index("// Data Models"),
            text.index("// Views (Screens)"),
            text.index("// Actions (Business Logic)"),
        ]
        assert positions == sorted(positions)
        assert "// - Entity User was inferred from view Tasks; add its real fields." in text

    def test_data_blocks(self) -> None:
        text = render_shep(_tracker())
        assert _block(text, "data Task {") == [
            "data Task {",
            "  fields: {",
            "    id: text",
            "    title: text",
            "    done: yes/no",
            "    notes: text // optional",
            "  }",
            "  // owner: belongs to User",
            "}",
        ]
        assert _block(text, "data User {")[-2] == "  // TODO: Add more fields as needed"
        lines = text.splitlines()
        assert lines[lines.index("data Task {") - 1] == "// From schema model"
        assert lines[lines.index("data User {") - 1] == "// Inferred from views"

    def test_user_entities_get_field_todo(self) -> None:
        model = _tracker()
        project = Entity(name="Project", source=EntitySource.USER)
        text = render_shep(model.model_copy(update={"entities": [project]}))
        assert "  // TODO: Add the specific fields you need for Project" in text
        assert "// Supplied during import" in text

    def test_view_block(self) -> None:
        text = render_shep(_tracker())
        assert _block(text, "view Tasks {") == [
            "view Tasks {",
            "  // route: /tasks",
            "  list Task",
            '  button "Add Task" -> CreateTask',
            "  // TODO: Define form inputs",
            "  // form for Save",
            "  // input title",
            "  // TODO: Unrecognized element <Chart>",
            "}",
        ]
        assert "// From: app/tasks/page.tsx" in text

    def test_button_labels_escaped(self) -> None:
        model = _tracker()
        view = View(name="Quotes", source_file="", widgets=[ButtonWidget(label='Say "hi"', action_name="Greet")])
        text = render_shep(model.model_copy(update={"views": [view]}))
        assert '  button "Say \\"hi\\"" -> Greet' in text

    def test_action_blocks(self) -> None:
        text = render_shep(_tracker())
        assert _block(text, "action CreateTask(title) {") == [
            "action CreateTask(title) {",
            '  call POST "/tasks" with title',
            '  load GET "/tasks" into tasks',
            "  show Tasks",
            "}",
        ]
        assert _block(text, "action LoadTask(params) {") == [
            "action LoadTask(params) {",
            '  load GET "/tasks" into tasks',
            '  load GET "/tasks/:id" into tasks',
            "  show Tasks",
            "}",
        ]
        assert _block(text, "action Archive(params) {") == [
            "action Archive(params) {",
            "  // TODO: Port handleArchive from app/tasks/page.tsx",
            "  // TODO: Implement action logic",
            "  show Dashboard",
            "}",
        ]
        lines = text.splitlines()
        assert lines[lines.index("action CreateTask(title) {") - 1] == "// Source: api-route"
        assert lines[lines.index("action Archive(params) {") - 1] == "// Source: handler"

    def test_translated_action_body(self) -> None:
        submit = Action(
            name="Submit",
            source=ActionSource.HANDLER,
            todos=["TODO: Review 1 untranslated statement(s) in handleSubmit"],
            statements=[
                HandlerStatement(
                    kind=StatementKind.IF,
                    condition="not title",
                    then=[HandlerStatement(kind=StatementKind.RETURN)],
                    otherwise=[HandlerStatement(kind=StatementKind.SET, variable="error", value="null")],
                ),
                HandlerStatement(
                    kind=StatementKind.CALL,
                    method="POST",
                    path="/api/tasks",
                    fields=["title"],
                    variable="task",
                ),
                HandlerStatement(kind=StatementKind.ADD, entity="Task", fields=["task"]),
                HandlerStatement(kind=StatementKind.REMOVE, entity="Task", value="id"),
                HandlerStatement(kind=StatementKind.RAW, code="track(task)", comment="Function call"),
            ],
            skipped={"console": 2},
        )
        model = _tracker().model_copy(update={"actions": [submit]})
        assert _block(render_shep(model), "action Submit(params) {") == [
            "action Submit(params) {",
            "  // TODO: Review 1 untranslated statement(s) in handleSubmit",
            "  if not title:",
            "    return",
            "  else:",
            "    set error to null",
            '  call POST "/api/tasks" with title into task',
            "  add Task with task",
            "  remove Task where id == id",
            "  // Function call",
            "  // track(task)",
            "  // Skipped: 2 console calls (boilerplate)",
            "  show Dashboard",
            "}",
        ]

    def test_translated_navigation_replaces_default_show(self) -> None:
        go = Action(
            name="Open",
            source=ActionSource.HANDLER,
            statements=[HandlerStatement(kind=StatementKind.SHOW, view="Settings")],
        )
        model = _tracker().model_copy(update={"actions": [go]})
        assert _block(render_shep(model), "action Open(params) {") == [
            "action Open(params) {",
            "  show Settings",
            "}",
        ]

    def test_dashboard_added_when_an_action_shows_it(self) -> None:
        text = render_shep(_tracker())
        assert _block(text, "view Dashboard {") == [
            "view Dashboard {",
            "  list Task",
            "  list User",
            "}",
        ]

    def test_empty_model_gets_main_view(self) -> None:
        text = render_shep(AppModel(app_name="Empty", project_root="/p"))
        assert "// Data Models" not in text
        assert "// Actions (Business Logic)" not in text
        assert "view Dashboard {" not in text
        assert _block(text, "view MainView {") == [
            "view MainView {",
            "  // TODO: Add widgets for this view",
            "  // Example: list EntityName",
            '  // Example: button "Click me" -> HandleAction',
            "}",
        ]

    def test_rendering_is_deterministic(self) -> None:
        assert render_shep(_tracker()) == render_shep(_tracker())


class TestRenderShepthon:
    """Tests for render_shepthon."""

    def test_type_mapping(self) -> None:
        assert shepthon_type("text") == "String"
        assert shepthon_type("number") == "Int"
        assert shepthon_type("yes/no") == "Boolean"
        assert shepthon_type("datetime") == "DateTime"
        assert shepthon_type("Priority") == "String"

    def test_collection_name(self) -> None:
        assert collection_name("Task") == "tasks"
        assert collection_name("TodoItem") == "todo_items"

    def test_endpoint_lines(self) -> None:
        assert endpoint_line(ActionApiCall(method="GET", path="/tasks"), "tasks") == 'GET /tasks -> db.all("tasks")'
        assert (
            endpoint_line(ActionApiCall(method="PATCH", path="/tasks/:id"), "tasks")
            == 'PATCH /tasks/:id -> db.update("tasks", params.id, body)'
        )
        assert (
            endpoint_line(ActionApiCall(method="DELETE", path="/tasks"), "tasks")
            == 'DELETE /tasks -> db.remove("tasks", body.id)'
        )
        assert (
            endpoint_line(ActionApiCall(method="GET", path="/files/:path+"), "files")
            == 'GET /files/:path+ -> db.find("files", params.path)'
        )

    def test_storage_operation_decides_db_verb(self) -> None:
        search = ActionApiCall(
            method="POST", path="/tasks/search", persistence_model="task", persistence_operation="findMany"
        )
        assert endpoint_line(search, "tasks") == 'POST /tasks/search -> db.all("tasks")'
        first = ActionApiCall(method="GET", path="/tasks/latest", persistence_operation="findFirst")
        assert endpoint_line(first, "tasks") == 'GET /tasks/latest -> db.find("tasks", body.id)'
        archive = ActionApiCall(method="POST", path="/tasks/:id/archive", persistence_operation="update")
        assert endpoint_line(archive, "tasks") == 'POST /tasks/:id/archive -> db.update("tasks", params.id, body)'
        purge = ActionApiCall(method="POST", path="/tasks/purge", persistence_operation="deleteMany")
        assert endpoint_line(purge, "tasks") == 'POST /tasks/purge -> db.remove("tasks", body.id)'
        unknown = ActionApiCall(method="POST", path="/tasks", persistence_operation="aggregate")
        assert endpoint_line(unknown, "tasks") == 'POST /tasks -> db.add("tasks", body)'

    def test_storage_model_decides_collection(self) -> None:
        model = AppModel(
            app_name="Tracker",
            project_root="/p",
            entities=[Entity(name="TodoItem", source=EntitySource.SCHEMA)],
            actions=[
                Action(
                    name="CreateItem",
                    source=ActionSource.API_ROUTE,
                    api_calls=[
                        ActionApiCall(
                            method="POST", path="/items", persistence_model="todoItem", persistence_operation="create"
                        )
                    ],
                ),
                Action(
                    name="LoadReport",
                    source=ActionSource.API_ROUTE,
                    api_calls=[
                        ActionApiCall(
                            method="GET", path="/report", persistence_model="auditLog", persistence_operation="findMany"
                        )
                    ],
                ),
            ],
        )
        text = render_shepthon(model)
        assert 'POST /items -> db.add("todo_items", body)' in text
        assert 'GET /report -> db.all("audit_logs")' in text
        assert "# TodoItem CRUD" not in text

    def test_model_blocks(self) -> None:
        text = render_shepthon(_tracker())
        assert _block(text, "model Task {") == [
            "model Task {",
            "  id: String",
            "  title: String",
            "  done: Boolean",
            "  notes: String",
            "  # owner: belongs to User",
            "}",
        ]
        assert text.startswith("# Tracker backend\n# Generated from project: /work/tracker\n")

    def test_route_endpoints_then_crud_for_uncovered(self) -> None:
        lines = render_shepthon(_tracker()).splitlines()
        start = lines.index("# Endpoints from API routes")
        assert lines[start + 1 : start + 5] == [
            'POST /tasks -> db.add("tasks", body)',
            'GET /tasks -> db.all("tasks")',
            'GET /tasks/:id -> db.find("tasks", params.id)',
            'GET /health -> db.all("health")',
        ]
        assert "# Task CRUD" not in lines
        crud = lines.index("# User CRUD")
        assert lines[crud + 1 : crud + 6] == [
            'GET /users -> db.all("users")',
            'GET /users/:id -> db.find("users", params.id)',
            'POST /users -> db.add("users", body)',
            'PUT /users/:id -> db.update("users", params.id, body)',
            'DELETE /users/:id -> db.remove("users", params.id)',
        ]

    def test_handler_actions_add_no_endpoints(self) -> None:
        model = _tracker()
        handlers_only = [a for a in model.actions if a.source == ActionSource.HANDLER]
        text = render_shepthon(model.model_copy(update={"actions": handlers_only}))
        assert "# Endpoints from API routes" not in text
        assert "# Task CRUD" in text
        assert text.endswith('db.remove("users", params.id)\n')


class TestRenderReport:
    """Tests for the Markdown import report."""

    def test_sections(self) -> None:
        model = _tracker()
        files = emit(model)
        diagnostics = [Diagnostic(Severity.WARNING, "Unterminated string", Path("app/x.tsx"), 3)]
        report = render_report(model, files, diagnostics)

        assert report.startswith("# Import Report: Tracker\n")
        assert "- **Entities:** 2" in report
        assert "- **Generated Files:** 2" in report
        assert "- **Task** (from schema) - 4 fields" in report
        assert "- **User** (inferred) - 2 fields" in report
        assert "- **Tasks** `/tasks` - 5 widgets" in report
        assert "- **CreateTask** (api-route) - 1 API calls" in report
        assert "## TODOs" in report
        assert "- **Archive**: TODO: Port handleArchive from app/tasks/page.tsx" in report
        assert "- [warning] app/x.tsx:3: Unterminated string" in report
        assert "1. Review the generated `.shep` file: `Tracker.shep`" in report

    def test_empty_sections_omitted(self) -> None:
        report = render_report(AppModel(app_name="Empty", project_root="/p"), [])
        assert "## Entities" not in report
        assert "## Warnings" not in report
        assert "## TODOs" not in report
        assert "## Action TODOs" not in report
        assert "`Empty.shep`" in report


class TestEmit:
    """Tests for emit."""

    def test_shep_first_then_backend(self) -> None:
        files = emit(_tracker())
        assert [f.file_name for f in files] == ["Tracker.shep", "Tracker.shepthon"]
        assert files[0].content == render_shep(_tracker())

    def test_backend_optional(self) -> None:
        assert [f.file_name for f in emit(_tracker(), backend=False)] == ["Tracker.shep"]
