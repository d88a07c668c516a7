"""Unit tests for handler body translation."""

from pathlib import Path

import pytest

from shepimport.core.ir import HandlerStatement, StatementKind
from shepimport.parsers.component_parser import parse_component
from shepimport.parsers.translator import (
    Translation,
    entity_for_state,
    object_fields,
    skipped_summary,
    view_for_path,
)

SUBMIT_FORM = """\
export default function Tasks() {
  const [tasks, setTasks] = useState([]);
  const [title, setTitle] = useState("");
  const router = useRouter();

  async function handleSubmit(e) {
    e.preventDefault();
    if (!title.trim()) return;
    console.log("saving", title);
    const response = await fetch("/api/tasks", { method: "POST", body: JSON.stringify({ title }) });
    const task = await response.json();
    setTasks([...tasks, task]);
    setTitle("");
    router.push("/tasks");
  }

  return <form onSubmit={handleSubmit}></form>;
}
"""

DELETE_BUTTON = """\
export default function Tasks() {
  const [tasks, setTasks] = useState([]);

  const handleDelete = async (id) => {
    try {
      await fetch(`/api/tasks/${id}`, { method: "DELETE" });
      setTasks((prev) => prev.filter((t) => t.id !== id));
    } catch (error) {
      alert("Could not delete");
    }
  };

  return <button onClick={() => handleDelete(1)}>Delete</button>;
}
"""


def _handler(text: str):
    (handler,) = parse_component(text, Path("/p/app/tasks/page.tsx"), "app/tasks/page.tsx").component.handlers
    return handler


def _single_handler_statements(body: str) -> list[HandlerStatement]:
    text = f"""\
export default function Panel() {{
  const [count, setCount] = useState(0);
  function handle(a, b) {{
    {body}
  }}
  return <button onClick={{handle}}>Go</button>;
}}
"""
    return _handler(text).statements


class TestHandlerTranslation:
    """Tests for translating whole handler bodies."""

    def test_submit_form(self) -> None:
        handler = _handler(SUBMIT_FORM)
        assert handler.statements == [
            HandlerStatement(
                kind=StatementKind.IF,
                condition="not title.trim()",
                then=[HandlerStatement(kind=StatementKind.RETURN)],
            ),
            HandlerStatement(
                kind=StatementKind.CALL,
                method="POST",
                path="/api/tasks",
                fields=["title"],
                variable="response",
            ),
            HandlerStatement(kind=StatementKind.SET, variable="task", value="response.json()"),
            HandlerStatement(kind=StatementKind.ADD, entity="Task", fields=["task"]),
            HandlerStatement(kind=StatementKind.SET, variable="title", value='""'),
            HandlerStatement(kind=StatementKind.SHOW, view="Tasks"),
        ]
        assert handler.skipped == {"preventDefault": 1, "console": 1}

    def test_delete_with_updater_and_catch(self) -> None:
        handler = _handler(DELETE_BUTTON)
        assert handler.function_name == "handleDelete"
        call, remove, catch = handler.statements
        assert (call.kind, call.method, call.path, call.fields) == (StatementKind.CALL, "DELETE", "/api/tasks/:id", [])
        assert remove == HandlerStatement(kind=StatementKind.REMOVE, entity="Task", value="id")
        assert (catch.kind, catch.comment) == (StatementKind.RAW, "Error handling")
        assert 'alert("Could not delete")' in catch.code

    def test_unknown_calls_are_kept_raw(self) -> None:
        (statement,) = _single_handler_statements("trackEvent('clicked', a);")
        assert statement.kind == StatementKind.RAW
        assert statement.comment == "Function call"
        assert statement.code == "trackEvent('clicked', a)"

    def test_if_else_branches(self) -> None:
        (statement,) = _single_handler_statements("if (a) { setCount(1); } else { setCount(count + 1); }")
        assert statement.condition == "a"
        assert statement.then == [HandlerStatement(kind=StatementKind.SET, variable="count", value="1")]
        assert statement.otherwise == [HandlerStatement(kind=StatementKind.SET, variable="count", value="count + 1")]

    def test_assignment_becomes_set(self) -> None:
        assert _single_handler_statements("a = b * 2;") == [
            HandlerStatement(kind=StatementKind.SET, variable="a", value="b * 2")
        ]

    def test_client_call_fields(self) -> None:
        (statement,) = _single_handler_statements("await api.post('/api/notes', { body: a, pinned: b });")
        assert (statement.method, statement.path, statement.fields) == ("POST", "/api/notes", ["body", "pinned"])

    @pytest.mark.parametrize(
        ("test", "expected"),
        [
            ("a === 0", "a == 0"),
            ("a !== b", "a != b"),
            ("!a || !b", "not a or not b"),
            ("a > 0 && (b || !a)", "a > 0 and (b or not a)"),
        ],
    )
    def test_conditions(self, test: str, expected: str) -> None:
        (statement,) = _single_handler_statements(f"if ({test}) return;")
        assert statement.condition == expected


class TestTranslation:
    """Tests for the translation result and helpers."""

    def test_confidence(self) -> None:
        assert Translation().confidence == 1.0
        translation = Translation(
            statements=[
                HandlerStatement(kind=StatementKind.SHOW, view="Home"),
                HandlerStatement(
                    kind=StatementKind.IF,
                    condition="a",
                    then=[HandlerStatement(kind=StatementKind.RAW, code="x()")],
                ),
            ]
        )
        assert translation.raw_count == 1
        assert translation.confidence == pytest.approx(2 / 3)

    def test_skipped_summary(self) -> None:
        assert skipped_summary({"console": 1}) == "Skipped: 1 console call (boilerplate)"
        assert (
            skipped_summary({"stopPropagation": 2, "console": 3})
            == "Skipped: 2 stopPropagation() calls, 3 console calls (boilerplate)"
        )

    def test_view_for_path(self) -> None:
        assert view_for_path("/settings/profile?tab=1") == "SettingsProfile"
        assert view_for_path("/tasks/:id") == "Tasks"

    def test_entity_for_state(self) -> None:
        assert entity_for_state("todoItems") == "TodoItem"
        assert entity_for_state("categories") == "Category"

    def test_object_fields_of_none(self) -> None:
        assert object_fields(None) == []
