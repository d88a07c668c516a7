"""Unit tests for entity construction and action inference."""

from shepimport.analyzer.actions import (
    call_actions,
    handler_actions,
    infer_parameters,
    route_actions,
    stub_action,
)
from shepimport.analyzer.entities import (
    entities_from_schema,
    input_fields,
    list_type_name,
    state_entity_names,
    synthesized_entity,
)
from shepimport.core.ir import (
    ActionApiCall,
    ActionSource,
    ApiCall,
    Component,
    EntityField,
    EntitySource,
    HandlerSpec,
    HandlerStatement,
    RelationKind,
    Route,
    StateSpec,
    StatementKind,
)
from shepimport.parsers.schema_parser import parse_schema

BLOG_SCHEMA = """\
model Author {
  id    Int    @id @default(autoincrement())
  name  String
  bio   String?
  posts Post[]
}

model Post {
  id       Int    @id
  title    String
  author   Author @relation(fields: [authorId], references: [id])
  authorId Int
}
"""


class TestEntities:
    """Tests for entity construction."""

    def test_entities_from_schema(self) -> None:
        author, post = entities_from_schema(parse_schema(BLOG_SCHEMA))
        assert author.name == "Author"
        assert author.source == EntitySource.SCHEMA
        assert author.fields == [
            EntityField(name="id", type="number"),
            EntityField(name="name", type="text"),
            EntityField(name="bio", type="text", required=False),
        ]
        assert [(r.field_name, r.target, r.kind) for r in author.relations] == [
            ("posts", "Post", RelationKind.HAS_MANY)
        ]
        assert [(r.field_name, r.kind) for r in post.relations] == [("author", RelationKind.BELONGS_TO)]
        assert [f.name for f in post.fields] == ["id", "title", "authorId"]

    def test_synthesized_entity(self) -> None:
        entity = synthesized_entity("Order")
        assert entity.source == EntitySource.INFERRED
        assert [(f.name, f.type) for f in entity.fields] == [("id", "text"), ("name", "text")]

    def test_list_type_name(self) -> None:
        assert list_type_name("Task[]") == "Task"
        assert list_type_name("Array<User> | null") == "User"
        assert list_type_name("string[]") is None
        assert list_type_name(None) is None

    def test_state_entity_names(self) -> None:
        component = Component(
            name="Board",
            file_path="app/page.tsx",
            state=[
                StateSpec(name="tasks", type="Task[]"),
                StateSpec(name="open", type="boolean"),
                StateSpec(name="done", type="Task[]"),
                StateSpec(name="users", type="Array<User>"),
            ],
        )
        assert state_entity_names(component) == ["Task", "User"]

    def test_input_fields_skip_generated(self) -> None:
        author = entities_from_schema(parse_schema(BLOG_SCHEMA))[0]
        assert input_fields(author) == ["name", "bio"]


class TestActions:
    """Tests for action inference."""

    def _entities(self):
        return entities_from_schema(parse_schema(BLOG_SCHEMA))

    def test_infer_parameters_from_first_mutating_call(self) -> None:
        calls = [ApiCall(method="GET", url="/api/posts"), ApiCall(method="POST", url="/api/authors")]
        assert infer_parameters(calls, self._entities()) == ["name", "bio"]
        assert infer_parameters([ActionApiCall(method="PUT", path="/api/unknown/:id")], self._entities()) == []
        assert infer_parameters([], self._entities()) == []

    def test_handler_actions(self) -> None:
        component = Component(
            name="AuthorForm",
            file_path="components/AuthorForm.tsx",
            handlers=[
                HandlerSpec(event="onSubmit", function_name="handleCreateAuthor"),
                HandlerSpec(event="onClick", function_name="handleCreateAuthor"),
                HandlerSpec(event="onClick", function_name="toggleMenu"),
                HandlerSpec(event="onChange", inline=True, body="setName(e.target.value)"),
            ],
            api_calls=[ApiCall(method="POST", url="/api/authors", handler="handleCreateAuthor")],
        )
        create, toggle = handler_actions(component, self._entities())
        assert create.name == "CreateAuthor"
        assert create.source == ActionSource.HANDLER
        assert create.parameters == ["name", "bio"]
        assert create.api_calls == [ActionApiCall(method="POST", path="/api/authors")]
        assert create.todos == []
        assert toggle.name == "ToggleMenu"
        assert toggle.todos == ["TODO: Port toggleMenu from components/AuthorForm.tsx"]

    def test_handler_statements_carried_into_actions(self) -> None:
        removal = HandlerStatement(kind=StatementKind.REMOVE, entity="Posts", value="id")
        component = Component(
            name="PostList",
            file_path="components/PostList.tsx",
            handlers=[
                HandlerSpec(
                    event="onClick",
                    function_name="removePost",
                    statements=[
                        HandlerStatement(kind=StatementKind.IF, condition="busy", then=[removal]),
                        HandlerStatement(kind=StatementKind.RAW, code="track(id)", comment="Function call"),
                    ],
                    skipped={"console": 1},
                ),
                HandlerSpec(
                    event="onClick",
                    function_name="closeMenu",
                    statements=[HandlerStatement(kind=StatementKind.RAW, code="menu.close()")],
                ),
            ],
        )
        remove, close = handler_actions(component, self._entities())
        assert remove.statements[0].then == [removal.model_copy(update={"entity": "Post"})]
        assert remove.skipped == {"console": 1}
        assert remove.todos == ["TODO: Review 1 untranslated statement(s) in removePost"]
        assert close.todos == ["TODO: Port closeMenu from components/PostList.tsx"]

    def test_call_actions_skip_handled_calls(self) -> None:
        component = Component(
            name="Feed",
            file_path="components/Feed.tsx",
            handlers=[HandlerSpec(event="onClick", function_name="handleRefresh")],
            api_calls=[
                ApiCall(method="GET", url="/api/posts"),
                ApiCall(method="GET", url="/api/posts?page=2"),
                ApiCall(method="POST", url="/api/posts", handler="handleRefresh"),
                ApiCall(method="DELETE", url="/api/posts/:id", handler="removePost"),
            ],
        )
        actions = call_actions(component, self._entities())
        assert [(a.name, [c.path for c in a.api_calls]) for a in actions] == [
            ("LoadPost", ["/api/posts"]),
            ("DeletePost", ["/api/posts/:id"]),
        ]

    def test_route_actions_merge_same_name(self) -> None:
        routes = [
            Route(method="GET", path="/api/posts"),
            Route(method="POST", path="/api/posts", body_fields=["title", "authorId"]),
            Route(method="GET", path="/api/posts/:id"),
        ]
        load, create = route_actions(routes)
        assert load.name == "LoadPost"
        assert load.source == ActionSource.API_ROUTE
        assert [c.path for c in load.api_calls] == ["/api/posts", "/api/posts/:id"]
        assert create.parameters == ["title", "authorId"]

    def test_stub_action(self) -> None:
        action = stub_action("Archive", "Tasks")
        assert action.todos == ["TODO: Implement Archive (referenced by view Tasks)"]
        assert action.api_calls == []
