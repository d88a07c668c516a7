"""Unit tests for the Prisma schema parser."""

import pytest

from shepimport.core.ir import DefaultFunction
from shepimport.parsers.schema_parser import SCALAR_TYPE_MAP, map_type, parse_schema

RELATION_SCHEMA = """\
model User {
  id    Int    @id @default(autoincrement())
  email String @unique
  posts Post[]
}

model Post {
  id       Int  @id @default(autoincrement())
  author   User @relation("AuthorPosts", fields: [authorId], references: [id], onDelete: Cascade)
  authorId Int
  updatedAt DateTime @updatedAt

  @@index([authorId])
}
"""


class TestMapType:
    """Tests for map_type."""

    @pytest.mark.parametrize(
        ("prisma_type", "expected"),
        [
            ("String", "text"),
            ("Int", "number"),
            ("Float", "number"),
            ("Decimal", "number"),
            ("BigInt", "number"),
            ("Boolean", "yes/no"),
            ("DateTime", "datetime"),
            ("Json", "text"),
            ("Bytes", "text"),
            ("Priority", "Priority"),
        ],
    )
    def test_mapping(self, prisma_type: str, expected: str) -> None:
        assert map_type(prisma_type) == expected

    def test_pure(self) -> None:
        """Repeated calls give equal results and leave the table untouched."""
        before = dict(SCALAR_TYPE_MAP)
        assert [map_type("Boolean") for _ in range(3)] == ["yes/no"] * 3
        assert SCALAR_TYPE_MAP == before


class TestParseSchema:
    """Tests for parse_schema."""

    def test_empty_input(self) -> None:
        document = parse_schema("")
        assert document.models == []
        assert document.enums == []

    def test_no_model_blocks(self) -> None:
        assert parse_schema('datasource db {\n  provider = "sqlite"\n}\n').models == []

    def test_task_round_trip(self, task_schema: str) -> None:
        document = parse_schema(task_schema)
        assert [e.name for e in document.enums] == ["Priority"]
        assert document.enums[0].values == ["LOW", "HIGH"]

        task = document.get_model("Task")
        assert task is not None
        assert [f.name for f in task.fields] == ["id", "title", "done", "priority", "notes", "createdAt"]
        assert [f.shep_type for f in task.fields] == ["text", "text", "yes/no", "Priority", "text", "datetime"]

        id_field = task.get_field("id")
        assert id_field.is_id
        assert id_field.default_function == DefaultFunction.CUID

        done = task.get_field("done")
        assert done.default_value == "false"
        assert done.default_function is None

        assert task.get_field("notes").is_optional
        assert not task.get_field("notes").is_required
        assert task.get_field("createdAt").default_function == DefaultFunction.NOW
        assert not task.get_field("priority").is_relation

    def test_nested_brace_default(self) -> None:
        text = """\
model Weird {
  id     String @id
  config Json   @default(fn(x: {y: 1}))
  name   String
}

model After {
  id String @id
}
"""
        document = parse_schema(text)
        assert [m.name for m in document.models] == ["Weird", "After"]
        weird = document.models[0]
        assert [f.name for f in weird.fields] == ["id", "config", "name"]
        assert weird.get_field("config").default_value == "fn(x: {y: 1})"

    def test_relations(self) -> None:
        document = parse_schema(RELATION_SCHEMA)
        user = document.get_model("User")
        posts = user.get_field("posts")
        assert posts.is_relation
        assert posts.is_array
        assert posts.relation_model == "Post"
        assert user.get_field("email").is_unique

        post = document.get_model("Post")
        author = post.get_field("author")
        assert author.is_relation
        assert author.relation_name == "AuthorPosts"
        assert author.relation_fields == ["authorId"]
        assert author.on_delete == "Cascade"
        assert post.get_field("updatedAt").is_updated_at
        assert post.model_attributes == ["@@index([authorId])"]
        assert [f.name for f in post.scalar_fields] == ["id", "authorId", "updatedAt"]

    def test_single_line_model(self) -> None:
        document = parse_schema("model Task { id String @id done Boolean @default(false) }")
        assert [f.name for f in document.models[0].fields] == ["id", "done"]

    def test_malformed_lines_are_dropped(self) -> None:
        text = """\
model Task {
  id String @id
  123bad String
  title String
  // comment only
  weird Type<T>
}
"""
        task = parse_schema(text).models[0]
        assert [f.name for f in task.fields] == ["id", "title"]

    def test_comments_and_string_defaults(self) -> None:
        text = 'model Note {\n  body String @default("a // b") // trailing\n}\n'
        note = parse_schema(text).models[0]
        assert note.get_field("body").default_value == "a // b"
