"""Unit tests for user refinement."""

from shepimport.analyzer.entities import synthesized_entity
from shepimport.analyzer.refinement import UserRefinement, apply_refinement
from shepimport.core.ir import (
    AppModel,
    ButtonWidget,
    Entity,
    EntityField,
    EntitySource,
    ListWidget,
    View,
)


def _model() -> AppModel:
    task = Entity(
        name="Task",
        source=EntitySource.SCHEMA,
        fields=[EntityField(name="id", type="text"), EntityField(name="title", type="text")],
    )
    return AppModel(
        app_name="Project",
        project_root="/work/project",
        entities=[task, synthesized_entity("Order")],
        views=[
            View(
                name="Home",
                source_file="app/page.tsx",
                widgets=[
                    ListWidget(entity_name="Order"),
                    ListWidget(entity_name="Task"),
                    ButtonWidget(label="Add", action_name="CreateOrder"),
                ],
            )
        ],
        todos=["Review inferred entities"],
    )


class TestUserRefinement:
    """Tests for building refinements from raw text."""

    def test_from_text_splits_and_trims(self) -> None:
        refinement = UserRefinement.from_text("  Task Tracker ", " Task, ,Project ,", "  ")
        assert refinement.app_type == "Task Tracker"
        assert refinement.entities == ["Task", "Project"]
        assert refinement.instructions is None

    def test_is_empty(self) -> None:
        assert UserRefinement().is_empty
        assert UserRefinement.from_text(None, "", None).is_empty
        assert not UserRefinement(instructions="Keep it small").is_empty


class TestApplyRefinement:
    """Tests for apply_refinement."""

    def test_empty_refinement_returns_same_model(self) -> None:
        model = _model()
        assert apply_refinement(model, UserRefinement()) is model

    def test_app_type_whitespace_removed(self) -> None:
        refined = apply_refinement(_model(), UserRefinement(app_type="Task  Tracker\tPro"))
        assert refined.app_name == "TaskTrackerPro"

    def test_app_type_path_characters_stripped(self) -> None:
        refined = apply_refinement(_model(), UserRefinement(app_type="../../Task Tracker!"))
        assert refined.app_name == "TaskTracker"

    def test_app_type_without_letters_keeps_name(self) -> None:
        refined = apply_refinement(_model(), UserRefinement(app_type="../!!"))
        assert refined.app_name == "Project"

    def test_entities_replace_inferred_set(self) -> None:
        model = _model()
        refined = apply_refinement(model, UserRefinement(entities=["tasks", "project", "Project"]))

        assert [(e.name, e.source) for e in refined.entities] == [
            ("Task", EntitySource.SCHEMA),
            ("Project", EntitySource.USER),
        ]
        # The schema entity keeps its own fields
        assert [f.name for f in refined.entities[0].fields] == ["id", "title"]
        assert [f.name for f in refined.entities[1].fields] == ["id", "name"]

        # The original model is untouched
        assert [e.name for e in model.entities] == ["Task", "Order"]

    def test_list_widgets_repointed(self) -> None:
        refined = apply_refinement(_model(), UserRefinement(entities=["Project", "Task"]))
        widgets = refined.views[0].widgets
        assert widgets[0] == ListWidget(entity_name="Project")
        assert widgets[1] == ListWidget(entity_name="Task")
        assert widgets[2] == ButtonWidget(label="Add", action_name="CreateOrder")

    def test_instructions_prepended_to_todos(self) -> None:
        refined = apply_refinement(_model(), UserRefinement(instructions="Add due dates"))
        assert refined.todos == ["Custom instruction: Add due dates", "Review inferred entities"]
