"""Unit tests for frontend-to-backend call correlation."""

import pytest

from shepimport.analyzer.correlator import correlate, match_path, normalize_path
from shepimport.core.ir import ApiCall, Component, Route


def _component(name: str, *calls: tuple[str, str]) -> Component:
    return Component(
        name=name,
        file_path=f"components/{name}.tsx",
        api_calls=[ApiCall(method=method, url=url) for method, url in calls],
    )


class TestMatchPath:
    """Tests for path pattern matching."""

    def test_normalize(self) -> None:
        assert normalize_path("api/tasks/?done=1") == "/api/tasks"
        assert normalize_path("/api/tasks/${task.id}#top") == "/api/tasks/:param"

    @pytest.mark.parametrize(
        ("frontend", "backend", "expected"),
        [
            ("/api/tasks", "/api/tasks", (True, True)),
            ("/api/tasks?page=2", "/api/tasks", (True, True)),
            ("/api/tasks/:id", "/api/tasks/:taskId", (True, False)),
            ("/api/tasks/42", "/api/tasks/:id", (True, False)),
            ("/api/tasks", "/api/tasks/:id", (False, False)),
            ("/api/tasks/1/comments", "/api/tasks/:id", (False, False)),
            ("/api/files/a/b/c", "/api/files/:path+", (True, False)),
            ("/api/files", "/api/files/:path+", (False, False)),
            ("/api/files", "/api/files/:path*", (True, False)),
            ("/api/users", "/api/tasks", (False, False)),
        ],
    )
    def test_match_path(self, frontend: str, backend: str, expected: tuple[bool, bool]) -> None:
        assert match_path(frontend, backend) == expected


class TestCorrelate:
    """Tests for correlate."""

    def test_exact_match_beats_earlier_pattern(self) -> None:
        routes = [
            Route(method="GET", path="/api/tasks/:id"),
            Route(method="GET", path="/api/tasks/archived"),
        ]
        result = correlate([_component("Archive", ("GET", "/api/tasks/archived"))], routes)
        assert len(result.matches) == 1
        assert result.matches[0].route.path == "/api/tasks/archived"
        assert result.matches[0].exact
        assert result.unmatched_backend == [routes[0]]

    def test_method_must_match(self) -> None:
        routes = [Route(method="GET", path="/api/tasks")]
        result = correlate([_component("TaskForm", ("POST", "/api/tasks"))], routes)
        assert result.matches == []
        assert [(c.method, c.url, c.component) for c in result.unmatched_frontend] == [
            ("POST", "/api/tasks", "TaskForm")
        ]

    def test_summary(self) -> None:
        result = correlate([_component("TaskForm", ("POST", "/api/tasks"))], [])
        summary = result.summary()
        assert "Matched: 0" in summary
        assert "POST /api/tasks (TaskForm)" in summary
