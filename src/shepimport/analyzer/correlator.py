"""
Frontend-to-backend call correlation.

Matches the HTTP calls found in components against the reconstructed
backend routes by method and path pattern.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..core.ir import Component, Route


@dataclass(frozen=True)
class FrontendCall:
    method: str
    url: str
    component: str
    handler: str | None = None


@dataclass(frozen=True)
class EndpointMatch:
    call: FrontendCall
    route: Route
    exact: bool


@dataclass
class Correlation:
    """Result of matching every frontend call against every route."""

    matches: list[EndpointMatch] = field(default_factory=list)
    unmatched_frontend: list[FrontendCall] = field(default_factory=list)
    unmatched_backend: list[Route] = field(default_factory=list)

    def summary(self) -> str:
        lines = [
            f"Matched: {len(self.matches)}",
            f"Unmatched frontend calls: {len(self.unmatched_frontend)}",
            f"Unmatched backend routes: {len(self.unmatched_backend)}",
        ]
        for call in self.unmatched_frontend:
            lines.append(f"  {call.method} {call.url} ({call.component})")
        return "\n".join(lines)


def normalize_path(url: str) -> str:
    """
    Canonical form for comparison: no query string, template markers or
    trailing slash, always a leading slash.

    Examples:
        >>> normalize_path("api/tasks/?done=1")
        '/api/tasks'
        >>> normalize_path("/api/tasks/${id}")
        '/api/tasks/:param'
    """
    cleaned = url.strip().strip("'\"`")
    cleaned = re.sub(r"\$\{[^}]+\}", ":param", cleaned)
    cleaned = cleaned.split("?", 1)[0].split("#", 1)[0]
    cleaned = cleaned.rstrip("/")
    if not cleaned.startswith("/"):
        cleaned = "/" + cleaned
    return cleaned


def match_path(frontend_url: str, backend_path: str) -> tuple[bool, bool]:
    """
    Match a frontend URL against a route pattern.

    Returns ``(matches, exact)``. ``:name`` route segments match any one
    segment, ``:name+`` one or more trailing segments and ``:name*`` zero or
    more.
    """
    frontend = normalize_path(frontend_url)
    backend = normalize_path(backend_path)
    if frontend == backend:
        return True, True

    frontend_segments = [s for s in frontend.split("/") if s]
    backend_segments = [s for s in backend.split("/") if s]

    for index, segment in enumerate(backend_segments):
        if segment.startswith(":") and segment.endswith(("+", "*")):
            remaining = len(frontend_segments) - index
            minimum = 1 if segment.endswith("+") else 0
            return remaining >= minimum, False
        if index >= len(frontend_segments):
            return False, False
        if segment.startswith(":"):
            continue
        if frontend_segments[index] != segment:
            return False, False

    return len(frontend_segments) == len(backend_segments), False


def frontend_calls(components: list[Component]) -> list[FrontendCall]:
    return [
        FrontendCall(method=call.method, url=call.url, component=component.name, handler=call.handler)
        for component in components
        for call in component.api_calls
    ]


def correlate(components: list[Component], routes: list[Route]) -> Correlation:
    """
    Pair each frontend call with a backend route.

    An exact path match beats a pattern match; between equals the first
    route in scan order wins.
    """
    correlation = Correlation()
    matched_routes: set[int] = set()

    for call in frontend_calls(components):
        best: tuple[int, Route, bool] | None = None
        for index, route in enumerate(routes):
            if route.method != call.method:
                continue
            matches, exact = match_path(call.url, route.path)
            if not matches:
                continue
            if best is None or (exact and not best[2]):
                best = (index, route, exact)
        if best is None:
            correlation.unmatched_frontend.append(call)
            continue
        matched_routes.add(best[0])
        correlation.matches.append(EndpointMatch(call=call, route=best[1], exact=best[2]))

    correlation.unmatched_backend = [r for i, r in enumerate(routes) if i not in matched_routes]
    return correlation
