"""
Per-file parsers.

Each parser takes one file's text and returns its records plus diagnostics;
none of them raises on malformed input.
"""

from .component_parser import ComponentParseResult, parse_component
from .route_parser import RouteParseResult, parse_routes, route_path
from .schema_parser import map_type, parse_schema

__all__ = [
    "ComponentParseResult",
    "RouteParseResult",
    "map_type",
    "parse_component",
    "parse_routes",
    "parse_schema",
    "route_path",
]
