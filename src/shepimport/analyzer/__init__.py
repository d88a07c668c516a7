"""
Semantic analysis: parse records in, `AppModel` out.
"""

from .aggregator import Aggregator, ModelBuilder, aggregate
from .correlator import Correlation, correlate
from .naming import consolidate, resolve_entity
from .refinement import UserRefinement, apply_refinement

__all__ = [
    "Aggregator",
    "Correlation",
    "ModelBuilder",
    "UserRefinement",
    "aggregate",
    "apply_refinement",
    "consolidate",
    "correlate",
    "resolve_entity",
]
