"""
Route types for shepimport IR.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


class Route(BaseModel):
    """
    One HTTP handler reconstructed from a route file.

    Examples:
        - ``app/api/tasks/[id]/route.ts`` exporting ``PUT``
          -> Route(method="PUT", path="/api/tasks/:id", params=["id"])

    Attributes:
        persistence_model: Model touched by ``prisma.<model>.<op>`` or ``<Model>.<op>``
        persistence_operation: The ``<op>`` of that call
        status_code: Explicit ``status: N`` in the response, if any
    """

    method: str
    path: str
    file_path: str = ""
    handler_name: str | None = None
    params: list[str] = Field(default_factory=list)
    body_fields: list[str] = Field(default_factory=list)
    persistence_model: str | None = None
    persistence_operation: str | None = None
    status_code: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def resource(self) -> str | None:
        """Last static path segment, e.g. ``tasks`` for ``/api/tasks/:id``."""
        static = [s for s in self.path.split("/") if s and not s.startswith(":")]
        return static[-1] if static else None
