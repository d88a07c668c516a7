"""
Component types for shepimport IR.

A `Component` is the structured record extracted from one React source file.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComponentKind(str, Enum):
    PAGE = "page"
    COMPONENT = "component"


class ExportKind(str, Enum):
    DEFAULT = "default"
    NAMED = "named"


class StatementKind(str, Enum):
    CALL = "call"
    SET = "set"
    IF = "if"
    RETURN = "return"
    ADD = "add"
    REMOVE = "remove"
    SHOW = "show"
    RAW = "raw"


class HandlerStatement(BaseModel):
    """
    One handler statement translated to ShepLang.

    Which fields are set depends on `kind`:

        call    method, path, fields, variable (``into``)
        set     variable, value
        if      condition, then, otherwise
        return  value
        add     entity, fields
        remove  entity, value (the removed id)
        show    view
        raw     code, comment

    Examples:
        - ``await fetch("/api/tasks", { method: "POST", body: JSON.stringify({ title }) })``
          -> HandlerStatement(kind="call", method="POST", path="/api/tasks", fields=["title"])
        - ``setTasks([...tasks, task])`` -> HandlerStatement(kind="add", entity="Task", fields=["task"])
    """

    kind: StatementKind
    method: str | None = None
    path: str | None = None
    fields: list[str] = Field(default_factory=list)
    variable: str | None = None
    value: str | None = None
    condition: str | None = None
    then: list[HandlerStatement] = Field(default_factory=list)
    otherwise: list[HandlerStatement] = Field(default_factory=list)
    entity: str | None = None
    view: str | None = None
    code: str | None = None
    comment: str | None = None

    model_config = ConfigDict(frozen=True)


class EffectKind(str, Enum):
    """Effect-like hooks whose bodies are captured."""

    EFFECT = "useEffect"
    LAYOUT_EFFECT = "useLayoutEffect"
    MEMO = "useMemo"
    CALLBACK = "useCallback"


class PropSpec(BaseModel):
    """A destructured or typed component prop."""

    name: str
    type: str | None = None
    required: bool = True

    model_config = ConfigDict(frozen=True)


class StateSpec(BaseModel):
    """
    A ``useState`` / ``useReducer`` declaration.

    Examples:
        - ``const [tasks, setTasks] = useState<Task[]>([])``
          -> StateSpec(name="tasks", setter="setTasks", type="Task[]", initial="[]")
    """

    name: str
    setter: str | None = None
    type: str | None = None
    initial: str | None = None
    hook: str = "useState"

    model_config = ConfigDict(frozen=True)


class JSXElement(BaseModel):
    """
    A kept element of the JSX tree.

    `iterates` names the collection an element is rendered from, e.g.
    ``users`` for ``{users.map(u => <li>...</li>)}``.
    """

    tag: str
    attributes: dict[str, str] = Field(default_factory=dict)
    children: list[JSXElement] = Field(default_factory=list)
    text: str | None = None
    iterates: str | None = None
    line: int = 0

    model_config = ConfigDict(frozen=True)

    def walk(self) -> list[JSXElement]:
        """Return this element and all descendants in document order."""
        result = [self]
        for child in self.children:
            result.extend(child.walk())
        return result

    @property
    def full_text(self) -> str:
        """Own text followed by descendant text, space separated."""
        parts = [e.text for e in self.walk() if e.text]
        return " ".join(parts)


class HandlerSpec(BaseModel):
    """
    An ``on*`` attribute on a JSX element.

    Attributes:
        event: Attribute name, e.g. ``onClick``
        function_name: Bound identifier, when the handler is a reference
        inline: True for inline arrow/function expressions
        body: Handler body text (inline, resolved or raw call text)
        params: Parameter names
        element_tag: Tag of the element carrying the attribute
        statements: The resolved function body translated to ShepLang
        skipped: Boilerplate calls left out of `statements`, by kind
    """

    event: str
    function_name: str | None = None
    inline: bool = False
    body: str = ""
    params: list[str] = Field(default_factory=list)
    element_tag: str = ""
    statements: list[HandlerStatement] = Field(default_factory=list)
    skipped: dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class EffectSpec(BaseModel):
    kind: EffectKind
    dependencies: list[str] | None = None
    body: str = ""
    cleanup: str | None = None

    model_config = ConfigDict(frozen=True)


class ApiCall(BaseModel):
    """
    A frontend HTTP call found in component code.

    Examples:
        - ``fetch('/api/tasks', {method: 'POST'})`` -> ApiCall(method="POST", url="/api/tasks")
        - ``axios.delete(`/api/tasks/${id}`)`` -> ApiCall(method="DELETE", url="/api/tasks/:id")
    """

    method: str
    url: str
    handler: str | None = None

    model_config = ConfigDict(frozen=True)


class StyleSpec(BaseModel):
    """
    Class names and inline style captured from one element.

    Attributes:
        class_name: Literal class list, or the source of a computed ``className``
        class_expression: True when `class_name` is computed (``styles.card``, a template, ``clsx(...)``)
        inline_style: Source of the ``style`` attribute
        inline_properties: ``style`` entries as written, when it is an object or CSS string
    """

    element_tag: str
    class_name: str | None = None
    class_expression: bool = False
    inline_style: str | None = None
    inline_properties: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class Component(BaseModel):
    """Structured record of one React component file."""

    name: str
    file_path: str
    kind: ComponentKind = ComponentKind.COMPONENT
    export_kind: ExportKind = ExportKind.DEFAULT
    props: list[PropSpec] = Field(default_factory=list)
    state: list[StateSpec] = Field(default_factory=list)
    elements: list[JSXElement] = Field(default_factory=list)
    handlers: list[HandlerSpec] = Field(default_factory=list)
    effects: list[EffectSpec] = Field(default_factory=list)
    api_calls: list[ApiCall] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    child_components: list[str] = Field(default_factory=list)
    styles: list[StyleSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_page(self) -> bool:
        return self.kind == ComponentKind.PAGE

    def all_elements(self) -> list[JSXElement]:
        result: list[JSXElement] = []
        for element in self.elements:
            result.extend(element.walk())
        return result


JSXElement.model_rebuild()
