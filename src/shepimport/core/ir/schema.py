"""
Schema types for shepimport IR.

Records produced by the Prisma schema parser.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DefaultFunction(str, Enum):
    """Generator functions recognised inside ``@default(...)``."""

    NOW = "now"
    AUTOINCREMENT = "autoincrement"
    UUID = "uuid"
    CUID = "cuid"
    ULID = "ulid"


class SchemaField(BaseModel):
    """
    One field line of a schema model.

    Attributes:
        name: Field identifier
        type: Declared type without ``[]`` / ``?`` markers
        shep_type: Mapped target type (``text``, ``number``, ``yes/no``, ...)
        default_value: Literal default with quotes stripped
        default_function: Generator function when the default is a call
        relation_model: Related model name for relation fields
        attributes_text: Raw attribute text after the type
    """

    name: str
    type: str
    shep_type: str
    is_array: bool = False
    is_optional: bool = False
    is_unique: bool = False
    is_id: bool = False
    is_updated_at: bool = False
    default_value: str | None = None
    default_function: DefaultFunction | None = None
    is_relation: bool = False
    relation_model: str | None = None
    relation_name: str | None = None
    relation_fields: list[str] = Field(default_factory=list)
    on_delete: str | None = None
    attributes_text: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_required(self) -> bool:
        return not self.is_optional and not self.is_array


class SchemaModel(BaseModel):
    """A ``model Name { ... }`` block. Field order follows the source."""

    name: str
    fields: list[SchemaField] = Field(default_factory=list)
    model_attributes: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_field(self, name: str) -> SchemaField | None:
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None

    @property
    def scalar_fields(self) -> list[SchemaField]:
        return [f for f in self.fields if not f.is_relation]

    @property
    def relation_fields(self) -> list[SchemaField]:
        return [f for f in self.fields if f.is_relation]


class SchemaEnum(BaseModel):
    """An ``enum Name { ... }`` block."""

    name: str
    values: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SchemaDocument(BaseModel):
    """Everything parsed from one schema file."""

    models: list[SchemaModel] = Field(default_factory=list)
    enums: list[SchemaEnum] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.models and not self.enums

    def get_model(self, name: str) -> SchemaModel | None:
        for model in self.models:
            if model.name == name:
                return model
        return None
