"""
Request option models for the Data API SDK.

Callers may pass these models or plain dicts with the same keys; the option
compiler validates dicts into models before compiling them.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


class ScriptSpec(BaseModel):
    """A script to run before the request, before the sort, or after the request.

    ``type`` stays a plain string: unknown types are skipped by the
    compiler rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    name: str
    param: str | int | float | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _plain_type(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value


class PortalSpec(BaseModel):
    """A portal to include in the response, with optional paging."""

    model_config = ConfigDict(frozen=True)

    name: str
    offset: int | None = None
    limit: int | None = None


class SortSpec(BaseModel):
    """One sort key. ``sortOrder`` is ``ascend``, ``descend`` or a value list name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field_name: str = Field(alias="fieldName")
    sort_order: str | None = Field(default=None, alias="sortOrder")

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class QueryField(BaseModel):
    model_config = ConfigDict(frozen=True)

    fieldname: str
    fieldvalue: Any = None


class FindOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    omit: Any = False


class FindQueryItem(BaseModel):
    """One find request group: field criteria plus an optional omit flag."""

    model_config = ConfigDict(frozen=True)

    fields: list[QueryField]
    options: FindOptions | None = None


def coerce_spec(model: type[BaseModel], value: Any) -> Any:
    """Validate a dict (or pass through a model instance) as ``model``.

    Raises:
        ValidationError: If the value does not fit the model
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e}") from e


__all__ = [
    "FindOptions",
    "FindQueryItem",
    "PortalSpec",
    "QueryField",
    "ScriptSpec",
    "SortSpec",
    "coerce_spec",
]
