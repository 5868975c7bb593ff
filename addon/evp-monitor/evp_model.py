#!/usr/bin/env python3
"""
Pydantic base for the JSON documents the device reports.

Documents are frozen models. A JSON ``null`` is treated as an absent field.
``decode``/``from_json`` are the only entry points used by the parser: they
turn pydantic's ``ValidationError`` into ``DecodeError`` or
``UnknownEnumValue`` so callers never see pydantic exceptions.
"""

import json
from enum import IntEnum
from typing import Annotated, Any, ClassVar, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    model_validator,
)

from errors import DecodeError, UnknownEnumValue

E = TypeVar("E", bound=IntEnum)


def _int_code(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("expected integer enum code")
    return value


# Integer wire code mapped onto an IntEnum; out-of-range codes fail as "enum"
IntCode = Annotated[E, BeforeValidator(_int_code)]

NonNegativeInt = Annotated[StrictInt, Field(ge=0)]


def _location(title: str, loc: tuple[int | str, ...]) -> str:
    parts = [title]
    for part in loc:
        if isinstance(part, int):
            parts[-1] += f"[{part}]"
        else:
            parts.append(str(part))
    return ".".join(parts)


def decode_error(model: type[BaseModel], exc: ValidationError) -> DecodeError:
    """Map the first validation failure onto the monitor's error types."""
    error = exc.errors()[0]
    where = _location(model.model_config.get("title") or model.__name__, error["loc"])
    if error["type"] == "enum":
        return UnknownEnumValue(where, error.get("input"))
    return DecodeError(f"{where}: {error['msg']}")


class EvpModel(BaseModel):
    """Base for all decoded documents and their sections."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Wire keys of which at least one must be present
    ANY_OF: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def absent_nulls(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {key: value for key, value in data.items() if value is not None}
        if cls.ANY_OF and not any(key in data for key in cls.ANY_OF):
            raise ValueError(f"none of {', '.join(cls.ANY_OF)} present")
        return data

    @classmethod
    def default(cls):
        """Instance holding only field defaults, bypassing validation."""
        return cls.model_construct()

    @classmethod
    def decode(cls, obj: Any):
        """Validate a decoded JSON value.

        Raises:
            DecodeError: the value does not match the document schema.
            UnknownEnumValue: an integer code is outside its enum.
        """
        try:
            return cls.model_validate(obj)
        except ValidationError as e:
            raise decode_error(cls, e) from e

    @classmethod
    def from_json(cls, raw: str | bytes):
        """Decode a document from JSON text."""
        try:
            value = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"Invalid JSON: {e}") from e
        return cls.decode(value)
