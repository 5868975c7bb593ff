#!/usr/bin/env python3
"""
UUID value type used as a key for deployment instances, modules and edge
app settings.
"""

import re
import uuid
from typing import Any

from pydantic_core import core_schema

from errors import InvalidFormat

_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


class UUID:
    """Immutable, validated hyphenated UUID string."""

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if not isinstance(value, str) or not _UUID_RE.fullmatch(value):
            raise InvalidFormat(f"Invalid UUID: {value!r}")
        try:
            canonical = str(uuid.UUID(value))
        except ValueError as e:
            raise InvalidFormat(f"Invalid UUID: {value!r}") from e
        object.__setattr__(self, "_value", canonical)

    def __setattr__(self, name, value):
        raise AttributeError("UUID is immutable")

    @classmethod
    def new(cls) -> "UUID":
        return cls(str(uuid.uuid4()))

    @classmethod
    def parse(cls, value: str) -> "UUID":
        return cls(value)

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return isinstance(value, str) and _UUID_RE.fullmatch(value) is not None

    @classmethod
    def _validate(cls, value: Any) -> "UUID":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except InvalidFormat as e:
            raise ValueError(str(e)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        # accepted as a model field or as a dict key
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @property
    def value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"UUID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UUID):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)
