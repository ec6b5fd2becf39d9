"""Request-side models for Get, Set and Remove operations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Criteria = Literal["=", "!=", "like"]
SetOperation = Literal["add", "update"]

type FieldValue = str | int | float | None | Mapping[str, FieldValue] | Sequence[FieldValue]
type Record = Mapping[str, FieldValue]
type ResponseRecord = dict[str, object]

_OPERATOR_ALIASES: dict[str, Criteria] = {
    "=": "=",
    "==": "=",
    "equals": "=",
    "eq": "=",
    "!=": "!=",
    "notequals": "!=",
    "ne": "!=",
    "like": "like",
}


class Operation(StrEnum):
    """Operation kinds; the value is the element name under ``Request``."""

    GET = "Get"
    SET = "Set"
    REMOVE = "Remove"


class Filter(BaseModel):
    """One ``<Key name=... criteria=...>`` element of a Get filter."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    operator: Criteria = "="
    value: str

    @field_validator("operator", mode="before")
    @classmethod
    def normalize_operator(cls, value: object) -> object:
        if isinstance(value, str):
            return _OPERATOR_ALIASES.get(value.strip().lower(), value)
        return value

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_triple(cls, triple: Sequence[object]) -> Filter:
        """Build a filter from a ``(field, operator, value)`` sequence."""

        if isinstance(triple, (str, bytes)) or len(triple) != 3:
            raise ValueError(f"Filter must be a (field, operator, value) triple, got {triple!r}")
        field, operator, value = triple
        return cls(field=field, operator=operator, value=value)

    @classmethod
    def coerce(cls, item: Filter | Mapping[str, object] | Sequence[object]) -> Filter:
        if isinstance(item, Filter):
            return item
        if isinstance(item, Mapping):
            return cls.model_validate(item)
        return cls.from_triple(item)


type FilterInput = Filter | Mapping[str, object] | Sequence[object]
type QueryEntities = Mapping[str, Sequence[FilterInput] | None] | Sequence[str]
type WriteEntities = Mapping[str, Sequence[Record]]
type DeleteEntities = Mapping[str, Sequence[str]]


@dataclass(frozen=True, slots=True)
class Login:
    """Credentials placed, in plain text, in every request envelope."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Login(username={self.username!r}, password='***')"
