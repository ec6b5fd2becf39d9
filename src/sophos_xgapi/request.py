"""Build Get, Set and Remove request envelopes.

Every envelope has the shape::

    <Request>
      <Login><Username>..</Username><Password>..</Password></Login>
      <Get|Set|Remove>...</Get|Set|Remove>
    </Request>

Multiple filters on one Get entity all go into a single ``<Filter>`` element.
The firewall combines sibling ``<Key>`` elements with OR, there is no way to
express AND across them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import cast

from sophos_xgapi.errors import RequestBuildError
from sophos_xgapi.models import (
    DeleteEntities,
    Filter,
    FilterInput,
    Login,
    Operation,
    QueryEntities,
    SetOperation,
    WriteEntities,
)
from sophos_xgapi.xmltree import check_name, lower, unparse


def _new_body() -> dict[str, object]:
    return {}


@dataclass(frozen=True, slots=True)
class RequestEnvelope:
    """A single operation body plus the Login block that precedes it."""

    operation: Operation
    login: Login
    body: dict[str, object] = field(default_factory=_new_body)
    set_operation: SetOperation | None = None

    @property
    def entities(self) -> list[str]:
        return list(self.body)

    def to_dict(self) -> dict[str, object]:
        operation_body: dict[str, object] = {}
        if self.set_operation is not None:
            operation_body["@operation"] = self.set_operation
        operation_body.update(self.body)

        return {
            "Request": {
                "Login": {
                    "Username": self.login.username,
                    "Password": self.login.password,
                },
                self.operation.value: operation_body,
            }
        }

    def to_xml(self) -> str:
        return unparse(self.to_dict())


def normalize_query(entities: QueryEntities) -> dict[str, list[Filter]]:
    """Normalize query input to ``{entity: [Filter, ...]}``.

    A plain sequence of entity names, a ``None`` value and an empty list all
    mean "every instance of the entity".
    """

    if isinstance(entities, str):
        return {check_name(entities): []}
    if not isinstance(entities, Mapping):
        return {check_name(name): [] for name in entities}

    normalized: dict[str, list[Filter]] = {}
    for name, filters in cast(Mapping[str, Sequence[FilterInput] | None], entities).items():
        check_name(name)
        if filters is None or isinstance(filters, (str, bytes)):
            normalized[name] = []
        else:
            try:
                normalized[name] = [Filter.coerce(item) for item in filters]
            except (TypeError, ValueError) as exc:
                raise RequestBuildError(f"Invalid filter for {name!r}: {exc}") from exc
    return normalized


def build_query(entities: QueryEntities, login: Login) -> RequestEnvelope:
    body: dict[str, object] = {}
    for name, filters in normalize_query(entities).items():
        if not filters:
            body[name] = None
            continue
        keys = [
            {"@name": item.field, "@criteria": item.operator, "#text": item.value}
            for item in filters
        ]
        body[name] = {"Filter": {"Key": keys}}
    return RequestEnvelope(Operation.GET, login, body)


def build_write(
    entities: WriteEntities,
    login: Login,
    operation: SetOperation | None = None,
) -> RequestEnvelope:
    """Build a Set request; the entity element repeats once per record."""

    body: dict[str, object] = {}
    for name, records in entities.items():
        check_name(name)
        for record in records:
            if not isinstance(record, Mapping):
                raise RequestBuildError(f"Records for {name!r} must be mappings, got {record!r}")
        lowered = [lower(record) for record in records]
        # xmltodict emits nothing for an empty list, keep the element
        body[name] = lowered if lowered else None
    return RequestEnvelope(Operation.SET, login, body, set_operation=operation)


def build_delete(entities: DeleteEntities, login: Login) -> RequestEnvelope:
    body: dict[str, object] = {}
    for name, names in entities.items():
        check_name(name)
        if isinstance(names, str):
            names = [names]
        body[name] = {"Name": [str(item) for item in names]} if names else None
    return RequestEnvelope(Operation.REMOVE, login, body)
