"""Interpret firewall responses to Get, Set and Remove requests.

Entities are checked in the order they were requested and the first failing
one raises; the firewall may have applied changes for entities checked
before it, but nothing partial is returned to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import cast

from sophos_xgapi.errors import (
    AuthenticationError,
    EntityError,
    EntityMissingError,
    MalformedResponseError,
)
from sophos_xgapi.models import ResponseRecord
from sophos_xgapi.xmltree import as_list, parse, strip_markers

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "Configuration applied successfully."
AUTH_FAILURE_STATUS = "Authentication Failure"


def decode(body: str | bytes) -> dict[str, object]:
    """Parse a response body into a marker-free tree and check the Login block."""

    stripped = strip_markers(parse(body))
    if not isinstance(stripped, dict):
        raise MalformedResponseError(f"Response holds no elements: {stripped!r}")
    tree = cast(dict[str, object], stripped)
    _check_login(tree.get("Login"))
    return tree


def parse_get(
    body: str | bytes, requested: Iterable[str]
) -> dict[str, list[ResponseRecord]]:
    """Return ``{entity: [record, ...]}`` for every requested entity.

    The firewall answers with a single element when one instance matches and
    with repeated elements otherwise; both come back as a list.
    """

    tree = decode(body)
    result: dict[str, list[ResponseRecord]] = {}

    for entity in _entity_names(requested):
        entry = _require_entity(tree, entity)

        records: list[ResponseRecord] = []
        for item in as_list(entry):
            if not isinstance(item, dict):
                raise MalformedResponseError(
                    f'Unexpected content for "{entity}" entity: {item!r}'
                )
            if set(cast(dict[str, object], item)) == {"Status"}:
                raise EntityError(entity, cast(dict[str, object], item)["Status"])
            records.append(cast(ResponseRecord, item))
        result[entity] = records
        logger.debug("Get %s returned %d record(s)", entity, len(records))

    return result


def parse_set(body: str | bytes, requested: Mapping[str, Sequence[object]]) -> bool:
    """Check the status of every submitted record.

    With one submitted record the status sits directly under the entity
    element. With several, the firewall returns one entity element per
    record and each carries its own status.
    """

    tree = decode(body)

    for entity, records in requested.items():
        entry = _require_entity(tree, entity)
        submitted = len(records)

        if submitted == 1:
            if not isinstance(entry, dict):
                raise MalformedResponseError(
                    f'Expected a single status for "{entity}" entity, got {entry!r}'
                )
            _check_status(entity, cast(dict[str, object], entry), record_index=1)
        elif submitted > 1:
            statuses = _per_record_entries(entity, entry, submitted)
            for index in range(submitted):
                _check_status(entity, statuses[index], record_index=index + 1)

    return True


def parse_remove(body: str | bytes, requested: Mapping[str, Sequence[str]]) -> bool:
    """Check the status reported for every entity a Remove was sent for."""

    tree = decode(body)

    for entity, names in requested.items():
        entry = _require_entity(tree, entity)
        if not names:
            continue

        if isinstance(entry, list):
            statuses = _per_record_entries(entity, entry, len(names))
            for index in range(len(names)):
                _check_status(entity, statuses[index], record_index=index + 1)
        elif isinstance(entry, dict):
            _check_status(entity, cast(dict[str, object], entry))
        else:
            raise MalformedResponseError(f'Unexpected content for "{entity}" entity: {entry!r}')

    return True


def _entity_names(requested: Iterable[str]) -> list[str]:
    if isinstance(requested, str):
        return [requested]
    return list(requested)


def _require_entity(tree: Mapping[str, object], entity: str) -> object:
    entry = tree.get(entity)
    if entry is None or entry == "" or entry == {} or entry == []:
        raise EntityMissingError(entity)
    return entry


def _per_record_entries(entity: str, entry: object, submitted: int) -> list[dict[str, object]]:
    if not isinstance(entry, list) or len(cast(list[object], entry)) != submitted:
        raise MalformedResponseError(
            f'Expected {submitted} status entries for "{entity}" entity, got {entry!r}'
        )
    items = cast(list[object], entry)
    if not all(isinstance(item, dict) for item in items):
        raise MalformedResponseError(f'Unexpected content for "{entity}" entity: {entry!r}')
    return cast(list[dict[str, object]], items)


def _check_status(
    entity: str, entry: Mapping[str, object], record_index: int | None = None
) -> None:
    status = entry.get("Status")
    if status != SUCCESS_STATUS:
        raise EntityError(entity, status, record_index)


def _check_login(login: object) -> None:
    if not isinstance(login, dict):
        return
    login_entry = cast(dict[str, object], login)
    status = login_entry.get("status", login_entry.get("Status"))
    if status == AUTH_FAILURE_STATUS:
        raise AuthenticationError(cast(str, status))
