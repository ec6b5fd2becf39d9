"""Tree helpers shared by the request builder and the response interpreter.

Documents are handled in xmltodict's dict form: element names are keys,
repeated elements are lists, attributes are ``@``-prefixed keys and mixed
text is stored under ``#text``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import cast
from xml.parsers.expat import ExpatError

import xmltodict

from sophos_xgapi.errors import MalformedResponseError, RequestBuildError

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"

_ELEMENT_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


def check_name(name: object) -> str:
    """Return ``name`` if it can be used as an XML element name."""

    if not isinstance(name, str) or not _ELEMENT_NAME_RE.match(name):
        raise RequestBuildError(f"Invalid XML element name: {name!r}")
    return name


def lower(value: object) -> object:
    """Lower a field value to the xmltodict form of its element content.

    Scalars become text, mappings become child elements (recursively) and
    lists repeat the element once per item. Keys starting with ``@`` are
    emitted as attributes of the enclosing element.
    """

    if value is None:
        return None
    if isinstance(value, Mapping):
        children: dict[str, object] = {}
        for key, item in cast(Mapping[object, object], value).items():
            if isinstance(key, str) and key.startswith(ATTRIBUTE_PREFIX):
                check_name(key[1:])
                children[key] = None if item is None else str(item)
            else:
                children[check_name(key)] = lower(item)
        return children
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [lower(item) for item in cast(Sequence[object], value)]
    return str(value)


def unparse(document: Mapping[str, object]) -> str:
    return xmltodict.unparse(document, full_document=False)


def parse(body: str | bytes) -> dict[str, object]:
    """Parse a response body, returning the content of its root element."""

    if not body.strip():
        raise MalformedResponseError("Request returned an empty body")

    try:
        document = xmltodict.parse(body)
    except (ExpatError, ValueError) as exc:
        raise MalformedResponseError(f"Request returned not parsable XML: {exc}") from exc

    root = next(iter(document.values()), None)
    if isinstance(root, dict):
        return cast(dict[str, object], root)
    return {}


def strip_markers(value: object) -> object:
    """Drop attribute markers from a parsed tree.

    A mapping left holding only ``#text`` collapses to the text itself, so
    ``<Status code="200">ok</Status>`` reads back as ``"ok"``.
    """

    if isinstance(value, list):
        return [strip_markers(item) for item in cast(list[object], value)]
    if not isinstance(value, dict):
        return value

    cleaned: dict[str, object] = {}
    for key, item in cast(dict[str, object], value).items():
        if key.startswith(ATTRIBUTE_PREFIX):
            continue
        cleaned[key] = strip_markers(item)

    if set(cleaned) == {TEXT_KEY}:
        return cleaned[TEXT_KEY]
    return cleaned


def as_list(value: object) -> list[object]:
    """Wrap a single parsed element in a list; lists pass through."""

    if isinstance(value, list):
        return cast(list[object], value)
    return [value]
