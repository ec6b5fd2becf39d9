"""Bulk input parsing for Set commands."""

from __future__ import annotations

import csv
import io
import json
import sys
from pathlib import Path
from typing import Literal, cast

BulkInputFormat = Literal["auto", "json", "csv"]
Record = dict[str, object]


def load_write_entities(
    source: str,
    input_format: BulkInputFormat = "auto",
    entity: str | None = None,
) -> dict[str, list[Record]]:
    """Load Set records from a JSON/CSV file or stdin.

    JSON may be a list of records, an object with a ``records`` list, or an
    object mapping entity names to record lists. Lists and CSV rows need
    ``entity`` to know which entity they belong to. CSV headers containing
    dots (``HostGroupList.HostGroup``) become nested fields.
    """

    text = _read_text(source)
    resolved_format = _resolve_format(source, text, input_format)

    if resolved_format == "json":
        entities = _parse_json(text, entity)
    else:
        entities = {_require_entity(entity): _parse_csv(text)}

    if not any(entities.values()):
        raise ValueError("Input data did not contain any records")
    return entities


def _read_text(source: str) -> str:
    if source == "-":
        content = sys.stdin.read()
    else:
        content = Path(source).read_text(encoding="utf-8")

    if not content.strip():
        raise ValueError("Input is empty")
    return content


def _resolve_format(
    source: str,
    text: str,
    input_format: BulkInputFormat,
) -> Literal["json", "csv"]:
    if input_format == "json":
        return "json"
    if input_format == "csv":
        return "csv"

    if source != "-":
        suffix = Path(source).suffix.lower()
        if suffix == ".json":
            return "json"
        if suffix == ".csv":
            return "csv"

    stripped = text.lstrip()
    if stripped.startswith("[") or stripped.startswith("{"):
        return "json"
    return "csv"


def _require_entity(entity: str | None) -> str:
    if not entity:
        raise ValueError("An entity name is required for record lists and CSV input")
    return entity


def _parse_json(text: str, entity: str | None) -> dict[str, list[Record]]:
    payload: object = json.loads(text)

    if isinstance(payload, list):
        return {_require_entity(entity): _records_from_list(cast(list[object], payload))}

    payload_dict = _normalize_record(payload)
    if payload_dict is None:
        raise ValueError("JSON input must be a list of records or an object")

    if "records" in payload_dict:
        records = payload_dict["records"]
        if not isinstance(records, list):
            raise ValueError("'records' must be a list of records")
        name = payload_dict.get("entity", entity)
        resolved = _require_entity(name if isinstance(name, str) else None)
        return {resolved: _records_from_list(cast(list[object], records))}

    entities: dict[str, list[Record]] = {}
    for name, records in payload_dict.items():
        if not isinstance(records, list):
            raise ValueError(f"Records for entity '{name}' must be a list")
        entities[name] = _records_from_list(cast(list[object], records))
    return entities


def _records_from_list(raw_records: list[object]) -> list[Record]:
    records: list[Record] = []
    for raw_record in raw_records:
        record = _normalize_record(raw_record)
        if record is None:
            raise ValueError("All JSON records must be objects with string keys")
        records.append(record)
    return records


def _parse_csv(text: str) -> list[Record]:
    reader: csv.DictReader[str] = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("CSV input must include a header row")

    records: list[Record] = []
    for row in reader:
        record: Record = {}
        for key, value in row.items():
            if not key or value is None or value.strip() == "":
                continue
            _assign_path(record, key.strip().split("."), value.strip())
        if record:
            records.append(record)
    return records


def _assign_path(record: Record, path: list[str], value: str) -> None:
    target = record
    for part in path[:-1]:
        child = target.setdefault(part, {})
        if not isinstance(child, dict):
            raise ValueError(f"Column '{'.'.join(path)}' conflicts with field '{part}'")
        target = cast(Record, child)
    target[path[-1]] = value


def _normalize_record(value: object) -> Record | None:
    if not isinstance(value, dict):
        return None

    normalized: Record = {}
    for key, item in cast(dict[object, object], value).items():
        if not isinstance(key, str):
            return None
        normalized[key] = item
    return normalized
