"""Get, set and remove commands for arbitrary firewall entities."""

from __future__ import annotations

import json
from typing import Annotated, Literal

import typer
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from sophos_xgapi.client import XGAPI
from sophos_xgapi.config import Settings
from sophos_xgapi.connection import (
    HostOption,
    InsecureOption,
    PasswordOption,
    PortOption,
    TimeoutOption,
    UsernameOption,
    connection_config,
)
from sophos_xgapi.errors import SophosXGAPIError
from sophos_xgapi.io.bulk_input import BulkInputFormat, load_write_entities
from sophos_xgapi.models import Filter, ResponseRecord

console = Console()

OutputFormat = Literal["table", "json"]


def build_api(
    ctx: typer.Context,
    host: str | None,
    username: str | None,
    password: str | None,
    port: int | None,
    timeout: int | None,
    insecure: bool,
) -> XGAPI:
    settings: Settings = ctx.obj["settings"]
    config = connection_config(settings, host, username, password, port, timeout, insecure)
    return XGAPI(config)


def parse_filter(raw: str) -> Filter:
    """Parse ``FIELD:OPERATOR:VALUE``; the value may itself contain colons."""

    parts = raw.split(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Filter must look like FIELD:OPERATOR:VALUE, got '{raw}'")
    return Filter.from_triple(parts)


def _render_records(result: dict[str, list[ResponseRecord]], output: OutputFormat) -> None:
    if output == "json":
        console.print(JSON.from_data(result))
        return

    for entity, records in result.items():
        columns: list[str] = []
        for record in records:
            columns.extend(key for key in record if key not in columns)

        table = Table(title=entity)
        for column in columns:
            table.add_column(column)
        for record in records:
            table.add_row(*(_cell(record.get(column)) for column in columns))
        console.print(table)


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _handle_api_exception(exc: SophosXGAPIError) -> None:
    console.print(f"API request failed: {exc}", style="bold red")
    raise typer.Exit(code=1) from exc


def entity_get(
    ctx: typer.Context,
    entities: Annotated[list[str], typer.Argument(help="Entity names, e.g. IPHost.")],
    filters: Annotated[
        list[str] | None,
        typer.Option(
            "--filter",
            "-F",
            help="FIELD:OPERATOR:VALUE with OPERATOR one of =, !=, like. Repeat to OR filters.",
        ),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", help="Response format: table or json."),
    ] = "json",
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Retrieve entity instances, optionally filtered.

    Several --filter options on the same entity match instances satisfying
    ANY of them; the firewall has no AND across filter keys.
    """

    query: dict[str, list[Filter] | None] = {name: None for name in entities}
    if filters:
        if len(entities) != 1:
            console.print("--filter can only be used with a single entity", style="bold red")
            raise typer.Exit(code=1)
        try:
            query[entities[0]] = [parse_filter(raw) for raw in filters]
        except ValueError as exc:
            console.print(f"Invalid input: {exc}", style="bold red")
            raise typer.Exit(code=1) from exc

    result: dict[str, list[ResponseRecord]] = {}
    try:
        api = build_api(ctx, host, username, password, port, timeout, insecure)
        result = api.get(query)
    except SophosXGAPIError as exc:
        _handle_api_exception(exc)

    _render_records(result, output)


def entity_set(
    ctx: typer.Context,
    file_path: Annotated[
        str,
        typer.Option("--file", "-f", help="Path to JSON/CSV file, or '-' for stdin."),
    ],
    entity: Annotated[
        str | None,
        typer.Option("--entity", "-e", help="Entity name for record lists and CSV input."),
    ] = None,
    input_format: Annotated[
        BulkInputFormat,
        typer.Option("--format", help="Input format: auto, json, csv."),
    ] = "auto",
    operation: Annotated[
        Literal["add", "update"] | None,
        typer.Option("--operation", help="Optional Set operation attribute."),
    ] = None,
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Create or update entities from file/stdin.

    Input examples:

    JSON list (with --entity IPHost):
    [
      {
        "Name": "WEB_1",
        "IPFamily": "IPv4",
        "HostType": "IP",
        "IPAddress": "192.0.2.10",
        "HostGroupList": {"HostGroup": "WEB_SERVERS"}
      }
    ]

    JSON object keyed by entity:
    {"IPHost": [{"Name": "WEB_1", "IPFamily": "IPv4", "HostType": "IP", "IPAddress": "192.0.2.10"}]}

    CSV (one record per row, dotted headers nest):
    Name,IPFamily,HostType,IPAddress,HostGroupList.HostGroup
    WEB_1,IPv4,IP,192.0.2.10,WEB_SERVERS
    """

    try:
        entities = load_write_entities(file_path, input_format=input_format, entity=entity)
    except (ValueError, OSError) as exc:
        console.print(f"Invalid input: {exc}", style="bold red")
        raise typer.Exit(code=1) from exc

    try:
        api = build_api(ctx, host, username, password, port, timeout, insecure)
        api.set(entities, operation=operation)
    except SophosXGAPIError as exc:
        _handle_api_exception(exc)

    total = sum(len(records) for records in entities.values())
    console.print(f"Applied {total} record(s) for {', '.join(entities)}")


def entity_remove(
    ctx: typer.Context,
    entity: Annotated[str, typer.Argument(help="Entity name, e.g. IPHost.")],
    names: Annotated[list[str], typer.Argument(help="Names of the instances to remove.")],
    host: HostOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    port: PortOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Remove entity instances by name."""

    try:
        api = build_api(ctx, host, username, password, port, timeout, insecure)
        api.remove({entity: names})
    except SophosXGAPIError as exc:
        _handle_api_exception(exc)

    console.print(f"Removed {len(names)} {entity} instance(s)")
