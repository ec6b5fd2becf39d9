"""Shared connection option resolution for CLI commands."""

from __future__ import annotations

from typing import Annotated

import typer

from sophos_xgapi.config import ConnectionConfig, Settings
from sophos_xgapi.errors import InvalidConfigurationError

HostOption = Annotated[str | None, typer.Option(help="Firewall hostname or IP.")]
UsernameOption = Annotated[str | None, typer.Option(help="Firewall API username.")]
PasswordOption = Annotated[str | None, typer.Option(help="Firewall API password.")]
PortOption = Annotated[int | None, typer.Option(min=1, max=65535, help="Firewall API port.")]
TimeoutOption = Annotated[
    int | None,
    typer.Option("--timeout", min=1, help="Request timeout in milliseconds."),
]
InsecureOption = Annotated[
    bool,
    typer.Option(help="Disable TLS certificate verification."),
]


def _resolve(value: str | None, default: str | None, option_name: str) -> str:
    if value:
        return value
    if default:
        return default
    raise typer.BadParameter(
        f"Provide --{option_name} or set SOPHOS_XGAPI_{option_name.upper().replace('-', '_')}."
    )


def connection_config(
    settings: Settings,
    host: str | None,
    username: str | None,
    password: str | None,
    port: int | None,
    timeout: int | None,
    insecure: bool,
) -> ConnectionConfig:
    """Resolve command options over settings into a connection config."""

    resolved_host = _resolve(host, settings.host, "host")
    try:
        config = ConnectionConfig(
            resolved_host,
            _resolve(username, settings.username, "username"),
            _resolve(password, settings.password, "password"),
            port=port if port is not None else settings.port,
        )
        config.set_timeout(timeout if timeout is not None else settings.timeout_ms)
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config.set_ssl_verify_peer(False if insecure else settings.verify_ssl)
    config.set_ssl_verify_host(False if insecure else settings.verify_host)
    return config
