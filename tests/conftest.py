from __future__ import annotations

from typing import cast

import pytest
import xmltodict
from typer.testing import CliRunner

from sophos_xgapi.client import XGAPI
from sophos_xgapi.config import ConnectionConfig

SUCCESS = "Configuration applied successfully."


def response_xml(inner: str, login_status: str = "Authentication Successful") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Response APIVersion="1905.1" IPS_CAT_VER="1">'
        f"<Login><status>{login_status}</status></Login>"
        f"{inner}"
        "</Response>"
    )


def status_xml(entity: str, status: str = SUCCESS, code: str = "200") -> str:
    return f'<{entity} transactionid=""><Status code="{code}">{status}</Status></{entity}>'


class FakeTransport:
    def __init__(self, body: str = "") -> None:
        self.body = body
        self.error: Exception | None = None
        self.requests: list[str] = []

    def send(self, config: ConnectionConfig, reqxml: str) -> bytes:
        del config
        self.requests.append(reqxml)
        if self.error is not None:
            raise self.error
        return self.body.encode("utf-8")

    @property
    def last_request(self) -> dict[str, object]:
        assert self.requests, "no request was sent"
        document = cast(dict[str, object], xmltodict.parse(self.requests[-1]))
        return cast(dict[str, object], document["Request"])


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig("firewall.example.com", "api-user", "super-secret")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def api(config: ConnectionConfig, transport: FakeTransport) -> XGAPI:
    return XGAPI(config, transport=transport)


@pytest.fixture
def connection_args() -> list[str]:
    return [
        "--host",
        "firewall.example.com",
        "--username",
        "api-user",
        "--password",
        "super-secret",
    ]


@pytest.fixture
def cli_transport(monkeypatch: pytest.MonkeyPatch, transport: FakeTransport) -> FakeTransport:
    def _create_api(config: ConnectionConfig) -> XGAPI:
        return XGAPI(config, transport=transport)

    monkeypatch.setattr("sophos_xgapi.commands.entities.XGAPI", _create_api)
    return transport
