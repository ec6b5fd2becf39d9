from __future__ import annotations

from typing import Any

import pytest
import requests
from conftest import FakeTransport, response_xml, status_xml

from sophos_xgapi.client import XGAPI
from sophos_xgapi.config import ConnectionConfig
from sophos_xgapi.errors import EntityError, RequestBuildError, TransportError
from sophos_xgapi.transport import RequestsTransport, _NoHostnameCheckAdapter


def test_get_sends_query_and_normalizes_result(api: XGAPI, transport: FakeTransport) -> None:
    transport.body = response_xml(
        '<IPHost transactionid=""><Name>WEB_1</Name><IPAddress>192.0.2.10</IPAddress></IPHost>'
    )

    result = api.get({"IPHost": [("Name", "=", "WEB_1")]})

    assert result == {"IPHost": [{"Name": "WEB_1", "IPAddress": "192.0.2.10"}]}
    request: Any = transport.last_request
    assert request["Login"] == {"Username": "api-user", "Password": "super-secret"}
    assert request["Get"]["IPHost"]["Filter"]["Key"] == {
        "@name": "Name",
        "@criteria": "=",
        "#text": "WEB_1",
    }


def test_get_with_entity_names_only(api: XGAPI, transport: FakeTransport) -> None:
    transport.body = response_xml(
        "<IPHost><Name>A</Name></IPHost><IPHost><Name>B</Name></IPHost>"
        "<QoSPolicy><Name>Q</Name></QoSPolicy>"
    )

    result = api.get(["IPHost", "QoSPolicy"])

    assert [record["Name"] for record in result["IPHost"]] == ["A", "B"]
    assert result["QoSPolicy"] == [{"Name": "Q"}]


def test_set_sends_records_and_checks_status(api: XGAPI, transport: FakeTransport) -> None:
    transport.body = response_xml(status_xml("IPHost") + status_xml("IPHost"))

    assert api.set(
        {
            "IPHost": [
                {"Name": "WEB_1", "IPFamily": "IPv4", "HostType": "IP", "IPAddress": "192.0.2.10"},
                {"Name": "WEB_2", "IPFamily": "IPv4", "HostType": "IP", "IPAddress": "192.0.2.11"},
            ]
        },
        operation="add",
    )

    request: Any = transport.last_request
    assert request["Set"]["@operation"] == "add"
    assert len(request["Set"]["IPHost"]) == 2


def test_set_failure_surfaces_entity_error(api: XGAPI, transport: FakeTransport) -> None:
    failed = status_xml("IPHost", "Operation failed.", "500")
    transport.body = response_xml(status_xml("IPHost") + failed)

    with pytest.raises(EntityError) as excinfo:
        api.set({"IPHost": [{"Name": "WEB_1"}, {"Name": "WEB_2"}]})

    assert excinfo.value.record_index == 2


def test_remove_accepts_single_name(api: XGAPI, transport: FakeTransport) -> None:
    transport.body = response_xml(status_xml("IPHost"))

    assert api.remove({"IPHost": "WEB_1"})  # type: ignore[dict-item]

    request: Any = transport.last_request
    assert request["Remove"] == {"IPHost": {"Name": "WEB_1"}}


def test_invalid_request_is_rejected_before_sending(api: XGAPI, transport: FakeTransport) -> None:
    with pytest.raises(RequestBuildError):
        api.remove({"not valid": ["A"]})

    assert transport.requests == []


def test_transport_errors_propagate(api: XGAPI, transport: FakeTransport) -> None:
    transport.error = TransportError("Request to firewall.example.com timed out")

    with pytest.raises(TransportError):
        api.get(["IPHost"])


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


def test_requests_transport_posts_reqxml_form_field(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig
) -> None:
    calls: list[dict[str, Any]] = []

    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _FakeResponse:
        calls.append({"url": url, **kwargs})
        return _FakeResponse("<Response/>")

    monkeypatch.setattr("requests.Session.post", fake_post)

    body = RequestsTransport().send(config.set_timeout(2500), "<Request/>")

    assert body == b"<Response/>"
    assert calls == [
        {
            "url": "https://firewall.example.com:4444/webconsole/APIController",
            "data": {"reqxml": "<Request/>"},
            "timeout": 2.5,
            "verify": True,
        }
    ]


def test_requests_transport_relaxes_hostname_check_only_when_asked(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig
) -> None:
    adapters: list[object] = []

    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _FakeResponse:
        adapters.append(self.get_adapter(url))
        assert kwargs["verify"] is True
        return _FakeResponse("<Response/>")

    monkeypatch.setattr("requests.Session.post", fake_post)

    RequestsTransport().send(config, "<Request/>")
    RequestsTransport().send(config.set_ssl_verify_host(False), "<Request/>")

    assert not isinstance(adapters[0], _NoHostnameCheckAdapter)
    assert isinstance(adapters[1], _NoHostnameCheckAdapter)


def test_requests_transport_disables_verification(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig
) -> None:
    seen: dict[str, Any] = {}

    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _FakeResponse:
        seen.update(kwargs)
        return _FakeResponse("<Response/>")

    monkeypatch.setattr("requests.Session.post", fake_post)

    RequestsTransport().send(config.set_ssl_verify_peer(False), "<Request/>")

    assert seen["verify"] is False


@pytest.mark.parametrize(
    "error",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
        requests.exceptions.SSLError("certificate verify failed"),
    ],
)
def test_requests_transport_wraps_failures(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig, error: Exception
) -> None:
    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _FakeResponse:
        raise error

    monkeypatch.setattr("requests.Session.post", fake_post)

    with pytest.raises(TransportError) as excinfo:
        RequestsTransport().send(config, "<Request/>")

    assert excinfo.value.__cause__ is error


def test_requests_transport_rejects_http_errors(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig
) -> None:
    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _FakeResponse:
        return _FakeResponse("Service Unavailable", status_code=503)

    monkeypatch.setattr("requests.Session.post", fake_post)

    with pytest.raises(TransportError):
        RequestsTransport().send(config, "<Request/>")


def test_requests_transport_leaves_charset_to_the_xml_declaration(
    monkeypatch: pytest.MonkeyPatch, config: ConnectionConfig
) -> None:
    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> requests.Response:
        response = requests.Response()
        response.status_code = 200
        response.headers["Content-Type"] = "text/xml"
        response._content = response_xml("<IPHost><Name>Café</Name></IPHost>").encode("utf-8")
        return response

    monkeypatch.setattr("requests.Session.post", fake_post)

    result = XGAPI(config).get(["IPHost"])

    assert result == {"IPHost": [{"Name": "Café"}]}
