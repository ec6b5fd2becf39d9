"""HTTPS transport for the XML API."""

from __future__ import annotations

import logging
import ssl
from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter

from sophos_xgapi.config import ConnectionConfig
from sophos_xgapi.errors import TransportError

logger = logging.getLogger(__name__)


class TransportProtocol(Protocol):
    """Sends one request document and returns the raw response body."""

    def send(self, config: ConnectionConfig, reqxml: str) -> bytes: ...


class _NoHostnameCheckAdapter(HTTPAdapter):
    """Verifies the certificate chain but not that it matches the hostname."""

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        context = ssl.create_default_context()
        context.check_hostname = False
        kwargs["ssl_context"] = context
        kwargs["assert_hostname"] = False
        super().init_poolmanager(*args, **kwargs)


class RequestsTransport:
    """POST ``reqxml`` to the APIController endpoint with requests.

    A session is opened and closed for every call.
    """

    def send(self, config: ConnectionConfig, reqxml: str) -> bytes:
        timeout = config.timeout_ms / 1000
        logger.debug("POST %s (timeout=%ss)", config.url, timeout)

        with requests.Session() as session:
            if config.ssl_verify_peer and not config.ssl_verify_host:
                session.mount("https://", _NoHostnameCheckAdapter())
            try:
                response = session.post(
                    config.url,
                    data={"reqxml": reqxml},
                    timeout=timeout,
                    verify=config.ssl_verify_peer,
                )
                response.raise_for_status()
            except requests.exceptions.Timeout as exc:
                raise TransportError(f"Request to {config.hostname} timed out") from exc
            except requests.exceptions.RequestException as exc:
                raise TransportError(f"Request to {config.hostname} failed: {exc}") from exc

        logger.debug("Received %d bytes from %s", len(response.content), config.hostname)
        # the XML declaration carries the charset, let the parser decode it
        return response.content
