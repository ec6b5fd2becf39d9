"""Client for the Sophos XG firewall XML API."""

from __future__ import annotations

import logging

from sophos_xgapi.config import ConnectionConfig
from sophos_xgapi.models import (
    DeleteEntities,
    Login,
    QueryEntities,
    ResponseRecord,
    SetOperation,
    WriteEntities,
)
from sophos_xgapi.request import (
    RequestEnvelope,
    build_delete,
    build_query,
    build_write,
    normalize_query,
)
from sophos_xgapi.response import parse_get, parse_remove, parse_set
from sophos_xgapi.transport import RequestsTransport, TransportProtocol

logger = logging.getLogger(__name__)


class XGAPI:
    """Get, set and remove firewall entities.

    Each method is one HTTPS round trip. Entity names are the XML tags from
    the firewall's API documentation (``IPHost``, ``QoSPolicy``, ...)::

        api = XGAPI(ConnectionConfig("fw.example.com", "api", "secret"))
        api.get({"IPHost": [("Name", "like", "WEB")]})
        api.set({"IPHost": [{"Name": "WEB_1", "IPFamily": "IPv4", "HostType": "IP",
                             "IPAddress": "192.0.2.10"}]})
        api.remove({"IPHost": ["WEB_1"]})
    """

    def __init__(self, config: ConnectionConfig, transport: TransportProtocol | None = None):
        self._config = config
        self._transport = transport or RequestsTransport()

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    def get(self, entities: QueryEntities) -> dict[str, list[ResponseRecord]]:
        """Retrieve instances of one or several entities.

        ``entities`` maps an entity name to ``None`` (every instance) or a
        list of filters, each a :class:`~sophos_xgapi.models.Filter` or a
        ``(field, operator, value)`` triple with operator ``=``, ``!=`` or
        ``like``. Several filters on one entity are OR'ed by the firewall.
        """

        requested = normalize_query(entities)
        envelope = build_query(requested, self._login())
        body = self._send(envelope)
        return parse_get(body, requested)

    def set(self, entities: WriteEntities, operation: SetOperation | None = None) -> bool:
        """Create or update entities, one record per instance."""

        envelope = build_write(entities, self._login(), operation=operation)
        body = self._send(envelope)
        return parse_set(body, entities)

    def remove(self, entities: DeleteEntities) -> bool:
        """Remove entity instances by name."""

        requested = {
            name: [names] if isinstance(names, str) else list(names)
            for name, names in entities.items()
        }
        envelope = build_delete(requested, self._login())
        body = self._send(envelope)
        return parse_remove(body, requested)

    def _login(self) -> Login:
        return Login(username=self._config.username, password=self._config.password)

    def _send(self, envelope: RequestEnvelope) -> bytes:
        logger.debug(
            "Sending %s request for %s to %s",
            envelope.operation.value,
            ", ".join(envelope.entities) or "no entities",
            self._config.hostname,
        )
        return self._transport.send(self._config, envelope.to_xml())
