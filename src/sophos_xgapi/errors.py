"""Exception hierarchy raised by the XML API client."""

from __future__ import annotations


class SophosXGAPIError(Exception):
    """Base class for every error raised by this package."""


class InvalidConfigurationError(SophosXGAPIError, ValueError):
    """Connection configuration was rejected at construction time."""


class RequestBuildError(SophosXGAPIError, ValueError):
    """A request document could not be built from the given entities."""


class TransportError(SophosXGAPIError):
    """The HTTPS round trip failed (network, TLS, timeout or HTTP status)."""


class MalformedResponseError(SophosXGAPIError):
    """The firewall answered with something that is not the expected XML shape."""


class AuthenticationError(SophosXGAPIError):
    """The firewall refused the credentials sent in the Login block."""

    def __init__(self, status: str | None) -> None:
        super().__init__(f'Login returned "{status}"')
        self.status = status


class EntityMissingError(SophosXGAPIError):
    """A requested entity has no entry in the response."""

    def __init__(self, entity: str) -> None:
        super().__init__(f'Request did not return the wanted entity "{entity}"')
        self.entity = entity


class EntityError(SophosXGAPIError):
    """The firewall reported a non-success status for an entity.

    ``record_index`` is the 1-based position of the submitted record (or name)
    the status belongs to, or ``None`` when the status covers the whole entity.
    """

    def __init__(self, entity: str, status: object, record_index: int | None = None) -> None:
        location = f'"{entity}" entity'
        if record_index is not None:
            location = f"{location} (record {record_index})"
        super().__init__(f'Request returned "{status}" for {location}')
        self.entity = entity
        self.status = status
        self.record_index = record_index
