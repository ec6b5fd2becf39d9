"""Configuration loading and connection settings for the XML API client."""

from __future__ import annotations

import ipaddress
import re
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from sophos_xgapi.errors import InvalidConfigurationError

DEFAULT_PORT = 4444
DEFAULT_TIMEOUT_MS = 10000

_HOST_LABEL_RE = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?$")


class Settings(BaseSettings):
    """Connection settings loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="SOPHOS_XGAPI_",
        extra="ignore",
    )

    host: str | None = None
    username: str | None = None
    password: str | None = None
    port: int = DEFAULT_PORT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verify_ssl: bool = True
    verify_host: bool = True

    @classmethod
    def from_env_file(cls, env_file: Path | None = None) -> Settings:
        kwargs: dict[str, Path] = {}
        if env_file is not None:
            kwargs["_env_file"] = env_file
        return cls(**kwargs)


def validate_hostname(value: str) -> str:
    """Return ``value`` if it is a syntactically valid domain name or IP address."""

    candidate = value.strip()
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        pass
    else:
        return candidate

    normalized = candidate.rstrip(".")
    if not normalized:
        raise InvalidConfigurationError("Invalid hostname provided: hostname is empty")
    if len(normalized) > 253:
        raise InvalidConfigurationError("Invalid hostname provided: longer than 253 characters")

    for label in normalized.split("."):
        if not _HOST_LABEL_RE.match(label):
            raise InvalidConfigurationError(f"Invalid hostname provided: bad label {label!r}")

    return normalized


class ConnectionConfig:
    """Firewall address, credentials and transport options.

    The hostname is validated once, here. Timeout and TLS options can only be
    changed through the ``set_*`` methods, which return the config so calls
    can be chained::

        config = ConnectionConfig("fw.example.com", "api", "secret").set_timeout(30000)
    """

    def __init__(
        self,
        hostname: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
    ) -> None:
        if not 1 <= port <= 65535:
            raise InvalidConfigurationError(f"Invalid port provided: {port}")
        self._hostname = validate_hostname(hostname)
        self._username = username
        self._password = password
        self._port = port
        self._timeout_ms = DEFAULT_TIMEOUT_MS
        self._ssl_verify_peer = True
        self._ssl_verify_host = True

    @classmethod
    def from_settings(cls, settings: Settings) -> ConnectionConfig:
        if not settings.host or not settings.username or settings.password is None:
            raise InvalidConfigurationError("host, username and password must all be set")
        return (
            cls(settings.host, settings.username, settings.password, port=settings.port)
            .set_timeout(settings.timeout_ms)
            .set_ssl_verify_peer(settings.verify_ssl)
            .set_ssl_verify_host(settings.verify_host)
        )

    @property
    def hostname(self) -> str:
        return self._hostname

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def port(self) -> int:
        return self._port

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def ssl_verify_peer(self) -> bool:
        return self._ssl_verify_peer

    @property
    def ssl_verify_host(self) -> bool:
        return self._ssl_verify_host

    @property
    def url(self) -> str:
        host = f"[{self._hostname}]" if ":" in self._hostname else self._hostname
        return f"https://{host}:{self._port}/webconsole/APIController"

    def set_timeout(self, timeout_ms: int) -> ConnectionConfig:
        if timeout_ms <= 0:
            raise InvalidConfigurationError(f"Timeout must be positive, got {timeout_ms}")
        self._timeout_ms = timeout_ms
        return self

    def set_ssl_verify_peer(self, verify: bool) -> ConnectionConfig:
        self._ssl_verify_peer = verify
        return self

    def set_ssl_verify_host(self, verify: bool) -> ConnectionConfig:
        self._ssl_verify_host = verify
        return self

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(hostname={self._hostname!r}, username={self._username!r}, "
            f"port={self._port}, timeout_ms={self._timeout_ms})"
        )
