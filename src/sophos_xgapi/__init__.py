"""Client library for the Sophos XG firewall XML API."""

from importlib.metadata import PackageNotFoundError, version

from sophos_xgapi.client import XGAPI
from sophos_xgapi.config import ConnectionConfig, Settings
from sophos_xgapi.errors import (
    AuthenticationError,
    EntityError,
    EntityMissingError,
    InvalidConfigurationError,
    MalformedResponseError,
    RequestBuildError,
    SophosXGAPIError,
    TransportError,
)
from sophos_xgapi.models import Filter, Login

__all__ = [
    "XGAPI",
    "AuthenticationError",
    "ConnectionConfig",
    "EntityError",
    "EntityMissingError",
    "Filter",
    "InvalidConfigurationError",
    "Login",
    "MalformedResponseError",
    "RequestBuildError",
    "Settings",
    "SophosXGAPIError",
    "TransportError",
    "__version__",
]

try:
    __version__ = version("sophos-xgapi")
except PackageNotFoundError:
    __version__ = "0.1.0"
