"""Python client for the Etherpad Lite HTTP API."""

from epliteclient.client import EtherpadClient
from epliteclient.connection import DEFAULT_API_VERSION, DEFAULT_ENCODING, Connection
from epliteclient.errors import (
    ApiFailure,
    EtherpadError,
    ParseFailure,
    TransportFailure,
    UnexpectedResponseFailure,
)
from epliteclient.models import ValidFor, ValidThrough, ValidUntil

__all__ = [
    "DEFAULT_API_VERSION",
    "DEFAULT_ENCODING",
    "ApiFailure",
    "Connection",
    "EtherpadClient",
    "EtherpadError",
    "ParseFailure",
    "TransportFailure",
    "UnexpectedResponseFailure",
    "ValidFor",
    "ValidThrough",
    "ValidUntil",
]
