"""
Connection to the Etherpad Lite HTTP JSON API.

The connection turns an API method name and an argument mapping into a
single HTTP request and decodes the JSON envelope that comes back:

    {"code": 0, "message": "ok", "data": {...}}

A zero code yields ``data``. The documented error codes (1-4) raise
ApiFailure with the server's message, anything else raises one of the other
EtherpadError subclasses.

Wire compatibility notes:
    - GET argument values are not form-encoded. ``&``, ``=`` and ``+`` pass
      through as they are, so a value containing them is read differently
      by the server. ``%``, ``#`` and characters that cannot appear in a
      query are percent-encoded when the URL is built.
    - POST bodies percent-encode string values only. Keys, booleans and
      numbers are written as they are.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, quote_plus, urlsplit

import httpx
from pydantic import ValidationError

from epliteclient.errors import (
    ApiFailure,
    EtherpadError,
    ParseFailure,
    TransportFailure,
    UnexpectedResponseFailure,
)
from epliteclient.models import API_ERROR_CODES, CODE_OK, ResponseEnvelope
from epliteclient.transport import DEFAULT_TIMEOUT, GETRequest, POSTRequest, Request, build_http_client

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "1.2.13"
DEFAULT_ENCODING = "UTF-8"

# Characters left as they are in a GET query. Everything else, "%" and "#"
# included, is percent-encoded.
QUERY_SAFE = "&=$+:/?@,;!'()*"


def format_value(value: Any) -> str:
    """Render an argument value the way the server expects to read it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def as_mapping(value: Any, body: str | None = None) -> dict[str, Any]:
    """Substitute an empty mapping for a null payload."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UnexpectedResponseFailure(
            f"Expected a JSON object in the response data, got {type(value).__name__}",
            body if body is not None else repr(value),
        )
    return value


class Connection:
    """
    Talks to one Etherpad Lite instance and parses its responses.

    The configuration is fixed at construction time. The connection may be
    shared between threads as long as the underlying httpx client is.

    Args:
        url: Absolute URL of the Etherpad Lite instance, including protocol
            and an optional base path (e.g. "https://pads.example.com/etherpad").
        api_key: Key from the server's APIKEY.txt, sent with every request.
        api_version: API version embedded in the request path.
        encoding: Character encoding used for POST bodies.
        timeout: Seconds to wait for the server; None waits forever.
        verify: Validate TLS certificates. Only disable this for testing.
        http_client: Pre-configured httpx client. The connection does not
            close a client it did not create.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        api_version: str = DEFAULT_API_VERSION,
        encoding: str = DEFAULT_ENCODING,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        verify: bool = True,
        http_client: httpx.Client | None = None,
    ):
        if not url:
            raise ValueError("url cannot be empty")
        if url.endswith("/"):
            url = url[:-1]

        parts = urlsplit(url)
        if not parts.scheme or not parts.hostname:
            raise ValueError(f"url must be absolute, including protocol: {url!r}")
        try:
            parts.port
        except ValueError as e:
            raise ValueError(f"url has an invalid port: {url!r}") from e

        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding '{encoding}'") from e

        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be a positive number")

        self._url = url
        self._parts = parts
        self._api_key = api_key
        self._api_version = api_version
        self._encoding = encoding
        self._timeout = timeout
        self._verify = verify

        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = build_http_client(timeout=timeout, verify=verify)
        self._http_client = http_client

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def api_version(self) -> str:
        return self._api_version

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def verify(self) -> bool:
        return self._verify

    @property
    def scheme(self) -> str:
        return self._parts.scheme

    @property
    def host(self) -> str:
        return self._parts.hostname

    @property
    def port(self) -> int | None:
        return self._parts.port

    @property
    def base_path(self) -> str:
        return self._parts.path

    @property
    def http_client(self) -> httpx.Client:
        return self._http_client

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def get_object(self, api_method: str, api_args: Mapping[str, Any] | None = None) -> Any:
        """GET an API method and return the raw ``data`` payload."""
        path = self.api_path(api_method)
        query = self.query_string(api_args or {}, url_encode=False)
        url = self.api_url(path, query)
        return self._call(GETRequest(url, self._http_client), "GET", api_method)

    def get(self, api_method: str, api_args: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """GET an API method and return its payload as a mapping (never None)."""
        return as_mapping(self.get_object(api_method, api_args))

    def post_object(self, api_method: str, api_args: Mapping[str, Any] | None = None) -> Any:
        """POST to an API method and return the raw ``data`` payload."""
        path = self.api_path(api_method)
        body = self.query_string(api_args or {}, url_encode=True)
        url = self.api_url(path)
        return self._call(POSTRequest(url, body, self._http_client, self._encoding), "POST", api_method)

    def post(self, api_method: str, api_args: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """POST to an API method and return its payload as a mapping (never None)."""
        return as_mapping(self.post_object(api_method, api_args))

    def _call(self, request: Request, verb: str, api_method: str) -> Any:
        props = {"verb": verb, "api_method": api_method}
        logger.debug(f"{verb} {self.api_path(api_method)}", extra={"props": props})
        try:
            body = request.send()
        except EtherpadError:
            raise
        except (httpx.HTTPError, httpx.InvalidURL, OSError, UnicodeError) as e:
            detail = self._fault_detail(e)
            logger.error(f"Request to {api_method} failed: {detail}", extra={"props": props})
            raise TransportFailure(
                f"Unable to connect to Etherpad Lite instance ({type(e).__name__}): {detail}"
            ) from e

        try:
            return self.handle_response(body)
        except ApiFailure as e:
            logger.warning(
                f"API error from {api_method}: [{e.code}] {e.message}",
                extra={"props": {**props, "code": e.code}},
            )
            raise

    def _fault_detail(self, error: Exception) -> str:
        """Describe a transport fault without the request URL or the API key."""
        if isinstance(error, httpx.HTTPStatusError):
            response = error.response
            return f"HTTP {response.status_code} {response.reason_phrase}"
        detail = str(error)
        if self._api_key:
            detail = detail.replace(self._api_key, "***")
        return detail

    # -------------------------------------------------------------------------
    # Wire format
    # -------------------------------------------------------------------------

    def handle_response(self, json_string: str) -> Any:
        """
        Decode a response body and act on its code.

        Returns:
            The envelope's ``data`` value (may be None).

        Raises:
            ParseFailure: The body is not JSON.
            ApiFailure: The server reported code 1-4.
            UnexpectedResponseFailure: No code, or a code outside 0-4.
        """
        try:
            response = json.loads(json_string)
        except ValueError as e:
            raise ParseFailure(json_string) from e

        if not isinstance(response, dict) or response.get("code") is None:
            raise UnexpectedResponseFailure(
                f"An unexpected response from the server: {json_string}", json_string
            )

        try:
            envelope = ResponseEnvelope.model_validate(response)
        except ValidationError as e:
            raise UnexpectedResponseFailure(
                f"An unexpected response from the server: {json_string}", json_string
            ) from e

        if envelope.code == CODE_OK:
            return envelope.data
        if envelope.code in API_ERROR_CODES:
            raise ApiFailure(envelope.message or "", envelope.code)
        raise UnexpectedResponseFailure(
            f"An unknown error has occurred while handling the response: {json_string}",
            json_string,
        )

    def api_url(self, path: str, query: str | None = None) -> str:
        """
        Combine scheme, host, port, path and query into a request URL.

        The query is percent-encoded except for the characters in
        ``QUERY_SAFE``, so ``#`` and ``%`` in a value reach the server intact.
        """
        if not path.startswith("/"):
            raise TransportFailure(
                f"Error in the URL to the Etherpad Lite instance: path {path!r} is not absolute"
            )

        host = self.host
        if ":" in host:
            host = f"[{host}]"
        netloc = host if self.port is None else f"{host}:{self.port}"

        url = f"{self.scheme}://{netloc}{path}"
        if query is not None:
            query = quote(query, safe=QUERY_SAFE)
            url = f"{url}?{query}"
        return url

    def api_path(self, api_method: str) -> str:
        """Return the URI path for an API method, e.g. ``/api/1.2.13/listAllPads``."""
        return f"{self.base_path}/api/{self._api_version}/{api_method}"

    def query_string(self, api_args: Mapping[str, Any], url_encode: bool) -> str:
        """
        Serialize arguments as ``key=value`` pairs joined by ``&``.

        The API key always comes first and exactly once. With ``url_encode``
        only string values are percent-encoded.
        """
        args: dict[str, Any] = {"apikey": self._api_key}
        args.update((key, value) for key, value in api_args.items() if key != "apikey")

        pairs = []
        for key, value in args.items():
            if url_encode and isinstance(value, str):
                try:
                    value = quote_plus(value, safe="*", encoding=self._encoding)
                except UnicodeEncodeError as e:
                    raise TransportFailure(f"Unable to URLEncode using encoding '{self._encoding}'") from e
            pairs.append(f"{key}={format_value(value)}")
        return "&".join(pairs)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client if this connection created it."""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Connection(url={self._url!r}, api_version={self._api_version!r})"
