"""
HTTP transport for the Etherpad Lite API.

A request object performs exactly one HTTP round trip and hands the raw
response body back as text. Decoding the body is the connection's job.

    request = GETRequest("http://localhost:9001/api/1.2.13/listAllPads?apikey=...", http_client)
    body = request.send()
"""

from __future__ import annotations

from typing import Protocol

import httpx

DEFAULT_TIMEOUT = 30.0


class Request(Protocol):
    """Anything that can send itself and return the response body."""

    def send(self) -> str: ...


def build_http_client(timeout: float | None = DEFAULT_TIMEOUT, verify: bool = True) -> httpx.Client:
    """
    Create the default HTTP client used by a connection.

    Certificates are validated unless ``verify`` is False. A ``timeout`` of
    None waits forever.
    """
    return httpx.Client(timeout=timeout, verify=verify, follow_redirects=True)


class GETRequest:
    """HTTP GET against a fully built URL (query string included)."""

    def __init__(self, url: str, http_client: httpx.Client):
        self.url = url
        self.http_client = http_client

    def send(self) -> str:
        response = self.http_client.get(self.url)
        response.raise_for_status()
        return response.text


class POSTRequest:
    """HTTP POST with an application/x-www-form-urlencoded body."""

    def __init__(self, url: str, body: str, http_client: httpx.Client, encoding: str = "UTF-8"):
        self.url = url
        self.body = body
        self.http_client = http_client
        self.encoding = encoding

    def send(self) -> str:
        response = self.http_client.post(
            self.url,
            content=self.body.encode(self.encoding),
            headers={"Content-Type": f"application/x-www-form-urlencoded; charset={self.encoding}"},
        )
        response.raise_for_status()
        return response.text
