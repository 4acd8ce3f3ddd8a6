import json

import httpx
import pytest

from epliteclient.client import EtherpadClient
from epliteclient.connection import Connection

API_VERSION = "1.2.12"
ENCODING = "UTF-8"


def envelope(code=0, message="ok", data=None) -> str:
    """Serialize a server response envelope."""
    return json.dumps({"code": code, "message": message, "data": data})


def ok_response(data=None) -> httpx.Response:
    return httpx.Response(200, text=envelope(data=data))


@pytest.fixture
def connection():
    conn = Connection("http://example.com/", "apikey", API_VERSION, ENCODING)
    yield conn
    conn.close()


@pytest.fixture
def client():
    c = EtherpadClient("http://localhost:9001", "secret")
    yield c
    c.close()
