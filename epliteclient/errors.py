"""Exceptions raised by the Etherpad Lite client."""


class EtherpadError(Exception):
    """Base class for every failure raised by the client."""


class ApiFailure(EtherpadError):
    """The server answered with one of the documented error codes (1-4)."""

    def __init__(self, message: str, code: int):
        self.message = message
        self.code = code
        super().__init__(message)


class ParseFailure(EtherpadError):
    """The response body was not valid JSON."""

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Unable to parse JSON response ({body})")


class UnexpectedResponseFailure(EtherpadError):
    """The response was JSON, but not an envelope the client understands."""

    def __init__(self, message: str, body: str):
        self.body = body
        super().__init__(message)


class TransportFailure(EtherpadError):
    """Network or URL construction fault while talking to the server."""
