"""HTTP request state collected while a request is being parsed."""

from __future__ import annotations

import enum

HTTP10 = "HTTP/1.0"
HTTP11 = "HTTP/1.1"
KEEP_ALIVE = "Keep-Alive"
CLOSE = "close"


class RequestState(enum.Enum):
    """How far parsing of a request has got."""

    STATUS = enum.auto()
    HEADERS = enum.auto()
    BODY = enum.auto()
    DONE = enum.auto()


class HttpRequest:
    """Method, URL, version and headers of one request."""

    def __init__(self):
        self.method = None
        self.url = None
        self.version = None
        self.current_state = RequestState.STATUS
        self.headers = []

    def __repr__(self):
        return f"HttpRequest({self.method!r}, {self.url!r}, {self.version!r}, {self.current_state.name})"

    def reset(self):
        """Prepare for the next request on the same connection."""
        self.method = None
        self.url = None
        self.version = None
        self.current_state = RequestState.STATUS
        self.headers = []

    def add_header(self, key, value):
        self.headers.append((key, value))

    def get_header(self, key):
        """Value of the first header whose name starts with ``key``, or ``None``."""
        for name, value in self.headers:
            if name.startswith(key):
                return value
        return None

    def close_connection(self):
        """True when the server should close its side after answering.

        That is the case when the client asked for ``Connection: close``, or
        spoke HTTP/1.0 without asking for keep-alive.
        """
        connection = self.get_header("Connection")
        if connection is not None and connection.startswith(CLOSE):
            return True
        if self.version is not None and self.version.startswith(HTTP10):
            return connection is None or not connection.startswith(KEEP_ALIVE)
        return False