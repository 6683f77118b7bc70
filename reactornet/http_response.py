"""HTTP responses and their encoding onto the wire."""

from __future__ import annotations

import enum


class HttpStatusCode(enum.IntEnum):
    UNKNOWN = 0
    OK = 200
    MOVED_PERMANENTLY = 301
    BAD_REQUEST = 400
    NOT_FOUND = 404


class HttpResponse:
    """Status, headers and body of a response.

    With ``keep_connected`` set the response announces ``Connection: close``
    and carries no ``Content-Length``; otherwise the length of the body is
    given and the connection is kept alive.
    """

    def __init__(self):
        self.status_code = HttpStatusCode.UNKNOWN
        self.status_message = None
        self.content_type = None
        self.body = None
        self.headers = []
        self.keep_connected = False

    def __repr__(self):
        return f"HttpResponse({int(self.status_code)}, {self.status_message!r})"

    def encode_buffer(self, buffer):
        """Append the encoded response to ``buffer``."""
        body = (self.body or "").encode("utf-8")
        buffer.append_string(f"HTTP/1.1 {int(self.status_code)} ")
        buffer.append_string(self.status_message)
        buffer.append_string("\r\n")

        if self.keep_connected:
            buffer.append_string("Connection: close\r\n")
        else:
            buffer.append_string(f"Content-Length: {len(body)}\r\n")
            buffer.append_string("Connection: Keep-Alive\r\n")

        for key, value in self.headers:
            buffer.append_string(f"{key}: {value}\r\n")

        buffer.append_string("\r\n")
        buffer.append(body)