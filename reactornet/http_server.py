"""An HTTP server on top of the event-driven TCP server."""

from __future__ import annotations

from .buffer import Buffer
from .http_request import HttpRequest, RequestState
from .http_response import HttpResponse
from .log import msgx
from .sockets import Acceptor
from .tcp_server import TcpServer

_BAD_REQUEST = b"HTTP/1.1 400 Bad Request\r\n\r\n"


def process_status_line(line, request):
    """Fill method, URL and version of ``request`` from a request line.

    ``line`` excludes the CRLF and may be bytes or str. Returns its length.
    Raises ``ValueError`` if the line lacks the two separating spaces.
    """
    text = line.decode("latin-1") if isinstance(line, (bytes, bytearray)) else line
    parts = text.split(" ", 2)
    if len(parts) != 3:
        raise ValueError(f"malformed request line: {text!r}")
    request.method, request.url, request.version = parts
    return len(line)


def parse_http_request(input_buffer, request):
    """Consume request line and headers from ``input_buffer`` into ``request``.

    Stops early when no complete line is available; parsing resumes on the
    next call. Returns ``False`` for a malformed request line.
    """
    while request.current_state is not RequestState.DONE:
        offset = input_buffer.find_crlf()
        if offset is None:
            return True
        line = input_buffer.peek()[:offset]
        if request.current_state is RequestState.STATUS:
            try:
                process_status_line(line, request)
            except ValueError:
                return False
            input_buffer.consume(offset + 2)
            request.current_state = RequestState.HEADERS
        else:
            key, colon, value = line.partition(b": ")
            input_buffer.consume(offset + 2)
            if colon:
                request.add_header(key.decode("latin-1"), value.decode("latin-1"))
            else:
                request.current_state = RequestState.DONE
    return True


def _on_connection_completed(connection):
    msgx("connection completed")
    connection.request = HttpRequest()


def _on_message(input_buffer, connection):
    msgx(f"get message from tcp connection {connection.name}")
    request = connection.request
    server = connection.data

    if not parse_http_request(input_buffer, request):
        connection.send_data(_BAD_REQUEST)
        connection.shutdown()

    if request.current_state is RequestState.DONE:
        response = HttpResponse()
        if server is not None and server.request_callback is not None:
            server.request_callback(request, response)
        output = Buffer()
        response.encode_buffer(output)
        connection.send_buffer(output)
        if request.close_connection():
            connection.shutdown()
        request.reset()


def _on_write_completed(connection):
    msgx("write completed")


def _on_connection_closed(connection):
    msgx("connection closed")
    connection.request = None


class HttpServer:
    """Serves HTTP on ``port``; ``request_callback(request, response)`` fills each reply."""

    def __init__(self, loop, port, request_callback, thread_num=0):
        self.request_callback = request_callback
        self.acceptor = Acceptor(port)
        self.port = self.acceptor.listen_port
        self.tcp_server = TcpServer(
            loop,
            self.acceptor,
            _on_connection_completed,
            _on_message,
            _on_write_completed,
            _on_connection_closed,
            thread_num,
        )
        self.tcp_server.set_data(self)

    def start(self):
        self.tcp_server.start()

    def stop(self):
        """Stop the worker threads and close the listening socket."""
        self.tcp_server.stop()
        self.acceptor.close()