"""A small HTTP site with a home page and a plain-text page."""

from __future__ import annotations

import argparse

from .event_loop import EventLoop
from .http_response import HttpStatusCode
from .http_server import HttpServer
from .sockets import SERV_PORT

HOME_PAGE = (
    "<html><head><title>This is network programming</title></head>"
    "<body><h1>Hello, network programming</h1></body></html>"
)
NETWORK_TEXT = "hello, network programming"


def on_request(request, response):
    """Answer ``/`` and ``/network``; everything else is not found."""
    path = request.url.split("?", 1)[0]
    if path == "/":
        response.status_code = HttpStatusCode.OK
        response.status_message = "OK"
        response.content_type = "text/html"
        response.body = HOME_PAGE
    elif path == "/network":
        response.status_code = HttpStatusCode.OK
        response.status_message = "OK"
        response.content_type = "text/plain"
        response.body = NETWORK_TEXT
    else:
        response.status_code = HttpStatusCode.NOT_FOUND
        response.status_message = "Not Found"
        response.keep_connected = True


def main(argv=None):
    """Run the site until interrupted."""
    parser = argparse.ArgumentParser(description="HTTP demo server")
    parser.add_argument("--port", type=int, default=SERV_PORT, help="port to listen on")
    parser.add_argument("--threads", type=int, default=2, help="number of I/O threads")
    args = parser.parse_args(argv)

    loop = EventLoop()
    server = HttpServer(loop, args.port, on_request, args.threads)
    server.start()
    try:
        loop.run()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        loop.close()
    return 0