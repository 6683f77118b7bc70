"""A server that answers every message with its ROT13 encoding."""

from __future__ import annotations

import argparse

from .buffer import Buffer
from .event_loop import EventLoop
from .rot13 import rot13
from .sockets import SERV_PORT, Acceptor
from .tcp_server import TcpServer


def on_connection_completed(connection):
    print("connection completed")


def on_message(buffer, connection):
    """Reply with the ROT13 of everything readable in ``buffer``."""
    print(f"get message from tcp connection {connection.name}")
    payload = buffer.peek()
    print(payload.decode("utf-8", errors="replace"), end="")

    output = Buffer(len(payload))
    output.append(rot13(payload))
    buffer.consume(len(payload))
    connection.send_buffer(output)


def on_write_completed(connection):
    print("write completed")


def on_connection_closed(connection):
    print("connection closed")


def main(argv=None):
    """Run the ROT13 server until interrupted."""
    parser = argparse.ArgumentParser(description="ROT13 reply server")
    parser.add_argument("--port", type=int, default=SERV_PORT, help="port to listen on")
    parser.add_argument(
        "--threads",
        type=int,
        default=0,
        help="number of I/O threads; 0 serves everything on the accepting thread",
    )
    args = parser.parse_args(argv)

    loop = EventLoop()
    acceptor = Acceptor(args.port)
    server = TcpServer(
        loop,
        acceptor,
        on_connection_completed,
        on_message,
        on_write_completed,
        on_connection_closed,
        args.threads,
    )
    server.start()
    try:
        loop.run()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        acceptor.close()
        loop.close()
    return 0