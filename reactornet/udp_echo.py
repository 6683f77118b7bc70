"""A UDP server that greets every datagram it receives."""

from __future__ import annotations

import argparse
import socket

from .sockets import MAXLINE, SERV_PORT


def make_reply(message):
    """The reply ``Hi, <message>``; bytes stop at the first NUL."""
    if isinstance(message, str):
        return "Hi, " + message
    return b"Hi, " + bytes(message).split(b"\0", 1)[0]


def _handle_datagram(sock):
    message, address = sock.recvfrom(MAXLINE)
    text = message.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    print(f"received {len(message)} bytes: {text}")
    sock.sendto(make_reply(message), address)
    return message


def serve(port):
    """Answer datagrams on ``port`` until interrupted; return how many were answered."""
    count = 0
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("", port))
        try:
            while True:
                _handle_datagram(sock)
                count += 1
        except KeyboardInterrupt:
            print(f"\nreceived {count} datagrams")
    return count


def main(argv=None):
    """Run the UDP greeting server until interrupted."""
    parser = argparse.ArgumentParser(description="UDP greeting server")
    parser.add_argument("--port", type=int, default=SERV_PORT, help="port to listen on")
    args = parser.parse_args(argv)
    serve(args.port)
    return 0