"""An interactive client for the remote shell server."""

from __future__ import annotations

import argparse
import os
import selectors
import socket
import sys

from .sockets import tcp_client

MAXLINE = 1024
_ENCODING = "utf-8"


def prepare_line(line):
    """Drop one trailing newline from ``line``."""
    return line[:-1] if line.endswith("\n") else line


def _is_quit(text):
    return "quit".startswith(text)


def _take_lines(pending):
    lines = []
    limit = MAXLINE - 1
    while True:
        end = pending.find(b"\n", 0, limit)
        if end >= 0:
            lines.append(pending[:end + 1])
            pending = pending[end + 1:]
        elif len(pending) >= limit:
            lines.append(pending[:limit])
            pending = pending[limit:]
        else:
            return lines, pending


def _send_line(sock, raw):
    """Send one input line; return ``True`` if it asked to quit."""
    text = prepare_line(raw.decode(_ENCODING, errors="surrogateescape"))
    if _is_quit(text):
        sock.shutdown(socket.SHUT_WR)
        return True
    sock.sendall(text.encode(_ENCODING, errors="surrogateescape"))
    return False


def run(sock, stdin, stdout):
    """Relay lines from ``stdin`` to ``sock`` and replies to ``stdout``.

    A line that is a prefix of ``quit`` (an empty one included) closes the
    sending side and stops reading input. Returns once the server closes.
    """
    stdin_fd = stdin.fileno()
    pending = b""
    with selectors.DefaultSelector() as selector:
        selector.register(sock, selectors.EVENT_READ, "socket")
        selector.register(stdin_fd, selectors.EVENT_READ, "stdin")
        while True:
            for key, _mask in selector.select():
                if key.data == "socket":
                    data = sock.recv(MAXLINE)
                    if not data:
                        stdout.write("server closed \n")
                        stdout.flush()
                        return
                    stdout.write(data.decode(_ENCODING, errors="replace"))
                    stdout.write("\n")
                    stdout.flush()
                    continue

                chunk = os.read(stdin_fd, MAXLINE)
                if chunk:
                    lines, pending = _take_lines(pending + chunk)
                else:
                    lines, pending = ([pending] if pending else []), b""
                quit_requested = False
                for raw in lines:
                    if _send_line(sock, raw):
                        quit_requested = True
                        break
                if quit_requested or not chunk:
                    selector.unregister(stdin_fd)


def main(argv=None):
    """Connect to the server and relay the terminal until it closes."""
    parser = argparse.ArgumentParser(description="remote shell client")
    parser.add_argument("address", help="IPv4 address of the server")
    parser.add_argument("port", type=int, help="port of the server")
    args = parser.parse_args(argv)
    with tcp_client(args.address, args.port) as sock:
        try:
            run(sock, sys.stdin, sys.stdout)
        except KeyboardInterrupt:
            pass
    return 0