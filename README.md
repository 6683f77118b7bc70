# reactornet

A compact networking toolkit built around the reactor pattern: an event
loop per thread, `poll` and `epoll` dispatchers, a growable byte buffer,
TCP connections driven by callbacks, and a minimal HTTP/1.1 server on top.
A few ready-to-run sample servers and an interactive client are included.

Everything uses only the Python standard library and targets POSIX systems.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Building blocks

| Module | What it provides |
| --- | --- |
| `reactornet.buffer` | `Buffer`: a byte buffer with read and write indexes, CRLF search and socket reads |
| `reactornet.sockets` | `Acceptor`, `tcp_server`, `tcp_server_listen`, `tcp_nonblocking_server_listen`, `tcp_client`, `readn`, `readline`, `read_line`, `read_message`, `sock_ntop` |
| `reactornet.channel` | `Channel`, `ChannelMap`, `EventFlag` |
| `reactornet.dispatcher` | `PollDispatcher`, `EpollDispatcher`, `default_dispatcher` |
| `reactornet.event_loop` | `EventLoop`: runs a dispatcher and applies queued channel changes |
| `reactornet.thread_pool` | `EventLoopThread`, `ThreadPool`: I/O loops handed out round robin |
| `reactornet.tcp_connection` | `TcpConnection`: buffered, callback-driven connection |
| `reactornet.tcp_server` | `TcpServer`: accepts connections and hands them to the pool |
| `reactornet.http_request` / `http_response` / `http_server` | request parsing, response encoding and `HttpServer` |
| `reactornet.rot13` | `rot13`, `rot13_char` |
| `reactornet.log` | `log`, `logx`, `msgx`, `debugx`, `log_err`, writing `[msg] ...` style lines to standard output |

`default_dispatcher` picks `EpollDispatcher` where the platform has
`epoll` and `PollDispatcher` otherwise. Changes to channels made from a
thread other than the loop's owner are queued and the loop is woken through
a socket pair to apply them.

## A tiny HTTP server

```python
from reactornet.dispatcher import default_dispatcher
from reactornet.event_loop import EventLoop
from reactornet.http_app import on_request
from reactornet.http_server import HttpServer

loop = EventLoop("main thread", default_dispatcher("main thread"))
server = HttpServer(loop, 43211, on_request, 2)
server.start()
loop.run()
```

`on_request` answers `/` with an HTML page, `/network` with plain text and
everything else with `404 Not Found` (sent with `Connection: close`). Any
query string is ignored when matching the path. Supply your own callback
taking `(request, response)` to serve something else.

## Commands

All servers listen on port 43211 unless `--port` is given.

```
reactornet-http [--port N] [--threads N]           # HTTP server, 2 I/O threads by default
reactornet-rot13-server [--port N] [--threads N]   # reactor-based ROT13 reply server, 0 I/O threads by default
reactornet-nonblocking-server [--port N]           # select()-based non-blocking ROT13 server
reactornet-udp-echo [--port N]                     # UDP server answering "Hi, <message>"
reactornet-telnet-client ADDRESS PORT              # interactive line client
```

The ROT13 servers answer with the ROT13 encoding of what they receive; the
non-blocking one replies once a newline has arrived, keeps at most 1024
bytes per client and waits five seconds before each accept. The UDP server
prints how many datagrams it answered when interrupted.

`reactornet-telnet-client` sends each line typed, without its newline, and
prints what the server sends back. A line that is a prefix of `quit`,
including an empty line, closes the sending side of the connection; the
client exits once the server closes.

## What is not included

There is no thread-per-connection or thread-pool line echo server, and no
remote shell server for `reactornet-telnet-client` to talk to; the client
works with any TCP server that answers lines of text.