[build-system]
requires = ["setuptools>=68", "wheel"]
build-backend = "setuptools.build_meta"

[project]
name = "reactornet"
version = "0.1.0"
description = "A small reactor-style TCP/HTTP networking toolkit with event loops, I/O thread pools and sample servers"
requires-python = ">=3.10"
dependencies = []
keywords = ["reactor", "event-loop", "epoll", "poll", "tcp", "http", "server", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
reactornet-rot13-server = "reactornet.rot13_server:main"
reactornet-http = "reactornet.http_app:main"
reactornet-nonblocking-server = "reactornet.nonblocking_server:main"
reactornet-udp-echo = "reactornet.udp_echo:main"
reactornet-telnet-client = "reactornet.telnet_client:main"

[tool.setuptools.packages.find]
include = ["reactornet*"]

[tool.pytest.ini_options]
addopts = "-ra"
