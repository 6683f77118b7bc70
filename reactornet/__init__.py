"""Reactor-style TCP and HTTP networking toolkit with sample servers and a line client."""

__version__ = "0.1.0"