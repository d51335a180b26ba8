"""Cimille: an alpha-beta chess engine speaking UCI."""

__version__ = "0.1.0"
