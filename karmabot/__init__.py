"""Karma IRC bot: one paced IRC connection plus a persistent karma counter."""

__version__ = "0.3.0"
