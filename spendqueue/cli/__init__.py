"""Command line package."""

from spendqueue.cli.main import build_parser, main

__all__ = [
    "build_parser",
    "main",
]
