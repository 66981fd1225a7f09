"""Command line front end of the memcfg tool."""

from __future__ import annotations

from .app import build_arg_parser, main

__all__ = ["build_arg_parser", "main"]
