"""Command-line interface for msg-ai."""

from msg_ai.cli.app import app, main

__all__ = ["app", "main"]
