"""Command line interface for release-boss."""

from release_boss.cli.app import app, main

__all__ = ["app", "main"]
