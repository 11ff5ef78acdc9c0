"""Command line entry point for the authorization engine."""

from .main import app, main

__all__ = ["app", "main"]
