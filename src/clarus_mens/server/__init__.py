"""Server entry point for the Clarus Mens API."""

from .main import main

__all__ = ["main"]
