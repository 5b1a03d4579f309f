"""Public API for listing content process startup."""

from packages.listing_core.main import build_app, main

__all__ = ["build_app", "main"]
