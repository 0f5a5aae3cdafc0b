"""HTTP API for ES Writer."""

from eswriter.api.main import create_app

__all__ = ["create_app"]
