"""HTTP API."""

from slopcollector.api.main import create_app

__all__ = ["create_app"]
