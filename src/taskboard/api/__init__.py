"""HTTP boundary for taskboard."""

from taskboard.api.app import create_app

__all__ = ["create_app"]
