"""JSON web application for the triage dashboard."""

from .app import build_container, create_app

__all__ = ["build_container", "create_app"]
