"""
HTTP endpoints for triggering scrapes and imports.
"""

from .server import create_app, start_web_server

__all__ = ["create_app", "start_web_server"]
