"""
HTTP API for the video generation service.
"""

from .server import create_app

__all__ = ["create_app"]
