"""Status API for dbmonitor.

Exposes:
    create_app -- FastAPI application factory.
"""

from dbmonitor.api.app import create_app

__all__ = ["create_app"]
