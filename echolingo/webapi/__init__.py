"""FastAPI web backend for echolingo."""

from .application import create_app

__all__ = ["create_app"]
