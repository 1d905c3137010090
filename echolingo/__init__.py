"""Shared package for the echolingo dictionary service."""

from .environment import load_environment

# Load environment variables from .env-style files as soon as the package is
# imported so the CLI scripts and the FastAPI app see the same settings.
load_environment()

__all__ = ["load_environment"]
