"""SQLAlchemy models. Importing this package registers them with Base.metadata."""

from .lexicon import IdiomModel, WordModel

__all__ = ["IdiomModel", "WordModel"]
