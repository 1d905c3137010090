"""Service layer modules for echolingo."""

from .lexicon_store import (
    IdiomEntry,
    LexiconStore,
    MemoryLexiconStore,
    PartOfSpeechEntry,
    WordEntry,
)
from .sql_lexicon_store import SqlLexiconStore
from .store_factory import build_lexicon_store

__all__ = [
    "IdiomEntry",
    "LexiconStore",
    "MemoryLexiconStore",
    "PartOfSpeechEntry",
    "SqlLexiconStore",
    "WordEntry",
    "build_lexicon_store",
]
