"""SQLAlchemy-backed lexicon store (local SQLite file or remote database URL)."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from sqlalchemy import Engine, delete, func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import logging_manager
from ..database import Base, create_lexicon_engine, create_session_factory, session_scope
from ..database.models import IdiomModel, WordModel
from ..errors import StorageError
from .lexicon_store import (
    IDIOM_MODE,
    VOCABULARY_MODE,
    Clock,
    IdiomEntry,
    WordEntry,
    dump_pos_entries,
    dump_string_list,
    load_pos_entries,
    load_string_list,
    utc_now,
)

logger = logging_manager.get_logger().getChild("sql_lexicon_store")

# Columns added after the first release; older databases get them on startup.
_LATE_WORD_COLUMNS = {
    "pos": "VARCHAR(255)",
    "entries": "TEXT",
}


def _to_storage_time(value: datetime) -> datetime:
    """Return ``value`` as naive UTC for the ``created_at`` columns."""

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_storage_time(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_duplicate_column_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return "duplicate column" in message or "already exists" in message


class SqlLexiconStore:
    """Persist saved words and idioms through SQLAlchemy.

    Implements the same interface as :class:`MemoryLexiconStore`.
    """

    def __init__(
        self,
        url: str,
        *,
        backend_name: str = "sqlite",
        clock: Optional[Clock] = None,
        engine: Optional[Engine] = None,
    ) -> None:
        self.backend_name = backend_name
        self._clock: Callable[[], datetime] = clock or utc_now
        try:
            self._engine = engine or create_lexicon_engine(url)
        except (SQLAlchemyError, ImportError, OSError) as exc:
            raise StorageError(f"Unable to open {backend_name} store: {exc}") from exc
        self._session_factory = create_session_factory(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error(
                "Storage operation failed: %s",
                exc,
                extra={"event": "store.error", "backend": self.backend_name},
            )
            raise StorageError(f"{self.backend_name} storage error: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def ensure_schema(self) -> None:
        """Create missing tables and add columns introduced after release."""

        try:
            Base.metadata.create_all(self._engine)
            existing = {
                column["name"] for column in inspect(self._engine).get_columns("words")
            }
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to prepare {self.backend_name} schema: {exc}") from exc

        for name, ddl_type in _LATE_WORD_COLUMNS.items():
            if name in existing:
                continue
            try:
                with self._engine.begin() as connection:
                    connection.execute(text(f"ALTER TABLE words ADD COLUMN {name} {ddl_type}"))
            except SQLAlchemyError as exc:
                if not _is_duplicate_column_error(exc):
                    raise StorageError(f"Unable to add column {name!r}: {exc}") from exc
            else:
                logger.info(
                    "Added column %s to words table",
                    name,
                    extra={"event": "store.schema.migrated", "backend": self.backend_name},
                )

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------
    @staticmethod
    def _word_filter(word: str):
        return func.lower(WordModel.word) == (word or "").strip().lower()

    @staticmethod
    def _idiom_filter(idiom: str):
        return func.lower(IdiomModel.idiom) == (idiom or "").strip().lower()

    def save_word(self, entry: WordEntry) -> Optional[WordEntry]:
        with self._session() as session:
            existing = session.execute(
                select(WordModel.id).where(self._word_filter(entry.word))
            ).first()
            if existing is not None:
                logger.info(
                    "Word %r already saved; skipping.",
                    entry.word,
                    extra={"event": "store.save.duplicate", "backend": self.backend_name},
                )
                return None
            model = WordModel(
                word=entry.word, created_at=_to_storage_time(self._clock())
            )
            self._apply_word(model, entry)
            session.add(model)
            session.flush()
            return self._word_to_entry(model)

    def upsert_word(self, entry: WordEntry) -> WordEntry:
        word = (entry.word or "").strip().lower()
        with self._session() as session:
            model = session.execute(
                select(WordModel).where(self._word_filter(word))
            ).scalar_one_or_none()
            if model is None:
                model = WordModel(word=word, created_at=_to_storage_time(self._clock()))
                session.add(model)
            self._apply_word(model, entry)
            session.flush()
            return self._word_to_entry(model)

    def word_exists(self, word: str) -> bool:
        with self._session() as session:
            return (
                session.execute(
                    select(WordModel.id).where(self._word_filter(word)).limit(1)
                ).first()
                is not None
            )

    def list_words(self) -> List[WordEntry]:
        return self._select_words(None)

    def list_words_since(self, cutoff: datetime) -> List[WordEntry]:
        return self._select_words(cutoff)

    def _select_words(self, cutoff: Optional[datetime]) -> List[WordEntry]:
        statement = select(WordModel)
        if cutoff is not None:
            statement = statement.where(WordModel.created_at >= _to_storage_time(cutoff))
        statement = statement.order_by(WordModel.created_at.desc(), WordModel.id.desc())
        with self._session() as session:
            return [self._word_to_entry(m) for m in session.execute(statement).scalars()]

    def delete_word(self, word: str) -> bool:
        with self._session() as session:
            result = session.execute(delete(WordModel).where(self._word_filter(word)))
            return result.rowcount > 0

    def clear_words(self) -> int:
        with self._session() as session:
            result = session.execute(delete(WordModel))
            return int(result.rowcount or 0)

    # ------------------------------------------------------------------
    # Idioms
    # ------------------------------------------------------------------
    def save_idiom(self, entry: IdiomEntry) -> Optional[IdiomEntry]:
        with self._session() as session:
            existing = session.execute(
                select(IdiomModel.id).where(self._idiom_filter(entry.idiom))
            ).first()
            if existing is not None:
                logger.info(
                    "Idiom %r already saved; skipping.",
                    entry.idiom,
                    extra={"event": "store.save.duplicate", "backend": self.backend_name},
                )
                return None
            model = IdiomModel(
                idiom=entry.idiom,
                meaning=dump_string_list(entry.meaning),
                examples=dump_string_list(entry.examples),
                translations=dump_string_list(entry.translations),
                mode=IDIOM_MODE,
                created_at=_to_storage_time(self._clock()),
            )
            session.add(model)
            session.flush()
            return self._idiom_to_entry(model)

    def idiom_exists(self, idiom: str) -> bool:
        with self._session() as session:
            return (
                session.execute(
                    select(IdiomModel.id).where(self._idiom_filter(idiom)).limit(1)
                ).first()
                is not None
            )

    def list_idioms(self) -> List[IdiomEntry]:
        return self._select_idioms(None)

    def list_idioms_since(self, cutoff: datetime) -> List[IdiomEntry]:
        return self._select_idioms(cutoff)

    def _select_idioms(self, cutoff: Optional[datetime]) -> List[IdiomEntry]:
        statement = select(IdiomModel)
        if cutoff is not None:
            statement = statement.where(IdiomModel.created_at >= _to_storage_time(cutoff))
        statement = statement.order_by(IdiomModel.created_at.desc(), IdiomModel.id.desc())
        with self._session() as session:
            return [self._idiom_to_entry(m) for m in session.execute(statement).scalars()]

    def delete_idiom(self, idiom: str) -> bool:
        with self._session() as session:
            result = session.execute(delete(IdiomModel).where(self._idiom_filter(idiom)))
            return result.rowcount > 0

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _apply_word(model: WordModel, entry: WordEntry) -> None:
        model.pronunciation = entry.pronunciation or ""
        model.definitions = dump_string_list(entry.definitions)
        model.examples = dump_string_list(entry.examples)
        model.translations = dump_string_list(entry.translations)
        model.pos = entry.pos or None
        model.entries = dump_pos_entries(entry.entries)
        model.mode = VOCABULARY_MODE

    @staticmethod
    def _word_to_entry(model: WordModel) -> WordEntry:
        return WordEntry(
            id=model.id,
            word=model.word,
            pronunciation=model.pronunciation or "",
            definitions=load_string_list(model.definitions),
            examples=load_string_list(model.examples),
            translations=load_string_list(model.translations),
            pos=model.pos,
            entries=load_pos_entries(model.entries),
            mode=model.mode or VOCABULARY_MODE,
            created_at=_from_storage_time(model.created_at),
        )

    @staticmethod
    def _idiom_to_entry(model: IdiomModel) -> IdiomEntry:
        return IdiomEntry(
            id=model.id,
            idiom=model.idiom,
            meaning=load_string_list(model.meaning),
            examples=load_string_list(model.examples),
            translations=load_string_list(model.translations),
            mode=model.mode or IDIOM_MODE,
            created_at=_from_storage_time(model.created_at),
        )


__all__ = ["SqlLexiconStore"]
