"""Saved word/idiom records and the in-memory lexicon store."""

from __future__ import annotations

import itertools
import json
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from .. import logging_manager

logger = logging_manager.get_logger().getChild("lexicon_store")

Clock = Callable[[], datetime]

VOCABULARY_MODE = "vocabulary"
IDIOM_MODE = "idiom"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PartOfSpeechEntry:
    part_of_speech: str
    definitions: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    translations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class WordEntry:
    word: str
    pronunciation: str = ""
    definitions: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    translations: List[str] = field(default_factory=list)
    pos: Optional[str] = None
    entries: List[PartOfSpeechEntry] = field(default_factory=list)
    mode: str = VOCABULARY_MODE
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class IdiomEntry:
    idiom: str
    meaning: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    translations: List[str] = field(default_factory=list)
    mode: str = IDIOM_MODE
    id: Optional[int] = None
    created_at: Optional[datetime] = None


class LexiconStore(Protocol):
    """Storage contract shared by every lexicon backend.

    Text lookups are case-insensitive. ``save_*`` returns ``None`` when the
    entry already exists instead of raising or overwriting.
    """

    backend_name: str

    def ensure_schema(self) -> None: ...

    def close(self) -> None: ...

    def save_word(self, entry: WordEntry) -> Optional[WordEntry]: ...

    def save_idiom(self, entry: IdiomEntry) -> Optional[IdiomEntry]: ...

    def upsert_word(self, entry: WordEntry) -> WordEntry: ...

    def word_exists(self, word: str) -> bool: ...

    def idiom_exists(self, idiom: str) -> bool: ...

    def list_words(self) -> List[WordEntry]: ...

    def list_idioms(self) -> List[IdiomEntry]: ...

    def list_words_since(self, cutoff: datetime) -> List[WordEntry]: ...

    def list_idioms_since(self, cutoff: datetime) -> List[IdiomEntry]: ...

    def delete_word(self, word: str) -> bool: ...

    def delete_idiom(self, idiom: str) -> bool: ...

    def clear_words(self) -> int: ...


# ----------------------------------------------------------------------
# Serialization helpers
# ----------------------------------------------------------------------
def dump_string_list(items: Iterable[Any] | None) -> str:
    return json.dumps([str(item) for item in (items or [])], ensure_ascii=False)


def load_string_list(raw: Optional[str]) -> List[str]:
    """Decode a JSON string list; anything unreadable becomes an empty list."""

    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed]


def coerce_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def pos_entry_from_payload(payload: Dict[str, Any]) -> PartOfSpeechEntry:
    return PartOfSpeechEntry(
        part_of_speech=str(payload.get("partOfSpeech") or "").strip().lower(),
        definitions=coerce_string_list(payload.get("definitions")),
        examples=coerce_string_list(payload.get("examples")),
        translations=coerce_string_list(payload.get("persianTranslations")),
    )


def pos_entry_to_payload(entry: PartOfSpeechEntry) -> Dict[str, Any]:
    return {
        "partOfSpeech": entry.part_of_speech,
        "definitions": list(entry.definitions),
        "examples": list(entry.examples),
        "persianTranslations": list(entry.translations),
    }


def dump_pos_entries(entries: Iterable[PartOfSpeechEntry]) -> Optional[str]:
    serialized = [pos_entry_to_payload(entry) for entry in entries]
    if not serialized:
        return None
    return json.dumps(serialized, ensure_ascii=False)


def load_pos_entries(raw: Optional[str]) -> List[PartOfSpeechEntry]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [pos_entry_from_payload(item) for item in parsed if isinstance(item, dict)]


def word_from_payload(payload: Dict[str, Any]) -> WordEntry:
    """Build a :class:`WordEntry` from a vocabulary lookup payload."""

    raw_entries = payload.get("entries")
    entries = [
        pos_entry_from_payload(item)
        for item in (raw_entries if isinstance(raw_entries, list) else [])
        if isinstance(item, dict)
    ]
    pos = payload.get("pos")
    if not pos and entries:
        pos = " | ".join(dict.fromkeys(e.part_of_speech for e in entries if e.part_of_speech))
    return WordEntry(
        word=str(payload.get("word") or "").strip(),
        pronunciation=str(payload.get("pronunciation") or ""),
        definitions=coerce_string_list(payload.get("definitions")),
        examples=coerce_string_list(payload.get("examples")),
        translations=coerce_string_list(payload.get("persianTranslations")),
        pos=str(pos) if pos else None,
        entries=entries,
    )


def idiom_from_payload(payload: Dict[str, Any]) -> IdiomEntry:
    """Build an :class:`IdiomEntry` from an idiom lookup payload."""

    return IdiomEntry(
        idiom=str(payload.get("idiom") or "").strip(),
        meaning=coerce_string_list(payload.get("meaning")),
        examples=coerce_string_list(payload.get("examples")),
        translations=coerce_string_list(payload.get("persianTranslations")),
    )


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def word_to_payload(entry: WordEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "word": entry.word,
        "pronunciation": entry.pronunciation,
        "definitions": list(entry.definitions),
        "examples": list(entry.examples),
        "persianTranslations": list(entry.translations),
        "pos": entry.pos,
        "entries": [pos_entry_to_payload(item) for item in entry.entries],
        "mode": entry.mode,
        "savedAt": _iso(entry.created_at),
    }


def idiom_to_payload(entry: IdiomEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "idiom": entry.idiom,
        "meaning": list(entry.meaning),
        "examples": list(entry.examples),
        "persianTranslations": list(entry.translations),
        "mode": entry.mode,
        "savedAt": _iso(entry.created_at),
    }


def export_cutoff(now: datetime, *, days: int = 7) -> datetime:
    return now - timedelta(days=days)


# ----------------------------------------------------------------------
# In-memory backend
# ----------------------------------------------------------------------
class MemoryLexiconStore:
    """Process-local lexicon store with the same contract as the SQL backend.

    Entries live for the lifetime of the process only.
    """

    backend_name = "memory"

    def __init__(self, *, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now
        self._words: List[WordEntry] = []
        self._idioms: List[IdiomEntry] = []
        self._word_ids = itertools.count(1)
        self._idiom_ids = itertools.count(1)
        self._lock = threading.Lock()

    def ensure_schema(self) -> None:
        return None

    def close(self) -> None:
        return None

    @staticmethod
    def _key(text: str) -> str:
        return (text or "").strip().lower()

    def _find_word_index(self, word: str) -> Optional[int]:
        key = self._key(word)
        for index, entry in enumerate(self._words):
            if entry.word.lower() == key:
                return index
        return None

    def save_word(self, entry: WordEntry) -> Optional[WordEntry]:
        with self._lock:
            if self._find_word_index(entry.word) is not None:
                logger.info(
                    "Word %r already saved; skipping.",
                    entry.word,
                    extra={"event": "store.save.duplicate", "backend": self.backend_name},
                )
                return None
            created = replace(
                entry,
                id=next(self._word_ids),
                created_at=self._clock(),
                mode=VOCABULARY_MODE,
            )
            self._words.append(created)
            return created

    def save_idiom(self, entry: IdiomEntry) -> Optional[IdiomEntry]:
        key = self._key(entry.idiom)
        with self._lock:
            if any(existing.idiom.lower() == key for existing in self._idioms):
                logger.info(
                    "Idiom %r already saved; skipping.",
                    entry.idiom,
                    extra={"event": "store.save.duplicate", "backend": self.backend_name},
                )
                return None
            created = replace(
                entry,
                id=next(self._idiom_ids),
                created_at=self._clock(),
                mode=IDIOM_MODE,
            )
            self._idioms.append(created)
            return created

    def upsert_word(self, entry: WordEntry) -> WordEntry:
        normalized = replace(entry, word=self._key(entry.word), mode=VOCABULARY_MODE)
        with self._lock:
            index = self._find_word_index(normalized.word)
            if index is None:
                created = replace(normalized, id=next(self._word_ids), created_at=self._clock())
                self._words.append(created)
                return created
            existing = self._words[index]
            updated = replace(
                existing,
                pronunciation=normalized.pronunciation,
                definitions=list(normalized.definitions),
                examples=list(normalized.examples),
                translations=list(normalized.translations),
                pos=normalized.pos,
                entries=list(normalized.entries),
            )
            self._words[index] = updated
            return updated

    def word_exists(self, word: str) -> bool:
        with self._lock:
            return self._find_word_index(word) is not None

    def idiom_exists(self, idiom: str) -> bool:
        key = self._key(idiom)
        with self._lock:
            return any(existing.idiom.lower() == key for existing in self._idioms)

    @staticmethod
    def _newest_first(items: Iterable[Any]) -> List[Any]:
        return sorted(items, key=lambda item: (item.created_at, item.id), reverse=True)

    def list_words(self) -> List[WordEntry]:
        with self._lock:
            return self._newest_first(self._words)

    def list_idioms(self) -> List[IdiomEntry]:
        with self._lock:
            return self._newest_first(self._idioms)

    def list_words_since(self, cutoff: datetime) -> List[WordEntry]:
        with self._lock:
            return self._newest_first(e for e in self._words if e.created_at >= cutoff)

    def list_idioms_since(self, cutoff: datetime) -> List[IdiomEntry]:
        with self._lock:
            return self._newest_first(e for e in self._idioms if e.created_at >= cutoff)

    def delete_word(self, word: str) -> bool:
        key = self._key(word)
        with self._lock:
            remaining = [entry for entry in self._words if entry.word.lower() != key]
            if len(remaining) == len(self._words):
                return False
            self._words = remaining
            return True

    def delete_idiom(self, idiom: str) -> bool:
        key = self._key(idiom)
        with self._lock:
            remaining = [entry for entry in self._idioms if entry.idiom.lower() != key]
            if len(remaining) == len(self._idioms):
                return False
            self._idioms = remaining
            return True

    def clear_words(self) -> int:
        with self._lock:
            removed = len(self._words)
            self._words = []
            return removed


__all__ = [
    "IdiomEntry",
    "LexiconStore",
    "MemoryLexiconStore",
    "PartOfSpeechEntry",
    "WordEntry",
    "dump_pos_entries",
    "dump_string_list",
    "export_cutoff",
    "idiom_from_payload",
    "idiom_to_payload",
    "load_pos_entries",
    "load_string_list",
    "utc_now",
    "word_from_payload",
    "word_to_payload",
]
