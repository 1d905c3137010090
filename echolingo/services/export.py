"""Anki CSV export of recently saved words and idioms."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .. import logging_manager
from ..errors import ValidationError
from ..prompt_templates import PARTS_OF_SPEECH
from .lexicon_store import IdiomEntry, LexiconStore, WordEntry, export_cutoff, utc_now

logger = logging_manager.get_logger().getChild("export")

EXPORT_WINDOW_DAYS = 7
EXPORT_FILENAME = "echolingo_anki_7_days.csv"
EXPORT_TAG = "echolingo"
GROUPED_LAYOUT = "grouped"
FLAT_LAYOUT = "flat"
VALID_LAYOUTS = (GROUPED_LAYOUT, FLAT_LAYOUT)

_GENERAL_KEY = "general"
_POS_PREFIX = re.compile(
    r"^\s*\[(" + "|".join(PARTS_OF_SPEECH) + r")\]\s*",
    re.IGNORECASE,
)


@dataclass
class PosGroup:
    definitions: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    translations: List[str] = field(default_factory=list)

    def extend(self, other: "PosGroup") -> None:
        self.definitions.extend(other.definitions)
        self.examples.extend(other.examples)
        self.translations.extend(other.translations)


@dataclass(frozen=True)
class AnkiExport:
    content: str
    filename: str
    row_count: int
    layout: str


# ----------------------------------------------------------------------
# Cell rendering
# ----------------------------------------------------------------------
def escape_csv_field(value: object) -> str:
    text = value if isinstance(value, str) else ("" if value is None else str(value))
    return text.replace('"', '""').replace("\n", "<br>")


def escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def unordered_list(items: Iterable[str]) -> str:
    """Render ``items`` as an inline ``<ul>``; blank items are dropped."""

    cleaned = [item.strip() for item in items if item and item.strip()]
    if not cleaned:
        return ""
    return "<ul>" + "".join(f"<li>{escape_html(item)}</li>" for item in cleaned) + "</ul>"


def bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"• {item}" for item in items if item)


def format_row(fields: Sequence[object]) -> str:
    return ",".join(f'"{escape_csv_field(value)}"' for value in fields)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M:%S")


# ----------------------------------------------------------------------
# Part-of-speech grouping
# ----------------------------------------------------------------------
def group_tagged_items(
    definitions: Sequence[str],
    examples: Sequence[str],
    translations: Sequence[str],
) -> Dict[str, PosGroup]:
    """Split ``[pos] text`` items into per-part-of-speech groups.

    Untagged items are appended to every detected group. An empty mapping
    means nothing carried a recognised tag and the word is exported as a
    single row.
    """

    groups: Dict[str, PosGroup] = {}

    def _collect(items: Sequence[str], attribute: str) -> None:
        for raw in items:
            match = _POS_PREFIX.match(raw)
            if match:
                key = match.group(1).lower()
                cleaned = raw[match.end():].strip()
                if not cleaned:
                    continue
            else:
                key = _GENERAL_KEY
                cleaned = raw.strip()
            getattr(groups.setdefault(key, PosGroup()), attribute).append(cleaned)

    _collect(definitions, "definitions")
    _collect(examples, "examples")
    _collect(translations, "translations")

    general = groups.pop(_GENERAL_KEY, None)
    if not groups:
        return {}
    if general is not None:
        for group in groups.values():
            group.extend(general)
    return groups


def group_word(entry: WordEntry) -> Dict[str, PosGroup]:
    """Return the export groups for ``entry``.

    Structured part-of-speech records win; rows saved without them fall back
    to the tag prefixes embedded in the aggregate lists.
    """

    if entry.entries:
        groups: Dict[str, PosGroup] = {}
        for record in entry.entries:
            key = record.part_of_speech.strip().lower()
            if not key:
                continue
            groups.setdefault(key, PosGroup()).extend(
                PosGroup(
                    definitions=list(record.definitions),
                    examples=list(record.examples),
                    translations=list(record.translations),
                )
            )
        if groups:
            return groups
    return group_tagged_items(entry.definitions, entry.examples, entry.translations)


# ----------------------------------------------------------------------
# Layouts
# ----------------------------------------------------------------------
def grouped_rows(words: Iterable[WordEntry]) -> List[str]:
    rows: List[str] = []
    for entry in words:
        created = format_timestamp(entry.created_at)
        groups = group_word(entry)
        if not groups:
            rows.append(
                format_row(
                    [
                        entry.word,
                        entry.pos or "",
                        entry.pronunciation,
                        unordered_list(entry.definitions),
                        unordered_list(entry.examples),
                        unordered_list(entry.translations),
                        created,
                    ]
                )
            )
            continue
        for pos, group in groups.items():
            rows.append(
                format_row(
                    [
                        f"{entry.word} ({pos})",
                        pos,
                        entry.pronunciation,
                        unordered_list(group.definitions),
                        unordered_list(group.examples),
                        unordered_list(group.translations),
                        created,
                    ]
                )
            )
    return rows


def flat_rows(words: Iterable[WordEntry], idioms: Iterable[IdiomEntry]) -> List[str]:
    rows: List[str] = []
    for entry in words:
        rows.append(
            format_row(
                [
                    entry.word,
                    entry.pronunciation,
                    bullet_list(entry.definitions),
                    bullet_list(entry.examples),
                    bullet_list(entry.translations),
                    format_timestamp(entry.created_at),
                    EXPORT_TAG,
                ]
            )
        )
    for idiom in idioms:
        rows.append(
            format_row(
                [
                    idiom.idiom,
                    "",
                    bullet_list(idiom.meaning),
                    bullet_list(idiom.examples),
                    bullet_list(idiom.translations),
                    format_timestamp(idiom.created_at),
                    EXPORT_TAG,
                ]
            )
        )
    return rows


def normalize_layout(layout: Optional[str]) -> str:
    resolved = (layout or GROUPED_LAYOUT).strip().lower()
    if resolved not in VALID_LAYOUTS:
        raise ValidationError('Invalid layout. Must be "grouped" or "flat"')
    return resolved


def build_anki_export(
    store: LexiconStore,
    *,
    now: Optional[datetime] = None,
    layout: Optional[str] = GROUPED_LAYOUT,
) -> AnkiExport:
    """Render entries saved in the last seven days as Anki-importable CSV.

    Storage errors propagate unchanged so callers never see a partial file.
    """

    resolved_layout = normalize_layout(layout)
    cutoff = export_cutoff(now or utc_now(), days=EXPORT_WINDOW_DAYS)

    words = store.list_words_since(cutoff)
    if resolved_layout == FLAT_LAYOUT:
        rows = flat_rows(words, store.list_idioms_since(cutoff))
    else:
        rows = grouped_rows(words)

    logger.info(
        "Exported %s row(s) for Anki",
        len(rows),
        extra={"event": "export.completed", "backend": store.backend_name},
    )
    return AnkiExport(
        content="\n".join(rows),
        filename=EXPORT_FILENAME,
        row_count=len(rows),
        layout=resolved_layout,
    )


__all__ = [
    "AnkiExport",
    "EXPORT_FILENAME",
    "PosGroup",
    "build_anki_export",
    "bullet_list",
    "escape_csv_field",
    "escape_html",
    "flat_rows",
    "format_row",
    "group_tagged_items",
    "group_word",
    "grouped_rows",
    "normalize_layout",
    "unordered_list",
]
