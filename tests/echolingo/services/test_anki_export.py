"""Tests for the Anki CSV export formatter."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone

import pytest

from echolingo.errors import StorageError, ValidationError
from echolingo.services import export
from echolingo.services.lexicon_store import (
    IdiomEntry,
    MemoryLexiconStore,
    PartOfSpeechEntry,
    WordEntry,
)
from tests.helpers.lexicon_fakes import FakeClock

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _read_rows(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content)))


@pytest.fixture
def store() -> MemoryLexiconStore:
    return MemoryLexiconStore(clock=FakeClock(start=NOW - timedelta(hours=1)))


def test_quotes_are_doubled_and_read_back_by_csv(store) -> None:
    store.save_word(WordEntry(word="say", definitions=['He said "hi"']))

    result = export.build_anki_export(store, now=NOW, layout="flat")

    assert '""hi""' in result.content
    [row] = _read_rows(result.content)
    assert row[0] == "say"
    assert row[2] == '• He said "hi"'


def test_every_field_is_quote_wrapped_and_newlines_become_br() -> None:
    line = export.format_row(["a", "line one\nline two", ""])

    assert line == '"a","line one<br>line two",""'


def test_grouped_layout_splits_tagged_items_per_part_of_speech(store) -> None:
    store.save_word(
        WordEntry(
            word="run",
            pronunciation="/rʌn/",
            definitions=["[verb] to move fast", "[noun] a jog", "general sense"],
            examples=["[Verb] I run daily."],
            translations=["[noun] دو"],
        )
    )

    result = export.build_anki_export(store, now=NOW)

    rows = _read_rows(result.content)
    assert [row[0] for row in rows] == ["run (verb)", "run (noun)"]
    verb, noun = rows
    assert verb[1] == "verb"
    assert verb[2] == "/rʌn/"
    assert verb[3] == "<ul><li>to move fast</li><li>general sense</li></ul>"
    assert verb[4] == "<ul><li>I run daily.</li></ul>"
    assert verb[5] == ""
    assert noun[3] == "<ul><li>a jog</li><li>general sense</li></ul>"
    assert noun[5] == "<ul><li>دو</li></ul>"
    assert verb[6] == "2024-05-10 11:00:00"


def test_untagged_word_exports_as_single_row(store) -> None:
    store.save_word(
        WordEntry(word="cat", pos=None, definitions=["a <small> feline & pet"], examples=[])
    )

    [row] = _read_rows(export.build_anki_export(store, now=NOW).content)

    assert row[0] == "cat"
    assert row[3] == "<ul><li>a &lt;small&gt; feline &amp; pet</li></ul>"
    assert row[4] == ""


def test_structured_entries_take_precedence_over_prefixes(store) -> None:
    store.save_word(
        WordEntry(
            word="light",
            definitions=["[noun] ignored prefix text"],
            entries=[
                PartOfSpeechEntry("adjective", ["not heavy"], ["A light bag."], ["سبک"]),
                PartOfSpeechEntry("noun", ["brightness"], [], ["نور"]),
            ],
        )
    )

    rows = _read_rows(export.build_anki_export(store, now=NOW).content)

    assert [row[0] for row in rows] == ["light (adjective)", "light (noun)"]
    assert rows[1][3] == "<ul><li>brightness</li></ul>"


def test_only_the_last_seven_days_are_exported() -> None:
    clock = FakeClock(start=NOW - timedelta(days=8))
    store = MemoryLexiconStore(clock=clock)
    store.save_word(WordEntry(word="stale"))
    clock.current = NOW - timedelta(days=6)
    store.save_word(WordEntry(word="recent"))

    rows = _read_rows(export.build_anki_export(store, now=NOW).content)

    assert [row[0] for row in rows] == ["recent"]


def test_flat_layout_includes_idioms_and_tag(store) -> None:
    store.save_word(WordEntry(word="cat", definitions=["a feline", "a jazz fan"]))
    store.save_idiom(IdiomEntry(idiom="break the ice", meaning=["ease tension"]))

    result = export.build_anki_export(store, now=NOW, layout="flat")

    rows = _read_rows(result.content)
    assert [row[0] for row in rows] == ["cat", "break the ice"]
    assert rows[0][2] == "• a feline<br>• a jazz fan"
    assert rows[1][2] == "• ease tension"
    assert {row[6] for row in rows} == {"echolingo"}
    assert result.layout == "flat"
    assert result.row_count == 2


def test_empty_store_exports_empty_content(store) -> None:
    result = export.build_anki_export(store, now=NOW)

    assert result.content == ""
    assert result.row_count == 0
    assert result.filename == "echolingo_anki_7_days.csv"


def test_unknown_layout_is_rejected(store) -> None:
    with pytest.raises(ValidationError):
        export.build_anki_export(store, now=NOW, layout="pivot")


def test_store_failures_propagate(store, monkeypatch) -> None:
    def _boom(cutoff):
        raise StorageError("database unavailable")

    monkeypatch.setattr(store, "list_words_since", _boom)

    with pytest.raises(StorageError):
        export.build_anki_export(store, now=NOW)


def test_group_tagged_items_ignores_general_only_lists() -> None:
    assert export.group_tagged_items(["plain"], ["[unknown] tag"], []) == {}
