from __future__ import annotations

import pytest

from echolingo.cli import batch_import
from echolingo.cli.args import parse_cli_args
from echolingo.services.lexicon_store import MemoryLexiconStore, WordEntry
from tests.helpers.lexicon_fakes import (
    RUN_PAYLOAD,
    FakeClock,
    FakeLLMClient,
    failed_response,
    ok_response,
)


@pytest.fixture
def store() -> MemoryLexiconStore:
    return MemoryLexiconStore(clock=FakeClock())


def _walk_payload():
    return {
        "word": "walk",
        "pronunciation": "/wɔːk/",
        "entries": [
            {
                "partOfSpeech": "verb",
                "definitions": ["to move on foot"],
                "examples": [],
                "persianTranslations": ["راه رفتن"],
            }
        ],
    }


def test_read_word_list_skips_blank_lines(tmp_path) -> None:
    word_file = tmp_path / "words.txt"
    word_file.write_text("run\n\n  walk  \n   \n", encoding="utf-8")

    assert batch_import.read_word_list(word_file) == ["run", "walk"]


def test_import_words_upserts_and_continues_after_failure(store, settings) -> None:
    client = FakeLLMClient(
        [ok_response(RUN_PAYLOAD), failed_response("HTTP 500"), ok_response(_walk_payload())]
    )

    summary = batch_import.import_words(
        ["run", "glorp", "walk"], store, client=client, settings=settings
    )

    assert summary.imported == ["run", "walk"]
    assert summary.failed == ["glorp"]
    saved = {entry.word: entry for entry in store.list_words()}
    assert set(saved) == {"run", "walk"}
    assert saved["run"].pos == "verb | noun"
    assert saved["run"].definitions[0] == "[verb] to move quickly on foot"
    assert [e.part_of_speech for e in saved["run"].entries] == ["verb", "noun"]
    assert len(client.calls) == 3


def test_import_words_replaces_existing_entry(store, settings) -> None:
    store.save_word(WordEntry(word="run", definitions=["stale"]))
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    batch_import.import_words(["RUN"], store, client=client, settings=settings)

    [entry] = store.list_words()
    assert entry.word == "run"
    assert "stale" not in entry.definitions


def test_import_words_truncates_first(store, settings) -> None:
    store.save_word(WordEntry(word="old"))
    store.save_word(WordEntry(word="older"))
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    summary = batch_import.import_words(
        ["run"], store, client=client, settings=settings, truncate=True
    )

    assert summary.cleared == 2
    assert [entry.word for entry in store.list_words()] == ["run"]


def test_run_requires_api_key(tmp_path) -> None:
    word_file = tmp_path / "words.txt"
    word_file.write_text("run\n", encoding="utf-8")
    args = parse_cli_args(["import", str(word_file), "--storage-backend", "memory"])

    assert batch_import.run(args) == 1


def test_run_reports_unreadable_word_file(tmp_path, store) -> None:
    args = parse_cli_args(["import", str(tmp_path / "missing.txt")])

    assert batch_import.run(args, store=store, client=FakeLLMClient()) == 1


def test_run_imports_with_injected_dependencies(tmp_path, store) -> None:
    word_file = tmp_path / "words.txt"
    word_file.write_text("run\n", encoding="utf-8")
    args = parse_cli_args(["import", str(word_file), "--truncate"])
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    assert batch_import.run(args, store=store, client=client) == 0
    assert store.word_exists("run")
    assert client.closed is False


def test_failed_word_is_logged_with_its_context(store, settings, captured_records) -> None:
    client = FakeLLMClient([failed_response("HTTP 500")])

    batch_import.import_words(["glorp"], store, client=client, settings=settings)

    [record] = captured_records.events("import.word.failed")
    assert (record.word, record.mode, record.stage) == ("glorp", "vocabulary", "cli.import")


def test_run_returns_error_when_store_cannot_be_opened(tmp_path) -> None:
    word_file = tmp_path / "words.txt"
    word_file.write_text("run\n", encoding="utf-8")
    args = parse_cli_args(["import", str(word_file), "--storage-backend", "remote"])

    assert batch_import.run(args, client=FakeLLMClient()) == 1
