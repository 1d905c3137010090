"""Bulk vocabulary import from a word list file."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..errors import EcholingoError, StorageError
from ..llm_client import LLMClient, create_client_from_settings
from ..prompt_templates import VOCABULARY_MODE
from ..services import lookup
from ..services.lexicon_store import LexiconStore, word_from_payload
from ..services.store_factory import build_lexicon_store
from .context import settings_from_args

logger = log_mgr.get_logger().getChild("cli.batch_import")


@dataclass
class ImportSummary:
    imported: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    cleared: int = 0


def read_word_list(path: Path) -> List[str]:
    """Return the non-blank, trimmed lines of ``path``."""

    with open(path, "r", encoding="utf-8") as handle:
        return [line.strip() for line in handle if line.strip()]


def import_words(
    words: Iterable[str],
    store: LexiconStore,
    *,
    client: LLMClient,
    settings: cfg.EcholingoSettings,
    truncate: bool = False,
) -> ImportSummary:
    """Look up and upsert each word; one failure does not stop the batch."""

    summary = ImportSummary()
    word_list = list(words)
    if truncate:
        summary.cleared = store.clear_words()
        logger.info(
            "Cleared %s saved word(s) before import",
            summary.cleared,
            extra={"event": "import.truncate", "backend": store.backend_name},
        )

    total = len(word_list)
    for index, word in enumerate(word_list, start=1):
        with log_mgr.log_context(mode=VOCABULARY_MODE, word=word, stage="cli.import"):
            logger.info("[%s/%s] Analyzing: %s", index, total, word)
            try:
                result = lookup.lookup_entry(
                    word,
                    VOCABULARY_MODE,
                    client=client,
                    settings=settings,
                    backoff_seconds=cfg.BATCH_BACKOFF_SECONDS,
                )
                entry = word_from_payload(result)
                store.upsert_word(replace(entry, pos=lookup.derive_pos(result) or None))
            except EcholingoError as exc:
                logger.error(
                    "Failed to import %r: %s",
                    word,
                    exc,
                    extra={"event": "import.word.failed"},
                )
                summary.failed.append(word)
                continue
        summary.imported.append(word)
    return summary


def run(
    args: argparse.Namespace,
    *,
    store: Optional[LexiconStore] = None,
    client: Optional[LLMClient] = None,
) -> int:
    settings = settings_from_args(args)
    if client is None and settings.openai_api_key is None:
        logger.error("OPENAI_API_KEY is not set in the environment or configuration")
        return 1

    path = Path(args.word_file).expanduser()
    try:
        words = read_word_list(path)
    except OSError as exc:
        logger.error("Unable to read word list %s: %s", path, exc)
        return 1
    if not words:
        logger.info("No words found in %s", path)
        return 0

    try:
        active_store = store or build_lexicon_store(settings)
    except StorageError as exc:
        logger.error("Unable to open lexicon store: %s", exc)
        return 1
    active_client = client or create_client_from_settings(settings)
    try:
        active_store.ensure_schema()
        logger.info("Importing %s word(s)", len(words))
        summary = import_words(
            words,
            active_store,
            client=active_client,
            settings=settings,
            truncate=args.truncate,
        )
    except StorageError as exc:
        logger.error("Import aborted: %s", exc, extra={"event": "import.aborted"})
        return 1
    finally:
        if client is None:
            active_client.close()
        if store is None:
            active_store.close()

    logger.info(
        "Import finished: %s imported, %s failed",
        len(summary.imported),
        len(summary.failed),
        extra={"event": "import.completed"},
    )
    return 0


__all__ = ["ImportSummary", "import_words", "read_word_list", "run"]
