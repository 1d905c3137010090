"""Routes for saving, listing and deleting lexicon entries."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ... import logging_manager as log_mgr
from ...errors import ValidationError
from ...prompt_templates import IDIOM_MODE, VALID_MODES, VOCABULARY_MODE
from ...services.lexicon_store import (
    LexiconStore,
    idiom_from_payload,
    idiom_to_payload,
    word_from_payload,
    word_to_payload,
)
from ..dependencies import get_lexicon_store
from ..schemas import (
    DeleteSavedResponse,
    IdiomPayload,
    SaveRequest,
    SaveResponse,
    SavedListData,
    SavedListResponse,
    SavedStatusResponse,
    WordPayload,
)

logger = log_mgr.get_logger().getChild("webapi.saved_words")

router = APIRouter(prefix="/api", tags=["saved-words"])

_REQUIRED_TEXT_FIELDS = {
    VOCABULARY_MODE: ("word", "pronunciation"),
    IDIOM_MODE: ("idiom",),
}
# Lists may be empty but must be present.
_REQUIRED_LIST_FIELDS = {
    VOCABULARY_MODE: ("definitions", "examples", "persianTranslations"),
    IDIOM_MODE: ("meaning", "examples", "persianTranslations"),
}
_LIST_TYPES = ("words", "idioms", "all")


def _require_mode(mode: Optional[str]) -> str:
    if mode not in VALID_MODES:
        raise ValidationError('Invalid mode. Must be "vocabulary" or "idiom"')
    return mode


def _require_fields(mode: str, data: Dict[str, Any]) -> None:
    missing_text = any(not data.get(field) for field in _REQUIRED_TEXT_FIELDS[mode])
    missing_list = any(data.get(field) is None for field in _REQUIRED_LIST_FIELDS[mode])
    if missing_text or missing_list:
        raise ValidationError(f"Missing required {mode} fields")


@router.post("/save-word", response_model=SaveResponse)
def save_entry(
    payload: SaveRequest,
    store: LexiconStore = Depends(get_lexicon_store),
) -> SaveResponse:
    if not payload.mode or not payload.data:
        raise ValidationError("Missing required fields: mode and data")
    mode = _require_mode(payload.mode)
    _require_fields(mode, payload.data)
    text = payload.data.get("word") or payload.data.get("idiom")

    with log_mgr.log_context(mode=mode, word=text, stage="api.save"):
        if mode == VOCABULARY_MODE:
            saved_word = store.save_word(word_from_payload(payload.data))
            data = WordPayload.model_validate(word_to_payload(saved_word)) if saved_word else None
            label = "Word"
        else:
            saved_idiom = store.save_idiom(idiom_from_payload(payload.data))
            data = (
                IdiomPayload.model_validate(idiom_to_payload(saved_idiom)) if saved_idiom else None
            )
            label = "Idiom"

        if data is None:
            return SaveResponse(
                data=None,
                is_already_saved=True,
                message=f"{label} already exists in database",
            )
        logger.info(
            "Saved %s %r",
            mode,
            text,
            extra={"event": "store.saved", "backend": store.backend_name},
        )
    return SaveResponse(data=data, is_already_saved=False, message=f"{label} saved successfully")


@router.get("/save-word", response_model=SavedStatusResponse)
def saved_status(
    word: Optional[str] = Query(default=None),
    mode: Optional[str] = Query(default=None),
    store: LexiconStore = Depends(get_lexicon_store),
) -> SavedStatusResponse:
    if not word or not mode:
        raise ValidationError("Missing required parameters: word and mode")
    resolved = _require_mode(mode)
    exists = store.word_exists(word) if resolved == VOCABULARY_MODE else store.idiom_exists(word)
    return SavedStatusResponse(is_saved=exists, word=word, mode=resolved)


@router.get("/saved-words", response_model=SavedListResponse)
def list_saved(
    type: Optional[str] = Query(default=None),
    store: LexiconStore = Depends(get_lexicon_store),
) -> SavedListResponse:
    list_type = type or "all"
    if list_type not in _LIST_TYPES:
        raise ValidationError('Invalid type parameter. Must be "words", "idioms", or "all"')

    words = []
    idioms = []
    if list_type in ("words", "all"):
        words = [WordPayload.model_validate(word_to_payload(e)) for e in store.list_words()]
    if list_type in ("idioms", "all"):
        idioms = [IdiomPayload.model_validate(idiom_to_payload(e)) for e in store.list_idioms()]

    return SavedListResponse(
        data=SavedListData(
            words=words,
            idioms=idioms,
            total_words=len(words),
            total_idioms=len(idioms),
        )
    )


@router.delete("/saved-words", response_model=DeleteSavedResponse)
def delete_saved(
    word: Optional[str] = Query(default=None),
    mode: Optional[str] = Query(default=None),
    store: LexiconStore = Depends(get_lexicon_store),
) -> DeleteSavedResponse:
    if not word or not mode:
        raise ValidationError("Missing required parameters: word and mode")
    resolved = _require_mode(mode)
    with log_mgr.log_context(mode=resolved, word=word, stage="api.delete"):
        if resolved == VOCABULARY_MODE:
            deleted = store.delete_word(word)
        else:
            deleted = store.delete_idiom(word)
        logger.info(
            "Delete %s %r: %s",
            resolved,
            word,
            "removed" if deleted else "not found",
            extra={"event": "store.deleted", "backend": store.backend_name},
        )
    return DeleteSavedResponse(deleted=deleted, word=word, mode=resolved)


__all__ = ["router"]
