"""Pydantic schemas for the echolingo web API."""

from __future__ import annotations

from .lexicon import (
    DeleteSavedResponse,
    IdiomPayload,
    LookupRequest,
    PartOfSpeechPayload,
    SaveRequest,
    SaveResponse,
    SavedListData,
    SavedListResponse,
    SavedStatusResponse,
    WordPayload,
)

__all__ = [
    "DeleteSavedResponse",
    "IdiomPayload",
    "LookupRequest",
    "PartOfSpeechPayload",
    "SaveRequest",
    "SaveResponse",
    "SavedListData",
    "SavedListResponse",
    "SavedStatusResponse",
    "WordPayload",
]
