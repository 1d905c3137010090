"""Schemas for lookup, saved-entry and export endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

LookupMode = Literal["vocabulary", "idiom"]


class LookupRequest(BaseModel):
    """Request payload for ``POST /api/vocabulary``.

    Both fields are optional at the schema level so missing values produce the
    API's own 400 message instead of a generic validation error.
    """

    word: Optional[str] = None
    mode: Optional[str] = None


class SaveRequest(BaseModel):
    mode: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PartOfSpeechPayload(_CamelModel):
    part_of_speech: str = Field(alias="partOfSpeech")
    definitions: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)
    translations: List[str] = Field(default_factory=list, alias="persianTranslations")


class WordPayload(_CamelModel):
    id: Optional[int] = None
    word: str
    pronunciation: str = ""
    definitions: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)
    translations: List[str] = Field(default_factory=list, alias="persianTranslations")
    pos: Optional[str] = None
    entries: List[PartOfSpeechPayload] = Field(default_factory=list)
    mode: LookupMode = "vocabulary"
    saved_at: Optional[datetime] = Field(default=None, alias="savedAt")


class IdiomPayload(_CamelModel):
    id: Optional[int] = None
    idiom: str
    meaning: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)
    translations: List[str] = Field(default_factory=list, alias="persianTranslations")
    mode: LookupMode = "idiom"
    saved_at: Optional[datetime] = Field(default=None, alias="savedAt")


class SaveResponse(_CamelModel):
    success: bool = True
    data: Optional[Union[WordPayload, IdiomPayload]] = None
    is_already_saved: bool = Field(default=False, alias="isAlreadySaved")
    message: str


class SavedStatusResponse(_CamelModel):
    is_saved: bool = Field(alias="isSaved")
    word: str
    mode: LookupMode


class SavedListData(_CamelModel):
    words: List[WordPayload] = Field(default_factory=list)
    idioms: List[IdiomPayload] = Field(default_factory=list)
    total_words: int = Field(default=0, alias="totalWords")
    total_idioms: int = Field(default=0, alias="totalIdioms")


class SavedListResponse(_CamelModel):
    success: bool = True
    data: SavedListData


class DeleteSavedResponse(_CamelModel):
    success: bool = True
    deleted: bool
    word: str
    mode: LookupMode


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
