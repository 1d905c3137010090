"""Saved word and idiom models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base


class WordModel(Base):
    __tablename__ = "words"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    pronunciation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # JSON-encoded string lists.
    definitions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    examples: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    translations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pos: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # JSON-encoded list of part-of-speech records.
    entries: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mode: Mapped[str] = mapped_column(String(20), nullable=False, default="vocabulary")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("idx_words_created", "created_at"),)


class IdiomModel(Base):
    __tablename__ = "idioms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idiom: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    meaning: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    examples: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    translations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mode: Mapped[str] = mapped_column(String(20), nullable=False, default="idiom")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("idx_idioms_created", "created_at"),)
