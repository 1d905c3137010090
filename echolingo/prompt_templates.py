"""Prompt templates used for communicating with the LLM."""

from __future__ import annotations

from typing import Dict, List, Optional

from echolingo import config_manager as cfg

VOCABULARY_MODE = "vocabulary"
IDIOM_MODE = "idiom"
VALID_MODES = (VOCABULARY_MODE, IDIOM_MODE)

PARTS_OF_SPEECH = (
    "noun",
    "verb",
    "adjective",
    "adverb",
    "pronoun",
    "preposition",
    "conjunction",
    "interjection",
    "determiner",
)

VOCABULARY_SYSTEM_PROMPT = (
    "You are an English-Persian dictionary and language teacher. Always respond with valid JSON. "
    "Provide multiple entries when the word has more than one common part of speech. "
    "Ensure definitions/examples match each entry's part of speech and also include "
    "aggregated arrays across entries."
)

IDIOM_SYSTEM_PROMPT = (
    "You are an English-Persian idiom and phrase teacher. Always respond with valid JSON. "
    "Provide accurate translations and educational content. Include multiple meanings, "
    "examples, and translations when the idiom has different uses."
)


def build_vocabulary_prompt(word: str) -> str:
    """Return the user prompt requesting a multi-part-of-speech word analysis."""

    pos_choices = " | ".join(PARTS_OF_SPEECH)
    return "\n".join(
        [
            f'Analyze the English word "{word.strip()}" and provide detailed information, '
            "including multiple parts of speech if relevant.",
            "",
            "Return a JSON object with this exact structure:",
            "{",
            '  "word": "the word exactly as provided",',
            '  "pronunciation": "phonetic pronunciation using IPA notation with slashes (e.g., /ˈwɜːrd/)",',
            '  "entries": [',
            "    {",
            f'      "partOfSpeech": "one of: {pos_choices}",',
            '      "definitions": ["definition 1 (for this partOfSpeech)", "definition 2 (if significantly different)"],',
            '      "examples": ["example sentence 1 using the word as this partOfSpeech", "example sentence 2"],',
            '      "persianTranslations": ["Persian translation 1", "Persian translation 2"]',
            "    }",
            "  ],",
            '  "definitions": ["...merged unique definitions across entries..."],',
            '  "examples": ["...merged unique examples across entries..."],',
            '  "persianTranslations": ["...merged unique translations across entries..."]',
            "}",
            "",
            "Guidelines:",
            '- If the word commonly functions as multiple parts of speech (e.g., "run" as noun and verb), '
            "include separate entries for each (max 2-3)",
            "- Keep examples natural (CEFR B1-B2) and make sure they match the respective partOfSpeech",
            "- The aggregated arrays must be present and deduplicated across all entries",
            "- Use clear, educational language",
        ]
    )


def build_idiom_prompt(idiom: str) -> str:
    """Return the user prompt requesting an idiom analysis."""

    return "\n".join(
        [
            f'Analyze the English idiom or phrase "{idiom.strip()}" and provide detailed information.',
            "",
            "Return a JSON object with this exact structure:",
            "{",
            '  "idiom": "the idiom or phrase exactly as provided",',
            '  "meaning": ["meaning 1 - most common meaning", "meaning 2 - if a significantly different meaning exists"],',
            '  "examples": ["example sentence 1 using the idiom in context 1", "example sentence 2 using the idiom in context 2"],',
            '  "persianTranslations": ["Persian translation 1", "Persian translation 2"]',
            "}",
            "",
            "Guidelines:",
            "- Include 1-2 meanings if the idiom has multiple important meanings",
            "- Provide 2-3 example sentences showing different uses/contexts",
            "- Include 1-3 Persian/Farsi translations that cover the different meanings",
            "- Use clear, educational language and keep each meaning concise but complete",
        ]
    )


def system_prompt_for(mode: str) -> str:
    return IDIOM_SYSTEM_PROMPT if mode == IDIOM_MODE else VOCABULARY_SYSTEM_PROMPT


def make_lookup_payload(
    text: str,
    mode: str,
    *,
    model: Optional[str] = None,
    temperature: float = cfg.DEFAULT_TEMPERATURE,
    max_tokens: int = cfg.DEFAULT_MAX_TOKENS,
) -> Dict[str, object]:
    """Build a chat completion payload for ``text`` in the given lookup ``mode``."""

    user_prompt = build_idiom_prompt(text) if mode == IDIOM_MODE else build_vocabulary_prompt(text)
    messages: List[Dict[str, str]] = [
        {"role": "system", "content": system_prompt_for(mode)},
        {"role": "user", "content": user_prompt},
    ]
    return {
        "model": model or cfg.DEFAULT_MODEL,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": {"type": "json_object"},
    }


__all__ = [
    "IDIOM_MODE",
    "PARTS_OF_SPEECH",
    "VALID_MODES",
    "VOCABULARY_MODE",
    "build_idiom_prompt",
    "build_vocabulary_prompt",
    "make_lookup_payload",
    "system_prompt_for",
]
