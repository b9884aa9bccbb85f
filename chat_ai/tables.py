from __future__ import annotations

"""Static tables for tokenization, scoring weights, and per-request caps."""

from typing import FrozenSet

STOPWORDS: FrozenSet[str] = frozenset(
    {
        "que",
        "como",
        "para",
        "por",
        "com",
        "sem",
        "sob",
        "sobre",
        "qual",
        "onde",
        "quando",
        "fale",
        "me",
        "do",
        "da",
        "de",
        "em",
        "no",
        "na",
        "os",
        "as",
        "uma",
        "um",
        "quais",
        "você",
        "voce",
        "sua",
        "seu",
        "minha",
        "meu",
        "tem",
        "há",
        "ha",
    }
)

MIN_TOKEN_LENGTH = 3

# Boosts per query token.
CONTENT_EXACT_WEIGHT = 10
CONTENT_SUBSTRING_BOOST = 5
FILENAME_EXACT_WEIGHT = 30
FILENAME_SUBSTRING_BOOST = 10

# Caps.
RETRIEVAL_LIMIT = 100
TOP_K = 5
MAX_DOCUMENT_CHARS = 3000
HISTORY_WINDOW = 10
MAX_EMOJIS = 20
LISTING_LIMIT = 50
INTENT_SPAN_CHARS = 40
