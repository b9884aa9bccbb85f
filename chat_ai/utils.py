import logging
import re
import unicodedata
from typing import List, Optional

import regex

from .tables import MAX_EMOJIS, MIN_TOKEN_LENGTH, STOPWORDS

logger = logging.getLogger("chat_ai.text")

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")

_FALLBACK_EMOJI_RANGES = r"[\u231A-\u2BFF\u3030\u303D\u3297\u3299\U0001F000-\U0001FAFF]"


def normalize_text(text: Optional[str]) -> str:
    """Purpose: Normalize free-form text for accent-insensitive matching.
    Inputs/Outputs: Input is a raw string (or None); output is the lowercased string
        with combining diacritical marks removed.
    Side Effects / State: None; pure function.
    Dependencies: Uses unicodedata; called by tokenization, ranking, and intent checks.
    Failure Modes: Returns an empty string when input is falsy; never raises.
    If Removed: "Férias" and "ferias" stop matching and retrieval quality collapses.
    Testing Notes: Normalizing twice must equal normalizing once.
    """
    # Lowercase, decompose, then drop combining marks.
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def tokenize(text: Optional[str]) -> List[str]:
    """Purpose: Split text into significant search tokens.
    Inputs/Outputs: Input is a raw string; output is an ordered token list that keeps
        duplicates.
    Side Effects / State: None; pure function.
    Dependencies: Uses normalize_text and the STOPWORDS table.
    Failure Modes: Empty or stop-word-only input yields an empty list.
    If Removed: Query scoring has nothing to match against.
    Testing Notes: Tokens shorter than three characters and stop words never appear.
    """
    # Split on non-alphanumerics and drop short tokens and stop words.
    return [
        token
        for token in _TOKEN_SPLIT_RE.split(normalize_text(text))
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS
    ]


def _compile_emoji_pattern() -> "regex.Pattern":
    try:
        return regex.compile(r"\p{Extended_Pictographic}")
    except regex.error:
        logger.warning("Extended_Pictographic unsupported; using code point ranges")
        return regex.compile(_FALLBACK_EMOJI_RANGES)


_EMOJI_RE = _compile_emoji_pattern()


def extract_emojis(text: Optional[str], limit: int = MAX_EMOJIS) -> List[str]:
    """Purpose: Collect the distinct pictographic symbols used in a text.
    Inputs/Outputs: Input is a raw string and a cap; output is a first-seen-order list
        of unique symbols, at most `limit` long.
    Side Effects / State: None; pure function.
    Dependencies: Uses the module-level emoji pattern compiled with `regex`.
    Failure Modes: Empty input returns an empty list.
    If Removed: The composer can no longer steer the model away from repeated emojis.
    Testing Notes: Repeated emojis collapse to one entry; order follows first use.
    """
    if not text:
        return []
    unique = dict.fromkeys(_EMOJI_RE.findall(text))
    return list(unique)[:limit]
