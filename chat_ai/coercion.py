from __future__ import annotations

"""Coercion of generation backend reply content into plain text."""

import enum
import json
import logging
from typing import Any, Mapping, Optional

logger = logging.getLogger("chat_ai.coercion")

FALLBACK_REPLY = (
    "Não encontrei informações suficientes para responder com precisão agora. "
    "Tente reformular a pergunta ou ser mais específico."
)


class ContentShape(enum.Enum):
    EMPTY = "empty"
    PLAIN_TEXT = "plain_text"
    PART_LIST = "part_list"
    UNKNOWN = "unknown"


def classify_content(content: Any) -> ContentShape:
    """Resolve which shape a reply's content field has."""
    if not content:
        return ContentShape.EMPTY
    if isinstance(content, str):
        return ContentShape.PLAIN_TEXT
    if isinstance(content, (list, tuple)):
        return ContentShape.PART_LIST
    return ContentShape.UNKNOWN


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, Mapping):
        value = part.get("text")
        if value is None:
            value = part.get("content")
    else:
        value = getattr(part, "text", None)
        if value is None:
            value = getattr(part, "content", None)
    return "" if value is None else str(value)


def coerce_to_text(content: Any) -> str:
    """Purpose: Turn reply content of any supported shape into text.
    Inputs/Outputs: Input is the raw content field; output is a string, possibly empty.
    Side Effects / State: None.
    Dependencies: Uses classify_content and json for unknown shapes.
    Failure Modes: Any conversion failure yields an empty string instead of raising.
    If Removed: List-shaped replies reach the caller as Python reprs.
    Testing Notes: Part lists concatenate text-like fields; missing fields count as "".
    """
    shape = classify_content(content)
    if shape is ContentShape.EMPTY:
        return ""
    if shape is ContentShape.PLAIN_TEXT:
        return content
    if shape is ContentShape.PART_LIST:
        try:
            return "".join(_part_text(part) for part in content).strip()
        except (TypeError, ValueError, AttributeError):
            return ""
    # Last resort: serialize whatever came back.
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return ""


def extract_reply_text(message: Optional[Mapping[str, Any]], finish_reason: Optional[str] = None) -> str:
    """Purpose: Produce the final, never-empty answer from a reply message payload.
    Inputs/Outputs: Input is the backend message mapping (with a `content` field) and
        the finish reason; output is trimmed text or FALLBACK_REPLY.
    Side Effects / State: Logs a warning when the backend returned no usable text.
    Dependencies: Uses coerce_to_text.
    Failure Modes: None; malformed payloads fall back to FALLBACK_REPLY.
    If Removed: Empty model output reaches users as a blank answer.
    Testing Notes: {"content": None} returns FALLBACK_REPLY.
    """
    payload = message if isinstance(message, Mapping) else {}
    text = coerce_to_text(payload.get("content")).strip()
    if not text:
        logger.warning(
            "empty reply from backend: %s",
            json.dumps({"finish_reason": finish_reason, "messageKeys": list(payload.keys())}, default=str)[:500],
        )
        return FALLBACK_REPLY
    return text
