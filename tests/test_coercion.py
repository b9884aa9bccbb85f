from types import SimpleNamespace

import pytest

from chat_ai.coercion import FALLBACK_REPLY, ContentShape, classify_content, coerce_to_text, extract_reply_text


@pytest.mark.parametrize(
    "content, shape",
    [
        (None, ContentShape.EMPTY),
        ("", ContentShape.EMPTY),
        ("texto", ContentShape.PLAIN_TEXT),
        ([{"text": "a"}], ContentShape.PART_LIST),
        ({"text": "a"}, ContentShape.UNKNOWN),
        (42, ContentShape.UNKNOWN),
    ],
)
def test_classify_content(content, shape) -> None:
    assert classify_content(content) is shape


def test_part_list_concatenates_text() -> None:
    assert extract_reply_text({"content": [{"text": "A"}, {"text": "B"}]}) == "AB"


def test_missing_content_uses_fallback() -> None:
    assert extract_reply_text({"content": None}) == FALLBACK_REPLY
    assert extract_reply_text({}) == FALLBACK_REPLY
    assert extract_reply_text(None) == FALLBACK_REPLY


def test_whitespace_only_uses_fallback() -> None:
    assert extract_reply_text({"content": "   \n"}) == FALLBACK_REPLY


def test_mixed_parts() -> None:
    parts = ["Olá ", {"content": "mundo"}, {"type": "image"}, SimpleNamespace(text="!")]
    assert coerce_to_text(parts) == "Olá mundo!"


def test_plain_text_passthrough_then_trimmed() -> None:
    assert coerce_to_text("  resposta  ") == "  resposta  "
    assert extract_reply_text({"content": "  resposta  "}) == "resposta"


def test_unknown_shape_is_serialized() -> None:
    assert coerce_to_text({"a": 1}) == '{"a": 1}'


def test_unserializable_shape_yields_empty() -> None:
    assert coerce_to_text(object()) == ""
    assert extract_reply_text({"content": object()}) == FALLBACK_REPLY
