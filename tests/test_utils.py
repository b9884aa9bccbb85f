import pytest
import regex

from chat_ai import utils
from chat_ai.tables import MAX_EMOJIS, STOPWORDS
from chat_ai.utils import _FALLBACK_EMOJI_RANGES, extract_emojis, normalize_text, tokenize


class TestNormalizeText:
    def test_lowercases_and_strips_accents(self) -> None:
        assert normalize_text("Política de FÉRIAS") == "politica de ferias"
        assert normalize_text("Ação e Coração") == "acao e coracao"

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent_input_is_empty(self, value) -> None:
        assert normalize_text(value) == ""

    @pytest.mark.parametrize(
        "value",
        ["Você já tirou férias?", "İstanbul", "ÅNGSTRÖM", "straße", "São Paulo 2024!", "😊 Olá"],
    )
    def test_idempotent(self, value: str) -> None:
        once = normalize_text(value)
        assert normalize_text(once) == once


class TestTokenize:
    def test_drops_short_tokens_and_stopwords(self) -> None:
        assert tokenize("Quais são as regras de férias?") == ["sao", "regras", "ferias"]

    def test_empty_string(self) -> None:
        assert tokenize("") == []
        assert tokenize(None) == []

    def test_keeps_duplicates(self) -> None:
        assert tokenize("férias, FÉRIAS e ferias") == ["ferias", "ferias", "ferias"]

    def test_splits_on_non_alphanumerics(self) -> None:
        assert tokenize("manual_ti/2024-segurança") == ["manual", "2024", "seguranca"]

    def test_never_returns_short_or_stop_words(self) -> None:
        text = "Como você pode me falar sobre o que há na política de uso do VPN em casa?"
        tokens = tokenize(text)
        assert tokens
        for token in tokens:
            assert len(token) >= 3
            assert token not in STOPWORDS

    def test_deterministic(self) -> None:
        text = "Procedimento de reembolso de despesas de viagem"
        assert tokenize(text) == tokenize(text)


class TestExtractEmojis:
    def test_deduplicates_in_first_seen_order(self) -> None:
        assert extract_emojis("Oi! 😊👋 Tudo bem? 😊") == ["😊", "👋"]

    @pytest.mark.parametrize("value", [None, "", "Sem emojis aqui."])
    def test_no_emojis(self, value) -> None:
        assert extract_emojis(value) == []

    def test_caps_at_limit(self) -> None:
        text = "".join(chr(0x1F600 + offset) for offset in range(25))
        emojis = extract_emojis(text)
        assert len(emojis) == MAX_EMOJIS
        assert emojis[0] == chr(0x1F600)

    def test_property_pattern_unsupported_uses_ranges(self, monkeypatch) -> None:
        real_compile = regex.compile

        def fake_compile(pattern, *args, **kwargs):
            if pattern == r"\p{Extended_Pictographic}":
                raise regex.error("unknown property")
            return real_compile(pattern, *args, **kwargs)

        monkeypatch.setattr(regex, "compile", fake_compile)
        pattern = utils._compile_emoji_pattern()
        assert pattern.pattern == _FALLBACK_EMOJI_RANGES

        monkeypatch.setattr(utils, "_EMOJI_RE", pattern)
        assert extract_emojis("Oi! 😊👋 Tudo bem? 😊") == ["😊", "👋"]

    def test_fallback_ranges_cover_common_emojis(self) -> None:
        pattern = regex.compile(_FALLBACK_EMOJI_RANGES)
        assert pattern.findall("Oi! 😊👋 ⌚ ok") == ["😊", "👋", "⌚"]
