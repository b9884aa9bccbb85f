from chat_ai.composer import PromptTemplates, compose_messages, last_assistant_emojis, recent_history
from chat_ai.config import BASE_DIR
from chat_ai.tables import HISTORY_WINDOW


def _turns(count: int, role: str = "user"):
    return [{"role": role, "content": f"mensagem {index}"} for index in range(count)]


def test_order_without_emojis() -> None:
    history = [
        {"role": "user", "content": "Olá"},
        {"role": "assistant", "content": "Olá! Como posso ajudar?"},
    ]
    messages = compose_messages("SYSTEM", history, "E as férias?")
    assert [message["role"] for message in messages] == ["system", "user", "assistant", "user"]
    assert messages[0]["content"] == "SYSTEM"
    assert messages[-1] == {"role": "user", "content": "E as férias?"}


def test_history_window_keeps_latest_turns() -> None:
    history = _turns(15)
    messages = compose_messages("SYSTEM", history, "agora")
    assert len(messages) == 1 + HISTORY_WINDOW + 1
    assert messages[1]["content"] == "mensagem 5"
    assert messages[-2]["content"] == "mensagem 14"


def test_emoji_directive_between_history_and_user_turn() -> None:
    history = [
        {"role": "user", "content": "Oi"},
        {"role": "assistant", "content": "Claro! 😊 Veja o documento 📄 😊"},
    ]
    messages = compose_messages("SYSTEM", history, "Obrigado")
    assert [message["role"] for message in messages] == ["system", "user", "assistant", "system", "user"]
    assert "😊 📄" in messages[3]["content"]
    assert messages[3]["content"].startswith("Não use estes emojis nesta resposta:")


def test_only_latest_assistant_turn_counts() -> None:
    history = [
        {"role": "assistant", "content": "Pronto 👍"},
        {"role": "user", "content": "E agora?"},
        {"role": "assistant", "content": "Sem emojis desta vez."},
    ]
    messages = compose_messages("SYSTEM", history, "Ok")
    assert len(messages) == 5
    assert all("👍" not in message["content"] for message in messages if message["role"] == "system")


def test_assistant_outside_window_is_ignored() -> None:
    history = [{"role": "assistant", "content": "Pronto 👍"}] + _turns(HISTORY_WINDOW)
    messages = compose_messages("SYSTEM", history, "Ok")
    assert len(messages) == 1 + HISTORY_WINDOW + 1
    assert all(message["role"] != "system" for message in messages[1:])


def test_message_count_bound() -> None:
    history = _turns(19) + [{"role": "assistant", "content": "Feito ✅"}]
    messages = compose_messages("SYSTEM", history, "Valeu")
    assert len(messages) == 13


def test_history_is_not_mutated() -> None:
    history = [{"role": "assistant", "content": "Oi 👋"}]
    snapshot = [dict(turn) for turn in history]
    compose_messages("SYSTEM", history, "Oi")
    assert history == snapshot


def test_helpers_handle_missing_content() -> None:
    history = [{"role": "assistant", "content": None}]
    assert recent_history(history) == [{"role": "assistant", "content": ""}]
    assert last_assistant_emojis(history) == []


def test_prompt_templates_from_package() -> None:
    templates = PromptTemplates(BASE_DIR / "prompts")
    rendered = templates.render_system("CONTEXTO-TESTE")
    assert rendered.startswith("Você é o MAX")
    assert "CONTEXTO-TESTE" in rendered
    assert "{context}" not in rendered
    assert "Substitua $ por S" in rendered
    assert templates.avoid_emojis.startswith("Não use estes emojis nesta resposta: {emojis}.")
