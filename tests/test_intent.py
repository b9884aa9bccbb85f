import pytest

from chat_ai.document_store import Document
from chat_ai.errors import DocumentStoreError
from chat_ai.intent import (
    LISTING_FOOTER,
    LISTING_HEADER,
    LISTING_UNAVAILABLE_MESSAGE,
    build_document_listing,
    is_list_documents_intent,
)
from chat_ai.tables import LISTING_LIMIT
from chat_ai.utils import normalize_text


@pytest.mark.parametrize(
    "message",
    [
        "quais documentos vocês têm?",
        "Liste os documentos disponíveis",
        "Documentos: quais estão carregados?",
        "O que tem na base de documentos?",
        "Quero ver o banco de documentos",
    ],
)
def test_detects_listing_requests(message: str) -> None:
    assert is_list_documents_intent(normalize_text(message)) is True


@pytest.mark.parametrize(
    "message",
    [
        "me explique a política de férias",
        "Qual o saldo do banco de horas?",
        "Como faço para trocar minha senha?",
        "",
    ],
)
def test_ignores_other_questions(message: str) -> None:
    assert is_list_documents_intent(normalize_text(message)) is False


def test_listing_newest_first(make_store) -> None:
    store = make_store(
        [
            Document(id="1", filename="Antigo.pdf", created_at="2023-01-01T00:00:00+00:00"),
            Document(id="2", filename="Recente.pdf", created_at="2024-06-01T00:00:00+00:00"),
        ]
    )
    text = build_document_listing(store)
    assert text == f"{LISTING_HEADER}\n\n1. Recente.pdf\n2. Antigo.pdf\n\n{LISTING_FOOTER}"
    assert store.calls == [("list_recent_documents", LISTING_LIMIT)]


def test_listing_empty_store(make_store) -> None:
    text = build_document_listing(make_store([]))
    assert text == f"{LISTING_HEADER}\n\nNenhum documento encontrado.\n\n{LISTING_FOOTER}"


def test_listing_store_failure(make_store) -> None:
    store = make_store(error=DocumentStoreError("offline"))
    assert build_document_listing(store) == LISTING_UNAVAILABLE_MESSAGE
