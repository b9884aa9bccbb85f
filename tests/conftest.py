from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

import pytest

from chat_ai.config import BASE_DIR, Settings
from chat_ai.document_store import Document
from chat_ai.generation_client import GenerationReply


class FakeStore:
    """In-memory document store recording every call."""

    def __init__(self, documents: Optional[List[Document]] = None, error: Optional[Exception] = None) -> None:
        self.documents = list(documents or [])
        self.error = error
        self.calls: list = []

    def list_documents(self, limit: int) -> List[Document]:
        self.calls.append(("list_documents", limit))
        if self.error:
            raise self.error
        return self.documents[:limit]

    def list_recent_documents(self, limit: int) -> List[Document]:
        self.calls.append(("list_recent_documents", limit))
        if self.error:
            raise self.error
        return sorted(self.documents, key=lambda doc: doc.created_at or "", reverse=True)[:limit]


class FakeClient:
    """Generation client returning a canned reply."""

    def __init__(self, reply: Optional[GenerationReply] = None, error: Optional[Exception] = None) -> None:
        self.reply = reply or GenerationReply(message={"role": "assistant", "content": "Resposta"}, total_tokens=42)
        self.error = error
        self.calls: list = []

    def chat(self, messages):
        self.calls.append([dict(message) for message in messages])
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        generation_provider="openai",
        openai_api_key="test-key",
        openai_base_url="https://api.test/v1",
        openai_model="gpt-4o",
        gemini_api_key="",
        gemini_model="gemini-2.5-flash",
        max_output_tokens=500,
        temperature=0.65,
        request_timeout=5.0,
        document_store="json",
        documents_path=tmp_path / "company_documents.json",
        supabase_url="",
        supabase_service_key="",
        documents_table="company_documents",
        prompts_dir=BASE_DIR / "prompts",
    )


@pytest.fixture
def make_settings(settings):
    def _make(**overrides) -> Settings:
        return replace(settings, **overrides)

    return _make


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def vacation_doc() -> Document:
    return Document(
        id="1",
        filename="Política de Férias",
        content="Férias coletivas. Pedido de férias pelo portal. Saldo de férias no RH.",
        created_at="2024-03-01T12:00:00+00:00",
    )
