from __future__ import annotations

"""Read-only document stores backing retrieval and the document listing."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

import httpx

from .config import Settings
from .errors import DocumentStoreError

logger = logging.getLogger("chat_ai.store")


@dataclass(frozen=True)
class Document:
    """Company document as read from the store."""
    id: str
    filename: str = ""
    content: str = ""
    created_at: Optional[str] = None


class DocumentStore(Protocol):
    def list_documents(self, limit: int) -> List[Document]:
        ...

    def list_recent_documents(self, limit: int) -> List[Document]:
        ...


class JsonDocumentStore:
    """Document store backed by a JSON file of the form {"documents": [...]}."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _load(self) -> List[Document]:
        """Purpose: Read and validate every document from the backing JSON file.
        Inputs/Outputs: Reads self._path; returns documents in file order.
        Side Effects / State: None; the file is read on every call.
        Dependencies: Uses json.loads and Path.read_text.
        Failure Modes: Missing file yields an empty list; unreadable or malformed
            files raise DocumentStoreError.
        If Removed: Retrieval and listing have no documents to work with.
        Testing Notes: Cover missing, malformed, and well-formed files.
        """
        # A missing file means nothing has been loaded yet.
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DocumentStoreError(f"Cannot read documents from {self._path}: {exc}") from exc
        records = data.get("documents", []) if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise DocumentStoreError(f"Unexpected documents payload in {self._path}")
        return [_to_document(record) for record in records if isinstance(record, dict)]

    def list_documents(self, limit: int) -> List[Document]:
        return self._load()[:limit]

    def list_recent_documents(self, limit: int) -> List[Document]:
        documents = sorted(self._load(), key=lambda doc: doc.created_at or "", reverse=True)
        return documents[:limit]


class SupabaseDocumentStore:
    """Document store reading the documents table through the Supabase REST API."""

    def __init__(self, base_url: str, service_key: str, table: str, timeout: float = 60.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._table = table
        self._timeout = timeout

    def list_documents(self, limit: int) -> List[Document]:
        return self._select({"select": "id,filename,content,created_at", "limit": str(limit)})

    def list_recent_documents(self, limit: int) -> List[Document]:
        return self._select(
            {
                "select": "id,filename,created_at",
                "order": "created_at.desc",
                "limit": str(limit),
            }
        )

    def _select(self, params: dict) -> List[Document]:
        """Purpose: Run a PostgREST select against the documents table.
        Inputs/Outputs: Input is the query-string params; output is a list of Documents.
        Side Effects / State: Issues one HTTP GET request.
        Dependencies: Uses httpx with the service-role key headers.
        Failure Modes: Missing configuration, transport errors, error statuses, and
            non-list payloads raise DocumentStoreError.
        If Removed: The Supabase-backed deployment cannot read documents.
        Testing Notes: Patch httpx.Client and assert the params and error mapping.
        """
        if not self._base_url or not self._service_key:
            raise DocumentStoreError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
        endpoint = f"{self._base_url}/rest/v1/{self._table}"
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
        }
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.get(endpoint, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise DocumentStoreError(f"Supabase request failed: {exc}") from exc
        if response.status_code >= 400:
            raise DocumentStoreError(f"Supabase error (HTTP {response.status_code}): {response.text}")
        try:
            records = response.json()
        except ValueError as exc:
            raise DocumentStoreError("Supabase returned a non-JSON payload") from exc
        if not isinstance(records, list):
            raise DocumentStoreError("Supabase returned an unexpected payload")
        return [_to_document(record) for record in records if isinstance(record, dict)]


def create_document_store(settings: Settings) -> DocumentStore:
    """Build the document store selected by DOCUMENT_STORE."""
    if settings.document_store == "supabase":
        return SupabaseDocumentStore(
            settings.supabase_url,
            settings.supabase_service_key,
            settings.documents_table,
            timeout=settings.request_timeout,
        )
    return JsonDocumentStore(settings.documents_path)


def _to_document(record: dict) -> Document:
    created_at = record.get("created_at")
    return Document(
        id=str(record.get("id", "")),
        filename=str(record.get("filename") or ""),
        content=str(record.get("content") or ""),
        created_at=str(created_at) if created_at is not None else None,
    )
