from __future__ import annotations

import logging
import re

from .document_store import DocumentStore
from .errors import DocumentStoreError
from .tables import INTENT_SPAN_CHARS, LISTING_LIMIT

logger = logging.getLogger("chat_ai.intent")

_LIST_VERBS = r"\b(?:quais|listar|liste|que)\b"
_SPAN = rf".{{0,{INTENT_SPAN_CHARS}}}"

LIST_DOCUMENTS_PATTERNS = [
    re.compile(rf"{_LIST_VERBS}{_SPAN}\bdocumentos\b"),
    re.compile(rf"\bdocumentos\b{_SPAN}\b(?:quais|listar|liste)\b"),
    re.compile(rf"\b(?:base|banco){_SPAN}\bdocumento"),
]

LISTING_HEADER = "Atualmente, tenho acesso aos seguintes documentos na base:"
LISTING_FOOTER = "Se quiser, posso buscar informações específicas em algum deles."
LISTING_EMPTY = "Nenhum documento encontrado."
LISTING_UNAVAILABLE_MESSAGE = "Não consegui listar os documentos agora. Tente novamente em instantes."


def is_list_documents_intent(normalized: str) -> bool:
    """Purpose: Detect a request to list the available documents.
    Inputs/Outputs: Input is the normalized user message; output is True on match.
    Side Effects / State: None; pure function.
    Dependencies: Uses LIST_DOCUMENTS_PATTERNS.
    Failure Modes: Heuristic; false positives only produce a document listing.
    If Removed: "quais documentos voces tem?" goes through ranking and the model.
    Testing Notes: "quais documentos voces tem?" matches; policy questions do not.
    """
    return any(pattern.search(normalized) for pattern in LIST_DOCUMENTS_PATTERNS)


def build_document_listing(store: DocumentStore, limit: int = LISTING_LIMIT) -> str:
    """Purpose: Build the reply listing the most recent documents by filename.
    Inputs/Outputs: Inputs are the document store and a cap; output is the reply text.
    Side Effects / State: Reads from the document store.
    Dependencies: Uses DocumentStore.list_recent_documents.
    Failure Modes: DocumentStoreError is logged and mapped to a retry message.
    If Removed: Listing requests would need a model call.
    Testing Notes: Verify numbering, empty store, and store failure.
    """
    # Number filenames newest first and wrap them in the fixed lead-in.
    try:
        documents = store.list_recent_documents(limit)
    except DocumentStoreError:
        logger.exception("document listing failed")
        return LISTING_UNAVAILABLE_MESSAGE
    lines = [f"{index}. {doc.filename}" for index, doc in enumerate(documents, start=1)]
    listing = "\n".join(lines) or LISTING_EMPTY
    return f"{LISTING_HEADER}\n\n{listing}\n\n{LISTING_FOOTER}"
