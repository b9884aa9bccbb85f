from __future__ import annotations

"""Lexical ranking of company documents and rendering of the prompt context."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence

from .document_store import Document, DocumentStore
from .errors import DocumentStoreError
from .tables import (
    CONTENT_EXACT_WEIGHT,
    CONTENT_SUBSTRING_BOOST,
    FILENAME_EXACT_WEIGHT,
    FILENAME_SUBSTRING_BOOST,
    MAX_DOCUMENT_CHARS,
    RETRIEVAL_LIMIT,
    TOP_K,
)
from .utils import normalize_text, tokenize

logger = logging.getLogger("chat_ai.retrieval")

DOCUMENTS_UNAVAILABLE_MESSAGE = "Erro ao processar documentos da empresa."
NO_DOCUMENTS_LOADED_MESSAGE = (
    "Nenhum documento da empresa foi carregado. "
    "Por favor, peça ao administrador para carregar os documentos oficiais."
)
NO_RELEVANT_DOCUMENTS_TEMPLATE = (
    'Não encontrei informações específicas sobre "{query}" nos documentos carregados. '
    "Os documentos disponíveis são: {filenames}. "
    "Tente reformular sua pergunta ou seja mais específico."
)
TRUNCATION_MARKER = "\n[... documento truncado para otimizar resposta ...]"


@dataclass(frozen=True)
class ScoredDocument:
    """Document paired with its relevance score for one query."""
    document: Document
    score: int


def score_document(
    tokens: Sequence[str], document: Document, patterns: Optional[Dict[str, Pattern[str]]] = None
) -> int:
    """Purpose: Score one document against the query tokens with field-weighted boosts.
    Inputs/Outputs: Inputs are query tokens, a Document, and an optional pattern cache;
        output is a non-negative integer score.
    Side Effects / State: Fills the pattern cache with one word-boundary regex per token.
    Dependencies: Uses normalize_text and the weight constants from tables.
    Failure Modes: None; empty tokens or empty fields score 0.
    If Removed: Ranking has no relevance signal.
    Testing Notes: Exact-word and substring boosts add up for the same occurrence.
    """
    # Exact words count per occurrence; substrings add a flat boost per field.
    if patterns is None:
        patterns = {}
    filename_norm = normalize_text(document.filename)
    content_norm = normalize_text(document.content)
    score = 0
    for token in tokens:
        pattern = patterns.get(token)
        if pattern is None:
            pattern = re.compile(rf"\b{re.escape(token)}\b", re.ASCII)
            patterns[token] = pattern
        score += len(pattern.findall(content_norm)) * CONTENT_EXACT_WEIGHT
        if token in content_norm:
            score += CONTENT_SUBSTRING_BOOST
        score += len(pattern.findall(filename_norm)) * FILENAME_EXACT_WEIGHT
        if token in filename_norm:
            score += FILENAME_SUBSTRING_BOOST
    return score


def rank_documents(query: str, documents: Sequence[Document], top_k: int = TOP_K) -> List[ScoredDocument]:
    """Purpose: Select the documents most relevant to a query.
    Inputs/Outputs: Inputs are the raw query, the candidate documents in store order,
        and top_k; output is at most top_k ScoredDocuments, best first.
    Side Effects / State: Logs query tokens and the selected scores.
    Dependencies: Uses tokenize and score_document.
    Failure Modes: A query without significant tokens returns an empty list.
    If Removed: The prompt context cannot be built.
    Testing Notes: Zero-score documents never appear; equal scores keep store order.
    """
    tokens = tokenize(query)
    logger.info("query tokens=%s", tokens)
    patterns: Dict[str, Pattern[str]] = {}
    scored = [ScoredDocument(document=doc, score=score_document(tokens, doc, patterns)) for doc in documents]
    # sorted() is stable, so ties keep store-retrieval order.
    relevant = sorted((item for item in scored if item.score > 0), key=lambda item: item.score, reverse=True)
    selected = relevant[:top_k]
    logger.info(
        "relevant documents=%s",
        [(item.document.filename, item.score) for item in selected],
    )
    return selected


def truncate_content(content: str, limit: int = MAX_DOCUMENT_CHARS) -> str:
    if len(content) > limit:
        return content[:limit] + TRUNCATION_MARKER
    return content


def assemble_context(scored: Sequence[ScoredDocument]) -> str:
    """Purpose: Render ranked documents into one delimited context block.
    Inputs/Outputs: Input is ranked ScoredDocuments; output is the joined text, or an
        empty string for no documents.
    Side Effects / State: None; pure function.
    Dependencies: Uses truncate_content.
    Failure Modes: None.
    If Removed: The model receives no document evidence.
    Testing Notes: Oversized content keeps exactly MAX_DOCUMENT_CHARS characters plus
        the truncation marker.
    """
    blocks = []
    for item in scored:
        content = truncate_content(item.document.content or "")
        blocks.append(
            f"=== DOCUMENTO: {item.document.filename} (Relevância: {item.score}) ===\n"
            f"{content}\n"
            "=== FIM DO DOCUMENTO ===\n"
        )
    return "\n".join(blocks)


def build_relevant_context(store: DocumentStore, query: str, limit: int = RETRIEVAL_LIMIT) -> str:
    """Purpose: Produce the document context for a query, or a degraded message.
    Inputs/Outputs: Inputs are the document store, raw query, and fetch limit; output
        is the assembled context or a user-facing notice. Never raises store faults.
    Side Effects / State: Reads from the document store and logs the outcome.
    Dependencies: Uses rank_documents and assemble_context.
    Failure Modes: DocumentStoreError is logged and mapped to a fixed message; an
        empty store and an empty ranking map to distinct messages.
    If Removed: The pipeline has nothing to embed in the system prompt.
    Testing Notes: Cover store failure, empty store, no match, and match paths.
    """
    logger.info("searching relevant documents for query=%r", query)
    try:
        documents = store.list_documents(limit)
    except DocumentStoreError:
        logger.exception("document retrieval failed")
        return DOCUMENTS_UNAVAILABLE_MESSAGE

    if not documents:
        logger.info("no documents in store")
        return NO_DOCUMENTS_LOADED_MESSAGE

    logger.info("found %d documents to rank", len(documents))
    relevant = rank_documents(query, documents)
    if not relevant:
        return NO_RELEVANT_DOCUMENTS_TEMPLATE.format(
            query=query,
            filenames=", ".join(doc.filename for doc in documents),
        )

    context = assemble_context(relevant)
    logger.info("context prepared chars=%d documents=%d", len(context), len(relevant))
    return context
