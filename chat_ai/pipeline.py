"""Request pipeline for the company-documents assistant.

Role:
    Runs one chat request end to end: request validation, the list-documents
    short-circuit, lexical retrieval, message composition, the generation call,
    and reply coercion. Every request gets a fresh ChatContext; nothing is shared
    across requests apart from configuration and the stateless adapters.

Step contracts:
    validate_request:
        Fails with ConfigurationError (no backend credential) or InputError (no message).
    list_intent:
        Sets short_circuit and response when the message asks for the document list.
    retrieval:
        Sets relevant_context from the document store; store faults degrade to text.
    composition:
        Sets messages (system + history window + emoji directive + user turn).
    generation:
        Sets reply from the backend; backend faults propagate.
    finalize:
        Sets response/tokens from the reply unless already answered; always runs.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .composer import PromptTemplates, compose_messages
from .coercion import extract_reply_text
from .config import Settings
from .document_store import DocumentStore
from .errors import ConfigurationError, InputError
from .generation_client import GenerationClient, GenerationReply
from .intent import build_document_listing, is_list_documents_intent
from .retrieval import build_relevant_context
from .step_runner import PipelineStep, StepRunner
from .utils import normalize_text

logger = logging.getLogger("chat_ai.pipeline")

MISSING_MESSAGE_ERROR = "Mensagem é obrigatória"


@dataclass
class ChatContext:
    """Mutable context passed through each pipeline step."""
    request_id: str
    user_message: Optional[str]
    chat_history: List[Dict[str, str]]
    normalized_message: str = ""
    short_circuit: bool = False
    relevant_context: str = ""
    messages: List[Dict[str, str]] = field(default_factory=list)
    reply: Optional[GenerationReply] = None
    response: str = ""
    tokens: int = 0


class DocumentAssistant:
    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        client: Optional[GenerationClient],
        templates: Optional[PromptTemplates] = None,
    ) -> None:
        """Purpose: Wire configuration, store, and backend into the step runner.
        Inputs/Outputs: Inputs are Settings, a DocumentStore, the generation client (None
            when no credential is configured), and optional prompt templates.
        Side Effects / State: Reads prompt templates from settings.prompts_dir.
        Dependencies: Uses StepRunner/PipelineStep and the step methods on this class.
        Failure Modes: Missing prompt files raise FileNotFoundError at construction.
        If Removed: The chat endpoint cannot run the pipeline.
        Testing Notes: Construct with a fake store and client and check step order.
        """
        self._settings = settings
        self._store = store
        self._client = client
        self._templates = templates or PromptTemplates(settings.prompts_dir)
        self._runner = StepRunner(
            steps=[
                PipelineStep("validate_request", self._step_validate_request),
                PipelineStep("list_intent", self._step_list_intent),
                PipelineStep("retrieval", self._step_retrieval, skip_if=_already_answered),
                PipelineStep("composition", self._step_composition, skip_if=_already_answered),
                PipelineStep("generation", self._step_generation, skip_if=_already_answered),
                PipelineStep("finalize", self._step_finalize, always_run=True),
            ]
        )

    @property
    def step_names(self) -> List[str]:
        return self._runner.step_names

    def handle_message(
        self, user_message: Optional[str], chat_history: Optional[List[Dict[str, str]]] = None
    ) -> ChatContext:
        """Purpose: Run the full pipeline for one user message.
        Inputs/Outputs: Inputs are the message and prior turns; output is the populated
            ChatContext carrying response and tokens.
        Side Effects / State: Reads the document store and calls the backend.
        Dependencies: Uses StepRunner.run.
        Failure Modes: ConfigurationError, InputError, and GenerationError propagate;
            store and coercion faults degrade to text.
        If Removed: No request can be answered.
        Testing Notes: Cover the short-circuit path and the full generation path.
        """
        context = ChatContext(
            request_id=uuid.uuid4().hex[:12],
            user_message=user_message,
            chat_history=list(chat_history or []),
        )
        logger.info(
            "request=%s new query message=%r history=%d",
            context.request_id,
            user_message,
            len(context.chat_history),
        )
        self._runner.run(context, request_id=context.request_id)
        logger.info("request=%s done tokens=%d", context.request_id, context.tokens)
        return context

    def _step_validate_request(self, context: ChatContext) -> None:
        # Credential first, then the message.
        if self._client is None:
            provider = "Gemini" if self._settings.generation_provider == "gemini" else "OpenAI"
            logger.error("request=%s missing API key for provider=%s", context.request_id, provider)
            raise ConfigurationError(f"{provider} API key não configurada")
        if not context.user_message:
            raise InputError(MISSING_MESSAGE_ERROR)
        context.normalized_message = normalize_text(context.user_message)

    def _step_list_intent(self, context: ChatContext) -> None:
        if not is_list_documents_intent(context.normalized_message):
            return
        logger.info("request=%s intent=list_documents", context.request_id)
        context.short_circuit = True
        context.response = build_document_listing(self._store)
        context.tokens = 0

    def _step_retrieval(self, context: ChatContext) -> None:
        context.relevant_context = build_relevant_context(self._store, context.user_message)

    def _step_composition(self, context: ChatContext) -> None:
        system_prompt = self._templates.render_system(context.relevant_context)
        context.messages = compose_messages(
            system_prompt,
            context.chat_history,
            context.user_message,
            avoid_emojis_template=self._templates.avoid_emojis,
        )
        logger.info("request=%s sending messages=%d", context.request_id, len(context.messages))

    def _step_generation(self, context: ChatContext) -> None:
        context.reply = self._client.chat(context.messages)

    def _step_finalize(self, context: ChatContext) -> None:
        if context.short_circuit or context.reply is None:
            return
        context.response = extract_reply_text(context.reply.message, context.reply.finish_reason)
        context.tokens = context.reply.total_tokens


def _already_answered(context: ChatContext) -> bool:
    return context.short_circuit
