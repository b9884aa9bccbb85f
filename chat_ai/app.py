from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .document_store import DocumentStore, create_document_store
from .errors import ChatAssistantError
from .generation_client import GenerationClient, create_generation_client
from .models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse
from .pipeline import DocumentAssistant

BASE_DIR = Path(__file__).resolve().parent

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logging.getLogger("chat_ai").setLevel(log_level)
logger = logging.getLogger("chat_ai.app")

ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"
INVALID_REQUEST_MESSAGE = "Requisição inválida"


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    client: Optional[GenerationClient] = None,
) -> FastAPI:
    """Purpose: Build the FastAPI application around one DocumentAssistant.
    Inputs/Outputs: Optional Settings, document store, and generation client; returns
        the configured FastAPI app.
    Side Effects / State: Loads settings from the environment when not given.
    Dependencies: Uses load_settings, create_document_store, create_generation_client.
    Failure Modes: Invalid settings raise ValueError; a missing API key does not fail
        here and is reported per request.
    If Removed: The service has no HTTP surface.
    Testing Notes: Pass fakes for store and client and drive it with TestClient.
    """
    settings = settings or load_settings()
    store = store or create_document_store(settings)
    if client is None and settings.generation_api_key:
        client = create_generation_client(settings)
    assistant = DocumentAssistant(settings=settings, store=store, client=client)

    app = FastAPI(title="Company Documents Assistant")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    app.state.assistant = assistant

    @app.exception_handler(ChatAssistantError)
    async def handle_chat_error(request: Request, exc: ChatAssistantError) -> JSONResponse:
        # Request-terminating faults: configuration, input, generation backend.
        logger.error("chat request failed status=%s error=%s", exc.status_code, exc)
        headers = {"Retry-After": "5"} if exc.retryable else None
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc) or INTERNAL_ERROR_MESSAGE).model_dump(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("invalid chat request errors=%s", exc.errors())
        return JSONResponse(status_code=400, content=ErrorResponse(error=INVALID_REQUEST_MESSAGE).model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unexpected error in chat request")
        return JSONResponse(status_code=500, content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump())

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(request: ChatRequest) -> ChatResponse:
        """Purpose: Answer one user message from the company documents.
        Inputs/Outputs: Input is ChatRequest; output is ChatResponse with response/tokens.
        Side Effects / State: Reads documents and calls the generation backend.
        Dependencies: Uses DocumentAssistant.handle_message.
        Failure Modes: ChatAssistantError maps to its status code with {"error": ...}.
        If Removed: Core chat functionality is unavailable.
        Testing Notes: Send a sample message and verify response schema.
        """
        history = request.history_turns()
        context = assistant.handle_message(request.message, chat_history=history)
        return ChatResponse(response=context.response, tokens=context.tokens)

    @app.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            provider=settings.generation_provider,
            document_store=settings.document_store,
        )

    return app


app = create_app()
