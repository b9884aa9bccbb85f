from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import google.generativeai as genai
import httpx
from google.api_core import exceptions as google_exceptions

from .config import Settings
from .errors import ConfigurationError, GenerationError, GenerationTimeoutError

logger = logging.getLogger("chat_ai.generation")

TIMEOUT_MESSAGE = "O serviço de geração não respondeu a tempo. Tente novamente em instantes."

DEFAULT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


@dataclass
class GenerationReply:
    """Backend reply: the message payload, token usage, and finish reason."""
    message: Dict[str, Any] = field(default_factory=dict)
    total_tokens: int = 0
    finish_reason: Optional[str] = None


class GenerationClient(Protocol):
    def chat(self, messages: Sequence[Dict[str, str]]) -> GenerationReply:
        ...


class OpenAIChatClient:
    """Chat-completions client for OpenAI-compatible HTTP endpoints."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Capture endpoint, credentials, and generation parameters.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: None; an HTTP client is opened per call.
        Dependencies: Uses httpx and Settings from config.
        Failure Modes: Raises ConfigurationError if OPENAI_API_KEY is missing.
        If Removed: The default generation path is unavailable.
        Testing Notes: Missing key raises; parameters come from Settings.
        """
        if not settings.openai_api_key:
            raise ConfigurationError("OpenAI API key não configurada")
        self._api_key = settings.openai_api_key
        self._endpoint = f"{settings.openai_base_url}/chat/completions"
        self._model = settings.openai_model
        self._max_tokens = settings.max_output_tokens
        self._temperature = settings.temperature
        self._timeout = settings.request_timeout

    def chat(self, messages: Sequence[Dict[str, str]]) -> GenerationReply:
        """Purpose: Send the composed messages and return the first choice.
        Inputs/Outputs: Input is role/content dicts; output is a GenerationReply.
        Side Effects / State: Issues one HTTP POST request.
        Dependencies: Uses httpx.Client with the configured timeout.
        Failure Modes: Timeouts raise GenerationTimeoutError; transport errors, status
            codes >= 400 and non-JSON bodies raise GenerationError.
        If Removed: No answer can be generated.
        Testing Notes: Patch httpx.Client and cover 200, 4xx/5xx, and timeout.
        """
        payload = {
            "model": self._model,
            "messages": [{"role": msg["role"], "content": msg["content"]} for msg in messages],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(self._endpoint, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            logger.error("OpenAI request timed out after %.1fs", self._timeout)
            raise GenerationTimeoutError(TIMEOUT_MESSAGE) from exc
        except httpx.RequestError as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise GenerationError(f"Erro na API OpenAI: {exc}") from exc

        if response.status_code >= 400:
            logger.error("OpenAI API error status=%s body=%s", response.status_code, response.text)
            raise GenerationError(f"Erro na API OpenAI: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as exc:
            raise GenerationError("Erro na API OpenAI: resposta em formato inesperado") from exc
        logger.info("OpenAI reply received")
        return _reply_from_completion(data)


class GeminiChatClient:
    """Thin wrapper around the Gemini SDK speaking the chat message contract."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Configure the Gemini SDK and the model instance.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: Configures SDK global API key.
        Dependencies: Uses google.generativeai and Settings from config.
        Failure Modes: Raises ConfigurationError if API key or model name is missing.
        If Removed: GENERATION_PROVIDER=gemini cannot be served.
        Testing Notes: Patch genai and verify system instruction and content mapping.
        """
        if not settings.gemini_api_key:
            raise ConfigurationError("Gemini API key não configurada")
        model_name = _normalize_model_name(settings.gemini_model)
        if not model_name:
            raise ConfigurationError("Gemini model name is required")
        genai.configure(api_key=settings.gemini_api_key)
        self._model_name = model_name
        self._generation_config = {
            "temperature": settings.temperature,
            "max_output_tokens": settings.max_output_tokens,
        }
        self._timeout = settings.request_timeout

    def chat(self, messages: Sequence[Dict[str, str]]) -> GenerationReply:
        """Purpose: Generate a reply from the composed chat messages.
        Inputs/Outputs: Input is role/content dicts; output is a GenerationReply whose
            content is the candidate's part list.
        Side Effects / State: Issues one SDK request.
        Dependencies: Uses _to_gemini_contents and _reply_from_gemini.
        Failure Modes: Deadline errors raise GenerationTimeoutError; other API errors
            raise GenerationError.
        If Removed: The Gemini provider cannot answer.
        Testing Notes: Patch genai and check system instruction, contents, and error mapping.
        """
        system_instruction, contents = _to_gemini_contents(messages)
        kwargs = {
            "generation_config": self._generation_config,
            "safety_settings": DEFAULT_SAFETY_SETTINGS,
            "request_options": {"timeout": self._timeout},
        }
        model = genai.GenerativeModel(self._model_name, system_instruction=system_instruction or None)
        try:
            response = model.generate_content(contents, **kwargs)
        except google_exceptions.DeadlineExceeded as exc:
            logger.error("Gemini request timed out after %.1fs", self._timeout)
            raise GenerationTimeoutError(TIMEOUT_MESSAGE) from exc
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Gemini API error: %s", exc)
            raise GenerationError(f"Erro na API Gemini: {exc}") from exc
        logger.info("Gemini reply received")
        return _reply_from_gemini(response)


def create_generation_client(settings: Settings) -> GenerationClient:
    """Build the client for GENERATION_PROVIDER."""
    if settings.generation_provider == "gemini":
        return GeminiChatClient(settings)
    return OpenAIChatClient(settings)


def _reply_from_completion(data: Any) -> GenerationReply:
    if not isinstance(data, dict):
        return GenerationReply()
    choices = data.get("choices")
    first = choices[0] if isinstance(choices, list) and choices else None
    choice = first if isinstance(first, dict) else {}
    message = choice.get("message")
    usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
    return GenerationReply(
        message=message if isinstance(message, dict) else {},
        total_tokens=int(usage.get("total_tokens") or 0),
        finish_reason=choice.get("finish_reason"),
    )


def _reply_from_gemini(response: Any) -> GenerationReply:
    candidates = getattr(response, "candidates", None) or []
    parts: List[Dict[str, str]] = []
    finish_reason = None
    if candidates:
        candidate = candidates[0]
        finish_reason = str(getattr(candidate, "finish_reason", "") or "") or None
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            parts.append({"text": getattr(part, "text", "") or ""})
    usage = getattr(response, "usage_metadata", None)
    total_tokens = int(getattr(usage, "total_token_count", 0) or 0)
    return GenerationReply(message={"content": parts}, total_tokens=total_tokens, finish_reason=finish_reason)


def _to_gemini_contents(messages: Sequence[Dict[str, str]]) -> Tuple[str, List[Dict[str, object]]]:
    """Purpose: Map chat messages onto Gemini's system instruction and contents.
    Inputs/Outputs: Input is role/content dicts; output is (system_instruction, contents).
    Side Effects / State: None.
    Dependencies: Used by GeminiChatClient.chat.
    Failure Modes: None; a leading non-system message leaves the instruction empty.
    If Removed: Gemini receives OpenAI-shaped messages and rejects them.
    Testing Notes: Later system messages become user turns in their original position.
    """
    system_instruction = ""
    remaining = list(messages)
    if remaining and remaining[0].get("role") == "system":
        system_instruction = remaining.pop(0).get("content", "")
    contents: List[Dict[str, object]] = []
    for message in remaining:
        role = "model" if message.get("role") == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": message.get("content", "")}]})
    return system_instruction, contents


def _normalize_model_name(name: Optional[str]) -> str:
    # Strip "models/" prefix and whitespace.
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned
