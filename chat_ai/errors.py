from __future__ import annotations


class ChatAssistantError(Exception):
    """Base error for faults that terminate a chat request."""

    status_code = 500
    retryable = False


class ConfigurationError(ChatAssistantError):
    """Raised when a required credential or setting is missing."""


class InputError(ChatAssistantError):
    """Raised when the request lacks the user message."""

    status_code = 400


class GenerationError(ChatAssistantError):
    """Raised when the generation backend fails or answers with an error status."""

    status_code = 502


class GenerationTimeoutError(GenerationError):
    """Raised when the generation backend does not answer within the timeout."""

    status_code = 504
    retryable = True


class DocumentStoreError(Exception):
    """Raised by document stores; recovered into degraded replies by the core."""
