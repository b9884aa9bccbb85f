from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class Settings:
    """Configuration container for the generation backend, document store, and limits."""
    generation_provider: str
    openai_api_key: str
    openai_base_url: str
    openai_model: str
    gemini_api_key: str
    gemini_model: str
    max_output_tokens: int
    temperature: float
    request_timeout: float
    document_store: str
    documents_path: Path
    supabase_url: str
    supabase_service_key: str
    documents_table: str
    prompts_dir: Path

    @property
    def generation_api_key(self) -> str:
        """API key for the configured generation provider (empty when missing)."""
        if self.generation_provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key

    @property
    def generation_model(self) -> str:
        if self.generation_provider == "gemini":
            return self.gemini_model
        return self.openai_model


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables and filesystem paths.
    Dependencies: Uses os.getenv and BASE_DIR for default paths.
    Failure Modes: Invalid MAX_OUTPUT_TOKENS/TEMPERATURE/REQUEST_TIMEOUT_SECONDS values
        raise ValueError; an unknown provider or store kind raises ValueError.
        Missing API keys are accepted here and reported per request.
    If Removed: App cannot configure the backend or document store and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Resolve paths and provider choices, then build Settings.
    documents_path = os.getenv("DOCUMENTS_PATH")
    if documents_path:
        documents_file = Path(documents_path)
    else:
        documents_file = (BASE_DIR / ".." / "data" / "company_documents.json").resolve()

    provider = os.getenv("GENERATION_PROVIDER", "openai").strip().lower()
    if provider not in ("openai", "gemini"):
        raise ValueError(f"Unsupported GENERATION_PROVIDER: {provider}")
    store_kind = os.getenv("DOCUMENT_STORE", "json").strip().lower()
    if store_kind not in ("json", "supabase"):
        raise ValueError(f"Unsupported DOCUMENT_STORE: {store_kind}")

    return Settings(
        generation_provider=provider,
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        max_output_tokens=int(os.getenv("MAX_OUTPUT_TOKENS", "500")),
        temperature=float(os.getenv("TEMPERATURE", "0.65")),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60")),
        document_store=store_kind,
        documents_path=documents_file,
        supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        supabase_service_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        documents_table=os.getenv("DOCUMENTS_TABLE", "company_documents"),
        prompts_dir=(BASE_DIR / "prompts").resolve(),
    )
