"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) real environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``supabase_url`` maps to ``SUPABASE_URL`` and so on.

Credentials default to ``""`` meaning "not configured".  Nothing here raises
for a missing credential: the component that needs it raises
:class:`~yucabot.utils.errors.ConfigurationError` on first use, so the API can
still boot and report its state on ``/api/health``.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """YucaBot application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # === Embedding providers ===
    huggingface_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("huggingface_api_key", "hf_api_key"),
    )
    huggingface_api_base: str = "https://api-inference.huggingface.co/models"
    huggingface_embedding_model: str = "mixedbread-ai/mxbai-embed-large-v1"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, etc.)
    openai_embedding_model: str = "text-embedding-3-large"

    # === Embedding behaviour ===
    embedding_dimension: int = Field(default=1024, ge=1)
    embedding_max_input_chars: int = Field(default=8000, ge=1)
    embedding_timeout_seconds: float = Field(default=20.0, gt=0)
    embedding_max_retries: int = Field(default=2, ge=0)
    embedding_backoff_base_seconds: float = Field(default=0.5, ge=0)

    # === Answer generation ===
    openai_text_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-latest"
    huggingface_generation_models: list[str] = Field(
        default_factory=lambda: [
            "mistralai/Mistral-7B-Instruct-v0.2",
            "HuggingFaceH4/zephyr-7b-beta",
        ]
    )
    generation_max_tokens: int = Field(default=200, ge=1)
    generation_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    generation_timeout_seconds: float = Field(default=25.0, gt=0)
    extractive_fallback_chars: int = Field(default=500, ge=0)

    # === Vector store (Supabase / pgvector) ===
    supabase_url: str = ""
    supabase_service_role_key: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_service_role_key", "supabase_key"),
    )
    supabase_table: str = "knowledge_base"
    supabase_match_function: str = "match_documents"

    # === Retrieval ===
    similarity_threshold: float = 0.75
    match_count: int = Field(default=5, ge=1)
    context_top_k: int = Field(default=3, ge=1)
    context_max_chars: int = Field(default=4000, ge=1)

    # === Ingestion ===
    max_stored_chars: int = Field(default=5000, ge=1)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    # === Request handling ===
    request_timeout_seconds: float = Field(default=90.0, gt=0)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
