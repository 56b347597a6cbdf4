"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from news_rag.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="API key for the OpenAI-compatible LLM endpoint")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for the LLM API. Leave empty to use OpenAI cloud. Any "
            "OpenAI-compatible endpoint works, e.g. "
            "'https://generativelanguage.googleapis.com/v1beta/openai/'"
        ),
    )
    llm_temperature: float = 0.2

    # Vector index
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "news_articles"
    vector_size: int = 768

    # Embedding
    embedding_backend: str = Field(default="jina", description="'jina' (hosted API) or 'huggingface' (local)")
    embedding_api_url: str = "https://api.jina.ai/v1/embeddings"
    embedding_api_key: str = ""
    embedding_model: str = "jina-embeddings-v2-base-en"
    embedding_timeout: float = 60.0
    embed_batch_size: int = 16
    embed_max_retries: int = 3

    # Sessions
    session_backend: str = Field(default="redis", description="'redis' or 'memory'")
    redis_url: str = "redis://localhost:6379/0"
    session_ttl_seconds: int = 60 * 60 * 24

    # Ingestion
    sitemap_index: str = "https://www.reuters.com/arc/outboundfeeds/sitemap-index/?outputType=xml"
    num_articles: int = 50
    chunk_size: int = 800
    chunk_overlap: int = 100
    upsert_batch_size: int = 128
    user_agent: str = "Mozilla/5.0 (compatible; RAG-Ingest/1.0; +https://example.com)"
    fetch_timeout: float = 20.0
    fetch_retries: int = 3
    fetch_retry_delay: float = 2.0
    sitemap_delay: float = 0.15
    article_delay: float = 0.2
    embed_delay: float = 0.15
    upsert_delay: float = 0.1
    skip_failed_embedding_batches: bool = False

    # Serving
    host: str = "0.0.0.0"
    port: int = 5000
    retrieval_top_k: int = 4
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def missing_credentials(self, for_: str = "serve") -> list[str]:
        """Return the names of required settings that are empty.

        ``for_`` is ``"ingest"`` (embedding + vector index) or ``"serve"``
        (additionally the LLM and the session store).
        """
        missing: list[str] = []
        if self.embedding_backend == "jina" and not self.embedding_api_key:
            missing.append("embedding_api_key")
        if not self.chroma_host:
            missing.append("chroma_host")
        if for_ == "serve":
            if not self.openai_api_key and not self.llm_base_url:
                missing.append("openai_api_key")
            if self.session_backend == "redis" and not self.redis_url:
                missing.append("redis_url")
        return missing

    def ensure_configured(self, for_: str = "serve") -> None:
        """Raise :class:`ConfigurationError` when required settings are missing."""
        missing = self.missing_credentials(for_)
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                details={"missing": missing},
            )


# Singleton: import `settings` wherever needed.
settings = Settings()
