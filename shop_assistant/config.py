from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHAT_MODELS = (
    "llama-3.3-70b-versatile,"
    "llama-3.1-8b-instant,"
    "gemma2-9b-it,"
    "mixtral-8x7b-32768"
)


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    env: str = Field(default="dev", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    cors_origins_raw: str = Field(default="*", alias="CORS_ORIGINS")

    # Completion provider (Groq exposes an OpenAI-compatible API)
    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")
    chat_models_raw: str = Field(default=DEFAULT_CHAT_MODELS, alias="CHAT_MODELS")
    chat_temperature: float = Field(default=0.7, alias="CHAT_TEMPERATURE")
    chat_top_p: float = Field(default=1.0, alias="CHAT_TOP_P")
    chat_max_tokens: int = Field(default=500, alias="CHAT_MAX_TOKENS")
    followup_max_tokens: int = Field(default=600, alias="FOLLOWUP_MAX_TOKENS")
    history_window: int = Field(default=10, alias="HISTORY_WINDOW")
    http_timeout_seconds: float = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")

    # Ledger-backed catalog
    blockchain_rpc_url: str = Field(default="http://127.0.0.1:8545", alias="BLOCKCHAIN_RPC_URL")
    contract_address: str = Field(
        default="0x5FbDB2315678afecb367f032d93F642f64180aa3", alias="CONTRACT_ADDRESS"
    )
    catalog_size: Optional[int] = Field(default=None, alias="CATALOG_SIZE")
    catalog_items_path: str = Field(default="src/items.json", alias="CATALOG_ITEMS_PATH")

    # Web search
    serpapi_key: str = Field(default="", alias="SERPAPI_KEY")
    serpapi_url: str = Field(default="https://serpapi.com/search", alias="SERPAPI_URL")
    search_language: str = Field(default="vi", alias="SEARCH_LANGUAGE")
    search_max_results: int = Field(default=5, ge=1, le=5, alias="SEARCH_MAX_RESULTS")

    # LangSmith / LangChain tracing
    langsmith_api_key: str | None = Field(default=None, alias="LANGSMITH_API_KEY")
    langsmith_endpoint: str | None = Field(default=None, alias="LANGSMITH_ENDPOINT")
    langsmith_project: str | None = Field(default=None, alias="LANGSMITH_PROJECT")
    langsmith_tracing_v2: bool = Field(default=False, alias="LANGCHAIN_TRACING_V2")

    @property
    def chat_models(self) -> List[str]:
        """Ordered model identifiers for the fallback cascade."""
        return [item.strip() for item in self.chat_models_raw.split(",") if item.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
