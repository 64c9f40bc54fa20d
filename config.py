"""Digest configuration — loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- LLM provider --------------------------------------------------
    llm_provider: str = "openai"  # "openai" | "azure" | "local" | "gemini"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Azure OpenAI
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment: str = ""

    # Local / Ollama
    local_llm_base_url: str = "http://localhost:11434/v1"
    local_llm_model: str = "llama3"

    # Google Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    llm_temperature: float = 0.3
    llm_timeout: float = Field(default=60.0, gt=0)

    # --- Fetcher --------------------------------------------------------
    fetch_timeout: float = Field(default=15.0, gt=0)
    fetch_user_agent: str = "Mozilla/5.0 (compatible; ArticleDigest/1.0)"
    max_fetch_bytes: int = Field(default=2 * 1024 * 1024, gt=0)

    # --- Extraction / prompt / normalizer -------------------------------
    min_article_chars: int = Field(default=200, ge=1)
    max_prompt_chars: int = Field(default=10_000, gt=0)
    response_fence: str = "```"
    response_fence_languages: list[str] = ["json"]

    # --- Server ---------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "info"
    allowed_origins: str = "*"  # comma-separated origins, e.g. "http://localhost:5173,https://app.example.com"

    # --- Pipeline -------------------------------------------------------
    retry_attempts: int = Field(default=1, ge=1)  # 1 = single attempt
    retry_backoff: float = Field(default=1.0, ge=0)  # seconds, doubled per retry


settings = Settings()
