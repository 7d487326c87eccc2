from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from meeting_maestro.llm.credentials import LLMConfig, Provider


DEFAULT_MODELS: dict[Provider, dict[str, str]] = {
    Provider.OPENAI: {"summary": "gpt-4.1-nano", "extraction": "gpt-4o-mini"},
    Provider.ANTHROPIC: {
        "summary": "claude-sonnet-4-20250514",
        "extraction": "claude-sonnet-4-20250514",
    },
}


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Upstream completion service
    llm_provider: Provider = Provider.OPENAI
    summary_model: str = ""  # empty -> provider default
    extraction_model: str = ""
    summary_max_tokens: int = 4000
    extraction_max_tokens: int = 512
    summary_temperature: float = 0.5
    extraction_temperature: float = 0.2
    stream_timeout_seconds: float | None = None

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 5001
    cors_origins: str = "*"  # comma-separated
    max_upload_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def api_key_for(self, provider: Provider) -> str:
        if provider is Provider.ANTHROPIC:
            return self.anthropic_api_key
        return self.openai_api_key

    def llm_model_for(self, task: str) -> str:
        """Return the configured model for *task* ("summary" or "extraction")."""
        configured = self.summary_model if task == "summary" else self.extraction_model
        return configured or DEFAULT_MODELS[self.llm_provider][task]

    def llm_config(self) -> LLMConfig:
        """Build the explicit upstream configuration for the active provider."""
        return LLMConfig(
            provider=self.llm_provider,
            api_key=self.api_key_for(self.llm_provider),
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
