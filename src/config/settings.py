"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables, e.g. APIFY_API_KEY=apify_api_abc
#   2. The .env file in the working directory
#   3. The defaults below
#
# Field ``apify_api_key`` maps to env var ``APIFY_API_KEY``.
#
# An empty key means "not configured": the factories in src/main.py skip
# that provider and the matching tier fails fast with ProviderError.
# Engine tuning (timeouts, TTLs, concurrency) lives in config/config.yaml,
# see src/config/loader.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gravity discovery engine settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Text generation ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, Groq, ...)
    openai_text_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""

    # === Social scraping ===
    apify_api_key: str = ""

    # === Web search ===
    searchapi_api_key: str = ""
    # DuckDuckGo needs no key; it backs the search tier when SearchAPI is unset.
    duckduckgo_enabled: bool = True

    # === Artifact cache ===
    cache_backend: str = "memory"  # "memory" or "sqlite"
    cache_db_path: str = "data/gravity_cache.db"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys, in priority order."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        return providers
