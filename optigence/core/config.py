"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    Every provider key is optional. A missing key disables that provider
    and shows up as "not_configured" in /optimail/diagnostics.
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    APP_NAME: str = "Optigence Core"
    DEBUG: bool = False

    # CORS_ORIGINS: Allowed browser origins for the web front-end
    CORS_ORIGINS: List[str] = ["*"]

    # ---------------------------------------------------------------------------
    # AI/LLM PROVIDER SETTINGS
    # ---------------------------------------------------------------------------
    # OPENAI_API_KEY: General composition and the last-resort fallback
    OPENAI_API_KEY: str = ""

    # ANTHROPIC_API_KEY: Claude, used for nuanced replies, apologies, summaries
    ANTHROPIC_API_KEY: str = ""

    # GEMINI_API_KEY / GOOGLE_API_KEY: Gemini, used for scheduling and
    # anything that needs real-time information. Either name is accepted.
    GEMINI_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""

    # COHERE_API_KEY: Cohere, the fast pattern classifier for intents
    COHERE_API_KEY: str = ""

    # ---------------------------------------------------------------------------
    # AI MODEL CONFIGURATION
    # ---------------------------------------------------------------------------
    OPENAI_MODEL: str = "gpt-4-turbo"
    ANTHROPIC_MODEL: str = "claude-3-sonnet-20240229"
    GEMINI_MODEL: str = "gemini-1.5-pro"
    COHERE_MODEL: str = "command-r-plus"
    COHERE_API_URL: str = "https://api.cohere.com/v2/chat"

    # AI request timeout in seconds. Provider SDK retries are disabled;
    # recovery happens by falling back to another provider.
    AI_REQUEST_TIMEOUT: int = 15

    # ---------------------------------------------------------------------------
    # INTENT CLASSIFIER
    # ---------------------------------------------------------------------------
    # "remote": provider first, keyword table on failure
    # "local": keyword table only (no network)
    INTENT_CLASSIFIER_STRATEGY: str = "remote"
    INTENT_CLASSIFIER_PROVIDER: str = "cohere"

    # ---------------------------------------------------------------------------
    # SUGGESTIONS & EMOTION HEURISTICS
    # ---------------------------------------------------------------------------
    # A primary-category suggestion must beat this to be promoted
    PRIMARY_ACTION_THRESHOLD: float = 0.8

    # Positive/negative score ratio needed before sentiment leaves "neutral"
    SENTIMENT_MARGIN: float = 1.2

    # Quiet period before a live suggestion refresh fires
    SUGGESTION_DEBOUNCE_MS: int = 500

    MAX_SUGGESTIONS: int = 6

    # ---------------------------------------------------------------------------
    # ORCHESTRATOR
    # ---------------------------------------------------------------------------
    # When every provider fails, return a canned draft instead of a 500
    STATIC_TEMPLATE_FALLBACK: bool = False

    # Interaction memory caps: entries per user, users kept, idle expiry
    MEMORY_MAX_ENTRIES: int = 500
    MEMORY_MAX_USERS: int = 10000
    MEMORY_USER_TTL_SECONDS: int = 30 * 24 * 3600

    # ---------------------------------------------------------------------------
    # RATE LIMITING
    # ---------------------------------------------------------------------------
    RATE_LIMIT_ENABLED: bool = True

    # ---------------------------------------------------------------------------
    # EXTERNAL SERVICES (diagnostics only)
    # ---------------------------------------------------------------------------
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Google Calendar OAuth client
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""

    @property
    def gemini_key(self) -> str:
        """Gemini key, accepting either env var name."""
        return self.GEMINI_API_KEY or self.GOOGLE_API_KEY


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from optigence.core.config import settings
settings = Settings()
