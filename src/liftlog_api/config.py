"""Configuration settings for the LiftLog API."""
import os
from typing import Literal


EnvironmentType = Literal["development", "staging", "production"]
ProviderType = Literal["openai", "anthropic"]

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


class Settings:
    """Application settings."""

    # Feature flags
    HELICONE_ENABLED: bool = False

    # Environment
    ENVIRONMENT: EnvironmentType = "development"

    # LLM provider
    LLM_PROVIDER: ProviderType = "openai"
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-20241022"
    LLM_TIMEOUT_SECONDS: float = 30.0

    # API Keys
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None
    HELICONE_API_KEY: str | None = None

    CORS_ORIGINS: list[str] = []

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        provider = os.getenv("LLM_PROVIDER", "openai").lower()
        self.LLM_PROVIDER = provider if provider in ("openai", "anthropic") else "openai"  # type: ignore
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", self.OPENAI_MODEL)
        self.ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", self.ANTHROPIC_MODEL)
        try:
            self.LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
        except ValueError:
            self.LLM_TIMEOUT_SECONDS = 30.0

        # Feature flags
        self.HELICONE_ENABLED = os.getenv("HELICONE_ENABLED", "false").lower() == "true"

        # API Keys
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
        self.HELICONE_API_KEY = os.getenv("HELICONE_API_KEY")

        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]

    @property
    def llm_model(self) -> str:
        """Model name for the selected provider."""
        if self.LLM_PROVIDER == "anthropic":
            return self.ANTHROPIC_MODEL
        return self.OPENAI_MODEL

    @property
    def llm_configured(self) -> bool:
        """True when the selected provider has a credential."""
        if self.LLM_PROVIDER == "anthropic":
            return bool(self.ANTHROPIC_API_KEY)
        return bool(self.OPENAI_API_KEY)


settings = Settings()
