"""LLM client factory with optional Helicone proxying."""
import logging
from dataclasses import dataclass, field
from typing import Any

from liftlog_api.config import Settings, settings


logger = logging.getLogger(__name__)

_HELICONE_BASE_URLS = {
    "openai": "https://oai.helicone.ai/v1",
    "anthropic": "https://anthropic.helicone.ai",
}

DEFAULT_TIMEOUT = 30.0


@dataclass
class AIRequestContext:
    """Tracking context attached to a single LLM request."""

    feature_name: str | None = None
    request_id: str | None = None
    custom_properties: dict[str, str] = field(default_factory=dict)

    def to_tracking_headers(self, environment: str) -> dict[str, str]:
        """Build Helicone property headers for this request."""
        headers: dict[str, str] = {"Helicone-Property-Environment": environment}

        if self.feature_name:
            headers["Helicone-Property-Feature"] = self.feature_name
        if self.request_id:
            headers["Helicone-Request-Id"] = self.request_id

        for key, value in self.custom_properties.items():
            header_key = f"Helicone-Property-{key.replace('_', '-').title()}"
            headers[header_key] = str(value)

        return headers


class AIClientFactory:
    """Creates provider SDK clients for the configured LLM provider."""

    @staticmethod
    def _client_kwargs(
        provider: str,
        api_key: str,
        config: Settings,
        context: AIRequestContext | None,
        timeout: float,
    ) -> dict[str, Any]:
        # SDK retries off: one network attempt per call
        kwargs: dict[str, Any] = {"api_key": api_key, "timeout": timeout, "max_retries": 0}

        if not config.HELICONE_ENABLED:
            return kwargs

        if not config.HELICONE_API_KEY:
            logger.warning(
                "HELICONE_ENABLED=true but HELICONE_API_KEY not set. "
                f"Calling {provider} directly."
            )
            return kwargs

        headers = {"Helicone-Auth": f"Bearer {config.HELICONE_API_KEY}"}
        if context:
            headers.update(context.to_tracking_headers(config.ENVIRONMENT))

        kwargs["base_url"] = _HELICONE_BASE_URLS[provider]
        kwargs["default_headers"] = headers
        return kwargs

    @staticmethod
    def create_openai_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        config: Settings | None = None,
    ) -> Any:
        """
        Create an OpenAI client.

        Raises:
            ValueError: If OPENAI_API_KEY is not configured
        """
        import openai

        config = config or settings
        if not config.OPENAI_API_KEY:
            raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

        kwargs = AIClientFactory._client_kwargs("openai", config.OPENAI_API_KEY, config, context, timeout)
        logger.debug(f"Creating OpenAI client (proxied={'base_url' in kwargs})")
        return openai.OpenAI(**kwargs)

    @staticmethod
    def create_anthropic_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        config: Settings | None = None,
    ) -> Any:
        """
        Create an Anthropic client.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not configured
        """
        from anthropic import Anthropic

        config = config or settings
        if not config.ANTHROPIC_API_KEY:
            raise ValueError("Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.")

        kwargs = AIClientFactory._client_kwargs("anthropic", config.ANTHROPIC_API_KEY, config, context, timeout)
        logger.debug(f"Creating Anthropic client (proxied={'base_url' in kwargs})")
        return Anthropic(**kwargs)
