"""LLM client management for the LiftLog API."""
from .client_factory import AIClientFactory, AIRequestContext

__all__ = [
    "AIClientFactory",
    "AIRequestContext",
]
