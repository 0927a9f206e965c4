"""Provider implementations and registry."""

from callswarm.providers.anthropic import AnthropicProvider
from callswarm.providers.base import BaseProvider
from callswarm.providers.models import ProviderError, Usage
from callswarm.providers.openai import OpenAIProvider
from callswarm.providers.registry import available_providers, get_provider, register_provider

__all__ = [
    "BaseProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "ProviderError",
    "Usage",
    "available_providers",
    "get_provider",
    "register_provider",
]
