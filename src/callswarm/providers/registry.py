from __future__ import annotations

from typing import Any, Callable, Dict

from callswarm.providers.anthropic import AnthropicProvider
from callswarm.providers.base import BaseProvider
from callswarm.providers.openai import OpenAIProvider

"""
Name-based provider lookup.

Lets a caller pick the chat provider for a swarm from configuration
(e.g. `get_provider("anthropic", model=...)`) instead of importing the class.
"""

ProviderFactory = Callable[..., BaseProvider]

_REGISTRY: Dict[str, ProviderFactory] = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
}


def available_providers() -> list[str]:
    """Return the registered provider names, sorted."""
    return sorted(_REGISTRY)


def get_provider(name: str, **kwargs: Any) -> BaseProvider:
    """
    Build a provider by name.

    Args:
        name (str): Provider name, case-insensitive (e.g., "openai")
        **kwargs: Constructor arguments (model, api_key, ...)

    Returns:
        BaseProvider: The configured provider

    Raises:
        ValueError: If no provider is registered under `name`
    """
    key = name.strip().lower()
    if key not in _REGISTRY:
        raise ValueError(
            f"Unknown provider: {name}. Available: {', '.join(available_providers())}"
        )
    return _REGISTRY[key](**kwargs)


def register_provider(name: str, factory: ProviderFactory) -> None:
    """
    Make a custom provider available to `get_provider`.

    Raises:
        ValueError: If the name is empty or already registered
    """
    key = name.strip().lower()
    if not key:
        raise ValueError("Provider name must not be empty")
    if key in _REGISTRY:
        raise ValueError(f"Provider already registered: {name}")
    _REGISTRY[key] = factory
