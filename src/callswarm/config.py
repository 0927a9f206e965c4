from __future__ import annotations

import os

from loguru import logger

OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"


class MissingAPIKeyError(Exception):
    """An API key required by a provider is not configured."""

    def __init__(self, env_var: str) -> None:
        self.env_var = env_var
        super().__init__(f"API key not found in environment variable {env_var}.")


def get_api_key(env_var: str) -> str:
    """
    Read an API key from the environment.

    Args:
        env_var (str): Name of the environment variable

    Returns:
        str: The API key

    Raises:
        MissingAPIKeyError: If the variable is unset or empty
    """
    key = os.environ.get(env_var)
    if not key:
        logger.error(f"API key not found in environment variable {env_var}.")
        raise MissingAPIKeyError(env_var)
    logger.debug(f"API key found in environment variable {env_var}.")
    return key
