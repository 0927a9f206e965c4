"""
callswarm: Run the same async LLM call many times at once, and log every outcome.

A Python library for concurrent "swarm" execution with:
- N parallel invocations of one async callable over a shared client session
- Every success and failure collected, in completion order
- One JSON line per outcome in a freshly truncated output file
- OpenAI and Anthropic chat-completion callables
- Folder and file helpers for output locations

Example:
    >>> from aiohttp import ClientSession
    >>> from callswarm import run_swarm
    >>> from callswarm.providers import OpenAIProvider
    >>>
    >>> provider = OpenAIProvider(model="gpt-4o-mini")
    >>> task = provider.as_callable(
    ...     "You are a helpful assistant.",
    ...     "Who won the world series in 2020?",
    ... )
    >>>
    >>> async with ClientSession() as session:
    ...     results = await run_swarm(task, 4, session, "responses.jsonl")
"""

from callswarm.core.errors import SinkOpenError, SinkWriteError, SwarmError, TaskJoinError
from callswarm.core.io import read_log_entries
from callswarm.core.models import Err, LogEntry, Ok, Outcome, SwarmStats
from callswarm.core.swarm import run_swarm
from callswarm.file_utils import create_file, create_folder, create_multiple_files
from callswarm.providers import (
    BaseProvider,
    available_providers,
    get_provider,
    register_provider,
)

__version__ = "0.1.0"

__all__ = [
    # Main executor
    "run_swarm",
    # Outcome models
    "Ok",
    "Err",
    "Outcome",
    "LogEntry",
    "SwarmStats",
    "read_log_entries",
    # Errors
    "SwarmError",
    "SinkOpenError",
    "SinkWriteError",
    "TaskJoinError",
    # File helpers
    "create_folder",
    "create_file",
    "create_multiple_files",
    # Provider interface
    "BaseProvider",
    "available_providers",
    "get_provider",
    "register_provider",
    # Version
    "__version__",
]
