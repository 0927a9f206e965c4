from __future__ import annotations

"""
Executor-level failures.

These are raised out of `run_swarm` and never appear inside the returned
result collection. Failures of the callable itself are reported as `Err`
outcomes instead.
"""


class SwarmError(Exception):
    """Base class for failures that abort a whole swarm run."""


class SinkOpenError(SwarmError):
    """The output sink could not be created or truncated."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not open output file {path!r}: {cause}")


class SinkWriteError(SwarmError):
    """Appending a log line to the output sink failed."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write to output file {path!r}: {cause}")


class TaskJoinError(SwarmError):
    """A swarm task terminated with an unexpected exception."""

    def __init__(self, task: int, cause: BaseException) -> None:
        self.task = task
        self.cause = cause
        super().__init__(f"Task {task} failed unexpectedly: {type(cause).__name__}: {cause}")
