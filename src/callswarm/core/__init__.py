"""Core executor and utilities for concurrent swarm runs."""

from callswarm.core.errors import SinkOpenError, SinkWriteError, SwarmError, TaskJoinError
from callswarm.core.io import SwarmSink, read_log_entries
from callswarm.core.models import Err, LogEntry, Ok, Outcome, SwarmStats
from callswarm.core.swarm import run_swarm

__all__ = [
    # Executor
    "run_swarm",
    # Outcomes
    "Ok",
    "Err",
    "Outcome",
    "LogEntry",
    "SwarmStats",
    # Output sink
    "SwarmSink",
    "read_log_entries",
    # Errors
    "SwarmError",
    "SinkOpenError",
    "SinkWriteError",
    "TaskJoinError",
]
