from __future__ import annotations

import json
import os
import threading
from typing import IO, Any, Generator

from callswarm.core.errors import SinkOpenError, SinkWriteError
from callswarm.core.models import LogEntry


def stream_jsonl(filepath: str | os.PathLike[str]) -> Generator[dict[str, Any], None, None]:
    with open(filepath, "r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            yield json.loads(line)


def read_log_entries(filepath: str | os.PathLike[str]) -> list[dict[str, Any]]:
    """Load every entry written by a swarm run, in file order."""
    return list(stream_jsonl(filepath))


class SwarmSink:
    """
    Line-oriented output file shared by all tasks of one swarm run.

    The file is truncated when opened, so a run never appends to the
    entries of a previous one. Every `write_line` call holds the lock only
    for the synchronous write and flush of a single line, which keeps lines
    from different tasks whole. The lock must never be held across an
    `await`.

    Attributes:
        path (str): Path of the output file
    """

    def __init__(self, path: str, handle: IO[str]) -> None:
        self.path = path
        self._handle = handle
        self._lock = threading.Lock()
        self.lines_written = 0

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> SwarmSink:
        """
        Create or truncate the output file.

        Args:
            path (str | os.PathLike[str]): Path of the output file

        Returns:
            SwarmSink: An open sink

        Raises:
            SinkOpenError: If the file cannot be opened for writing
        """
        path = os.fspath(path)
        try:
            handle = open(path, mode="w", encoding="utf-8")
        except OSError as e:
            raise SinkOpenError(path, e) from e
        return cls(path, handle)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write_line(self, line: str) -> None:
        try:
            with self._lock:
                self._handle.write(line + "\n")
                self._handle.flush()
                self.lines_written += 1
        except (OSError, ValueError) as e:
            # ValueError: I/O operation on closed file
            raise SinkWriteError(self.path, e) from e

    def write_entry(self, entry: LogEntry) -> None:
        self.write_line(entry.to_json())

    def close(self) -> None:
        with self._lock:
            if not self._handle.closed:
                self._handle.close()

    def __enter__(self) -> SwarmSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
