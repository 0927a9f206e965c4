from __future__ import annotations

import dataclasses
import json
import math
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """
    Successful outcome of a single swarm task.

    Attributes:
        value (T): The payload produced by the callable
    """

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    """
    Failed outcome of a single swarm task.

    A per-task failure is an ordinary result, not an executor error.

    Attributes:
        error (E): The error reported (or raised) by the callable
    """

    error: E

    @property
    def is_ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Err[E]]


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _finite(dataclasses.asdict(value), set())
    return str(value)


def _finite(value: Any, seen: set[int]) -> Any:
    """
    Copy a payload with non-finite floats replaced by their names.

    `json.dumps` would otherwise emit bare `NaN`/`Infinity` tokens, which are
    not JSON. Other values are left for `_to_jsonable`.
    """
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, (dict, list, tuple)):
        if id(value) in seen:
            raise ValueError("Circular reference detected")
        seen.add(id(value))
        try:
            if isinstance(value, dict):
                return {key: _finite(item, seen) for key, item in value.items()}
            return [_finite(item, seen) for item in value]
        finally:
            seen.discard(id(value))
    return value


def _stringify_error(error: Any) -> str:
    text = str(error)
    return text if text else repr(error)


@dataclass(frozen=True)
class LogEntry:
    """
    One line of the swarm sink.

    Attributes:
        task (int): 1-based launch index of the task that produced the outcome
        status (str): "success" or "error"
        response (Any): Success payload (only for status "success")
        error (str | None): Stringified error (only for status "error")
    """

    task: int
    status: Literal["success", "error"]
    response: Any = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, index: int, outcome: Outcome[Any, Any]) -> LogEntry:
        """
        Build an entry from a 0-based launch index and the task's outcome.

        Args:
            index (int): Zero-based launch index
            outcome (Outcome): The task's outcome

        Returns:
            LogEntry: Entry whose `task` field is `index + 1`
        """
        if isinstance(outcome, Ok):
            return cls(task=index + 1, status="success", response=outcome.value)
        return cls(task=index + 1, status="error", error=_stringify_error(outcome.error))

    def to_dict(self) -> dict[str, Any]:
        if self.status == "success":
            return {"task": self.task, "status": self.status, "response": self.response}
        return {"task": self.task, "status": self.status, "error": self.error}

    def to_json(self) -> str:
        return json.dumps(_finite(self.to_dict(), set()), default=_to_jsonable, allow_nan=False)


@dataclass
class SwarmStats:
    """
    Summary counters for a finished swarm run.

    Attributes:
        total_tasks (int): Number of tasks launched
        succeeded (int): Number of `Ok` outcomes
        failed (int): Number of `Err` outcomes
        duration_seconds (float): Wall-clock duration of the run
    """

    total_tasks: int = 0
    succeeded: int = 0
    failed: int = 0
    duration_seconds: float = 0.0

    def record(self, outcome: Outcome[Any, Any]) -> None:
        if isinstance(outcome, Ok):
            self.succeeded += 1
        else:
            self.failed += 1
