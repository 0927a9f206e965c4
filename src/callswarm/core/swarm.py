from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from tqdm import tqdm

from callswarm.core.errors import SinkOpenError, SwarmError, TaskJoinError
from callswarm.core.io import SwarmSink
from callswarm.core.models import Err, LogEntry, Ok, Outcome, SwarmStats
from callswarm.file_utils import create_folder
from callswarm.utils import setup_logger, validate_swarm_width

"""
Concurrent swarm executor.

Runs one asynchronous callable N times against a shared resource (usually an
aiohttp ClientSession) and:
- Writes one JSON line per outcome to a freshly truncated output file
- Streams outcomes back through a bounded queue in completion order
- Treats callable failures as ordinary `Err` outcomes
- Aborts the whole run only on output file or task infrastructure failures

Result order follows completion order and is not deterministic. Callers must
not rely on `results[i]` belonging to the i-th launched task; the `task`
field of each output line identifies the producing task.
"""

R = TypeVar("R")
T = TypeVar("T")
E = TypeVar("E")

SwarmCallable = Callable[[R], Awaitable[Any]]

_END_OF_STREAM = object()


async def _invoke(func: SwarmCallable[R], shared_resource: R) -> Outcome[Any, Any]:
    """
    Await one call and normalize its result into an outcome.

    `Ok`/`Err` pass through, any other return value is wrapped in `Ok`, and
    an `Exception` raised by the callable becomes `Err(exception)`.
    """
    try:
        result = await func(shared_resource)
    except Exception as e:
        return Err(e)
    if isinstance(result, (Ok, Err)):
        return result
    return Ok(result)


async def _run_task(
    index: int,
    func: SwarmCallable[R],
    shared_resource: R,
    sink: SwarmSink,
    results_queue: asyncio.Queue[Any],
) -> None:
    outcome = await _invoke(func, shared_resource)
    entry = LogEntry.from_outcome(index, outcome)
    if isinstance(outcome, Ok):
        logger.debug(f"Task {entry.task}: Completed successfully")
    else:
        logger.warning(f"Task {entry.task}: Failed: {entry.error}")

    # The line must be written before the outcome becomes visible to the caller
    sink.write_entry(entry)
    await results_queue.put(outcome)


async def _close_when_done(
    tasks: list[asyncio.Task[None]], results_queue: asyncio.Queue[Any]
) -> None:
    """
    Wait for every producer, then mark the end of the result stream.

    If one task dies with an exception the remaining ones are cancelled,
    since the run is going to fail anyway.
    """
    if tasks:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.wait(pending)
    await results_queue.put(_END_OF_STREAM)


def _raise_for_failed_tasks(tasks: list[asyncio.Task[None]]) -> None:
    for index, task in enumerate(tasks):
        if task.cancelled():
            continue
        exc = task.exception()
        if exc is None:
            continue
        if isinstance(exc, SwarmError):
            raise exc
        raise TaskJoinError(index + 1, exc) from exc

    for index, task in enumerate(tasks):
        if task.cancelled():
            raise TaskJoinError(index + 1, asyncio.CancelledError())


def _log_summary(stats: SwarmStats, output_file: str) -> None:
    logger.info(f"Swarm complete. Results logged to {output_file}")
    logger.info(
        f"Successfully completed {stats.succeeded:,} / {stats.total_tasks:,} tasks "
        f"in {stats.duration_seconds:.1f}s"
    )
    if stats.failed > 0:
        logger.warning(f"{stats.failed:,} / {stats.total_tasks:,} tasks failed")


async def _open_sink(output_file: str, create_parents: bool) -> SwarmSink:
    if create_parents:
        parent = os.path.dirname(output_file)
        if parent:
            try:
                await create_folder(parent)
            except OSError as e:
                raise SinkOpenError(output_file, e) from e
    return SwarmSink.open(output_file)


async def run_swarm(
    func: Callable[[R], Awaitable[Outcome[T, E]]],
    n: int,
    shared_resource: R,
    output_file: str | os.PathLike[str],
    *,
    create_parents: bool = False,
    show_progress: bool = True,
    logging_level: int = 20,
) -> list[Outcome[T, E]]:
    """
    Run an async callable `n` times concurrently and collect every outcome.

    The output file is truncated once before any task starts. Each task calls
    `func(shared_resource)` exactly once, appends one JSON line describing
    its outcome, and only then hands the outcome to the result queue:

        {"task": 3, "status": "success", "response": {...}}
        {"task": 1, "status": "error", "error": "..."}

    Failures of `func` (returned `Err` or a raised `Exception`) are part of
    the returned list. No retries, rate limiting or timeouts are applied;
    wrap `func` for those.

    Args:
        func (Callable[[R], Awaitable[Outcome[T, E]]]): Async callable taking
            the shared resource and returning `Ok`/`Err` (plain values are
            treated as `Ok`)
        n (int): Number of concurrent invocations (>= 0)
        shared_resource (R): Handle passed unchanged to every invocation
        output_file (str | os.PathLike[str]): Path of the JSON-lines log
        create_parents (bool): Create the output file's parent folder if missing
        show_progress (bool): Display a progress bar over completed tasks
        logging_level (int): Loguru logging level (20=INFO, 10=DEBUG)

    Returns:
        list[Outcome[T, E]]: Exactly `n` outcomes in completion order

    Raises:
        ValueError: If `n` is not a non-negative integer
        SinkOpenError: If the output file cannot be opened; no task is started
        SinkWriteError: If a log line cannot be written; the run is aborted
        TaskJoinError: If a task terminates unexpectedly; the run is aborted

    Example:
        >>> async with ClientSession() as session:
        ...     results = await run_swarm(
        ...         provider.as_callable("You are a helpful assistant.", "Hi!"),
        ...         n=4,
        ...         shared_resource=session,
        ...         output_file="responses.jsonl",
        ...     )
    """
    setup_logger(logging_level)
    validate_swarm_width(n)
    output_file = os.fspath(output_file)

    sink = await _open_sink(output_file, create_parents)
    logger.info(f"Starting swarm of {n:,} tasks, logging to {output_file}")

    stats = SwarmStats(total_tasks=n)
    start_time = time.time()
    results: list[Outcome[T, E]] = []
    results_queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=n)
    tasks: list[asyncio.Task[None]] = []
    closer: asyncio.Task[None] | None = None
    pbar = tqdm(total=n, desc="Completed tasks", unit="task", disable=not show_progress)

    try:
        for i in range(n):
            tasks.append(
                asyncio.create_task(
                    _run_task(i, func, shared_resource, sink, results_queue),
                    name=f"swarm-task-{i + 1}",
                )
            )
        # All producers exist from here on; the closer only reports when they are done
        closer = asyncio.create_task(_close_when_done(tasks, results_queue))

        while True:
            item = await results_queue.get()
            if item is _END_OF_STREAM:
                break
            results.append(item)
            stats.record(item)
            pbar.update(1)

        await closer
        try:
            _raise_for_failed_tasks(tasks)
        except SwarmError as e:
            logger.error(f"Swarm aborted: {e}")
            raise
    finally:
        pbar.close()
        leftover = [t for t in (*tasks, closer) if t is not None and not t.done()]
        for task in leftover:
            task.cancel()
        if leftover:
            await asyncio.gather(*leftover, return_exceptions=True)
        sink.close()

    stats.duration_seconds = time.time() - start_time
    _log_summary(stats, output_file)
    return results
