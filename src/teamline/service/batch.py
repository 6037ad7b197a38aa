# SPDX-License-Identifier: MIT

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Task = Callable[[], Awaitable[T]]


def chunk(items: Sequence[T], size: int) -> list[Sequence[T]]:
    if size <= 0:
        raise ValueError("batch size must be > 0")
    return [items[index : index + size] for index in range(0, len(items), size)]


async def run_in_batches(
    tasks: Sequence[Task[T]],
    batch_size: int,
    fallback: Callable[[int, BaseException], T],
) -> list[T]:
    """
    Run fetch tasks in consecutive, fixed-size concurrent batches.

    Every task of a batch is started at once and the whole batch is awaited
    before the next one starts, which caps the number of requests in flight.
    Results are placed by input index, never by completion order. A task that
    raises is replaced by ``fallback(index, error)``.

    Args:
        tasks: Zero-argument coroutine functions
        batch_size: Maximum number of tasks in flight
        fallback: Produces the value for a failed task

    Returns:
        One result per task, in input order
    """
    results: list[T] = []
    batches = chunk(tasks, batch_size)

    for batch_number, batch in enumerate(batches):
        offset = batch_number * batch_size
        logger.debug(
            "Running batch %d/%d (%d task(s))", batch_number + 1, len(batches), len(batch)
        )
        outcomes = await asyncio.gather(
            *(task() for task in batch), return_exceptions=True
        )
        for position, outcome in enumerate(outcomes):
            if isinstance(outcome, Exception):
                index = offset + position
                logger.warning("Task %d failed, using fallback: %s", index, outcome)
                results.append(fallback(index, outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

    return results
