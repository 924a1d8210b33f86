"""
Chunked concurrency for document conversion.

Items are split into contiguous chunks of at most ``limit`` items. Chunks run
one after another; the items of a chunk run concurrently and the next chunk
starts only after every item of the current one has settled. A failure is
captured as that item's outcome and affects nothing else.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar, Union


T = TypeVar("T")
R = TypeVar("R")

Outcome = Union[R, BaseException]


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Split ``items`` into ceil(len/size) contiguous chunks, preserving order.

    Raises:
        ValueError: If size is smaller than 1
    """
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def run_chunked(items: Sequence[T], task: Callable[[T], Awaitable[R]],
                      limit: int) -> List[Outcome]:
    """
    Run ``task`` over every item with at most ``limit`` tasks in flight.

    Args:
        items: Work items, in the order results are wanted
        task: Coroutine function applied to each item
        limit: Chunk size, i.e. the concurrency cap

    Returns:
        One outcome per item, in input order: the task's return value, or the
        exception it raised
    """
    chunks = chunked(items, limit)
    logging.info(f"Processing {len(items)} files in {len(chunks)} parallel chunks.")

    outcomes: List[Outcome] = []
    for chunk_index, chunk in enumerate(chunks, 1):
        logging.info(f"Processing chunk {chunk_index} with {len(chunk)} files.")
        settled = await asyncio.gather(*(task(item) for item in chunk), return_exceptions=True)
        outcomes.extend(settled)
    return outcomes
