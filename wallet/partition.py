"""
Partition Planner

Splits a collection of payments into contiguous, near-equal ranges, one per
worker. All partitions but the last have the same ceiling-rounded size and the
last one absorbs the remainder, so the sizes always add up to the total.
"""

import logging
from typing import List

from .models import Partition


logger = logging.getLogger("wallet.partition")


def effective_worker_count(total_items: int, worker_count: int) -> int:
    """
    Number of workers that will actually receive a partition

    Args:
        total_items: Size of the collection being split
        worker_count: Requested number of workers (values below 1 mean 1)

    Returns:
        Worker count clamped so that every partition holds at least one item
        (or exactly 1 for an empty collection)
    """
    if total_items < 0:
        raise ValueError(f"total_items must be non-negative, got {total_items}")

    workers = max(1, worker_count)
    if total_items == 0:
        return 1

    workers = min(workers, total_items)
    chunk = -(-total_items // workers)

    # With ceiling-sized chunks fewer workers may be enough to cover every
    # item, e.g. 5 items over 4 workers -> chunks of 2 -> 3 workers
    return -(-total_items // chunk)


def plan_partitions(total_items: int, worker_count: int) -> List[int]:
    """
    Compute partition sizes for a collection

    Args:
        total_items: Size of the collection being split
        worker_count: Requested number of workers

    Returns:
        Ordered list of partition sizes summing to total_items; [0] for an
        empty collection
    """
    workers = effective_worker_count(total_items, worker_count)
    if total_items == 0:
        return [0]

    chunk = -(-total_items // workers)
    sizes = [chunk] * (workers - 1)
    sizes.append(total_items - sum(sizes))

    logger.debug(
        f"Planned {len(sizes)} partitions for {total_items} items "
        f"(requested {worker_count} workers): {sizes}"
    )
    return sizes


def partition_ranges(total_items: int, worker_count: int) -> List[Partition]:
    """Convert planned sizes into contiguous index ranges"""
    partitions = []
    start = 0
    for index, size in enumerate(plan_partitions(total_items, worker_count)):
        partitions.append(Partition(index=index, start=start, end=start + size))
        start += size
    return partitions
