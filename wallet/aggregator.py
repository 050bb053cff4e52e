"""
Parallel Aggregation Module

Sums and filters payment lists with a fixed number of worker threads. The
payment list is snapshotted once, split into contiguous partitions by the
planner, and each worker reduces its own slice without any locking. Only the
merge of a worker's partial result into the shared accumulator happens under
a lock. Every call blocks until all workers have been joined.
"""

import logging
import threading
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .config import get_config
from .errors import AccountNotFoundError
from .models import Money, Partition, Payment
from .partition import partition_ranges


logger = logging.getLogger("wallet.aggregator")


def _resolve_workers(worker_count: Optional[int]) -> int:
    if worker_count is None:
        return get_config().default_workers
    return worker_count


def _fan_out(
    snapshot: Sequence[Payment],
    partitions: List[Partition],
    reduce_slice: Callable[[Sequence[Payment]], Any],
    merge: Callable[[Partition, Any], None]
) -> None:
    """
    Run one thread per partition and wait for all of them

    reduce_slice runs without the lock; merge is always called while holding
    it, so merge may freely mutate shared state. The first worker error is
    re-raised in the caller after every thread has finished. If a thread
    fails to start, the ones already running are joined before the error
    propagates.
    """
    lock = threading.Lock()
    errors: List[BaseException] = []

    def worker(partition: Partition) -> None:
        try:
            partial = reduce_slice(snapshot[partition.start:partition.end])
        except Exception as e:
            with lock:
                errors.append(e)
            return

        with lock:
            merge(partition, partial)

    threads = [
        threading.Thread(
            target=worker,
            args=(partition,),
            name=f"wallet-aggregator-{partition.index}",
            daemon=True
        )
        for partition in partitions
    ]
    started = []
    try:
        for thread in threads:
            thread.start()
            started.append(thread)
    finally:
        for thread in started:
            thread.join()

    if errors:
        logger.error(f"{len(errors)} aggregation worker(s) failed: {errors[0]!r}")
        raise errors[0]


def _sum_amounts(payments: Iterable[Payment]) -> Money:
    total = 0
    for payment in payments:
        total += payment.amount
    return total


def sum_payments(payments: Sequence[Payment], worker_count: Optional[int] = None) -> Money:
    """
    Sum the amounts of all payments

    Args:
        payments: Payments to sum; every status is included
        worker_count: Number of worker threads (config default when None)

    Returns:
        Total amount in minor units; 0 for an empty list
    """
    snapshot = tuple(payments)
    partitions = partition_ranges(len(snapshot), _resolve_workers(worker_count))

    if len(partitions) == 1:
        return _sum_amounts(snapshot)

    total = 0

    def merge(partition: Partition, partial: Money) -> None:
        nonlocal total
        total += partial

    _fan_out(snapshot, partitions, _sum_amounts, merge)

    logger.debug(f"Summed {len(snapshot)} payments across {len(partitions)} workers: {total}")
    return total


def filter_payments_by_fn(
    payments: Sequence[Payment],
    predicate: Callable[[Payment], bool],
    worker_count: Optional[int] = None
) -> List[Payment]:
    """
    Select payments matching a predicate

    Each worker stores its matches in the slot of its partition index; the
    slots are concatenated in partition order, so the result keeps the input
    order regardless of which worker finishes first.

    Args:
        payments: Payments to scan
        predicate: Function returning True for payments to keep
        worker_count: Number of worker threads (config default when None)

    Returns:
        Copies of the matching payments, in input order
    """
    snapshot = tuple(payments)
    partitions = partition_ranges(len(snapshot), _resolve_workers(worker_count))

    def select(chunk: Sequence[Payment]) -> List[Payment]:
        return [payment.copy() for payment in chunk if predicate(payment)]

    if len(partitions) == 1:
        return select(snapshot)

    slots: List[List[Payment]] = [[] for _ in partitions]

    def merge(partition: Partition, matches: List[Payment]) -> None:
        slots[partition.index] = matches

    _fan_out(snapshot, partitions, select, merge)

    result = []
    for slot in slots:
        result.extend(slot)
    return result


def filter_payments(
    payments: Sequence[Payment],
    account_id: int,
    worker_count: Optional[int] = None,
    known_account_ids: Optional[Iterable[int]] = None
) -> List[Payment]:
    """
    Select the payments of one account

    The account existence check only runs when known_account_ids is given;
    without it an unknown account_id simply matches nothing and gives [].
    WalletService.filter_payments always passes its registered account ids.

    Args:
        payments: Payments to scan
        account_id: Account whose payments are wanted
        worker_count: Number of worker threads (config default when None)
        known_account_ids: Registered account ids; required for the
            AccountNotFoundError check, which runs before any worker starts

    Returns:
        Copies of the account's payments, in input order

    Raises:
        AccountNotFoundError: account_id is not among known_account_ids
    """
    if known_account_ids is not None and account_id not in set(known_account_ids):
        raise AccountNotFoundError()

    result = filter_payments_by_fn(
        payments, lambda payment: payment.account_id == account_id, worker_count
    )

    logger.debug(f"Filtered {len(result)} payments for account {account_id}")
    return result
