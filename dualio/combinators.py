"""Fan-out over several routines at once: `wait_all` and `race`

Both take an iterable of already-invoked routines (`op(args)`, not `op`), and
are themselves Operations, so they work under every calling convention and
inside other routine bodies with `yield from`.

On the blocking path there is no concurrency to be had, so `wait_all` runs
each routine in turn and `race` just runs the first one. On the non-blocking
path every routine is started immediately, without waiting on any other.

"""
from dualio.errors import RaceNonEmptyError
from dualio.evaluate import evaluate_sync, evaluate_async
from dualio.operation import build_operation, OnValue, OnError
from dualio.routine import Routine
import logging
import typing as t

logger = logging.getLogger(__name__)

def _wait_all_sync(items: t.Iterable[Routine]) -> t.List[t.Any]:
    return [evaluate_sync(item) for item in list(items)]

def _wait_all_nonblocking(on_value: OnValue, on_error: OnError, items: t.Iterable[Routine]) -> None:
    routines = list(items)
    if not routines:
        on_value([])
        return
    results: t.List[t.Any] = [None]*len(routines)
    remaining = len(routines)
    def settle(i: int, value: t.Any) -> None:
        nonlocal remaining
        results[i] = value
        remaining -= 1
        logger.debug("wait_all: item %d settled, %d remaining", i, remaining)
        if remaining == 0:
            on_value(results)
    for i, routine in enumerate(routines):
        # A failure settles the whole combinator, and the first settlement
        # wins, so the other items just keep running with nobody listening.
        evaluate_async(routine, lambda value, i=i: settle(i, value), on_error)

wait_all = build_operation("all", 1, _wait_all_sync, _wait_all_nonblocking)
"""Wait for every routine, and return their results in input order.

Fails as soon as any routine fails. The others are not cancelled.

"""

def _race_sync(items: t.Iterable[Routine]) -> t.Any:
    routines = list(items)
    if not routines:
        raise RaceNonEmptyError("Must race at least 1 item")
    return evaluate_sync(routines[0])

def _race_nonblocking(on_value: OnValue, on_error: OnError, items: t.Iterable[Routine]) -> None:
    routines = list(items)
    if not routines:
        raise RaceNonEmptyError("Must race at least 1 item")
    for routine in routines:
        evaluate_async(routine, on_value, on_error)

race = build_operation("race", 1, _race_sync, _race_nonblocking)
"""Settle the same way as whichever routine settles first.

On the blocking path only the first routine is ever run. On the
non-blocking path all of them run to completion, and every settlement after
the first is discarded.

"""
