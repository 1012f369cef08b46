"""Drivers for routines: straight-line for the blocking path, a trampoline for the non-blocking one

A routine suspends at most once per Operation it passes through. When driven
by `evaluate_sync` it is never offered a ResumeToken, so it never suspends at
all. When driven by `evaluate_async`, each Operation gets a fresh ResumeToken,
which its non-blocking handler may fire either before `evaluate_async`'s
current step returns (the result was already available) or at some arbitrary
later time.

The first case is the tricky one. If an inline firing called straight back
into the driver, a routine performing a long sequence of operations which all
happen to complete immediately would grow the stack by several frames per
operation. Instead the token notices it is still on the driver's stack, just
records that it fired, and the driver loops.

"""
from __future__ import annotations
from dataclasses import dataclass
from dualio.protocol import assert_start, assert_suspend
from dualio.routine import Routine
import logging
import typing as t

logger = logging.getLogger(__name__)

T = t.TypeVar('T')

def evaluate_sync(routine: Routine[T]) -> T:
    "Run this routine to completion on the blocking path, and return its value."
    while True:
        try:
            value = routine.send(None)
        except StopIteration as e:
            return e.value
        assert_start(value, routine)

@dataclass(eq=False)
class ResumeToken:
    """The callable handed to a suspended routine; calling it means "your result is ready".

    `on_stack` is true while the driving step is still between resuming the
    routine with this token and receiving its SUSPEND; a firing in that window
    is recorded in `resumed_inline` for the step to act on, rather than
    re-entering the step recursively.

    """
    step: t.Callable[[], None]
    on_stack: bool = True
    resumed_inline: bool = False

    def __call__(self) -> None:
        if self.on_stack:
            self.resumed_inline = True
        else:
            logger.debug("ResumeToken(%s): resumed later", self.step)
            self.step()

def evaluate_async(
        routine: Routine[T],
        on_value: t.Callable[[T], None],
        on_error: t.Callable[[Exception], None],
) -> None:
    """Drive this routine on the non-blocking path, reporting its outcome through the callbacks.

    Exactly one of `on_value` or `on_error` is eventually called, exactly
    once; possibly before this function returns. Any exception raised while
    stepping the routine, including a ProtocolError, goes to `on_error`.

    """
    def step() -> None:
        try:
            while True:
                try:
                    value = routine.send(None)
                except StopIteration as e:
                    result: T = e.value
                    break
                assert_start(value, routine)
                token = ResumeToken(step)
                try:
                    out = routine.send(token)
                except StopIteration:
                    assert_suspend(None, routine, done=True)
                token.on_stack = False
                assert_suspend(out, routine)
                if not token.resumed_inline:
                    logger.debug("evaluate_async(%s): suspended", routine)
                    return
                logger.debug("evaluate_async(%s): resumed inline", routine)
        except Exception as e:
            on_error(e)
            return
        on_value(result)
    step()
