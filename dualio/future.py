"""Write-once result holders

A `ResultSlot` is where the two competing completion callbacks of a suspended
routine race to put their result; the first write wins and every later write
is silently dropped.  That is the only synchronization discipline we need,
since everything that writes a slot runs on one logical thread of control.

A `Future` is a slot which can also be watched: callbacks registered with
`add_done_callback` run synchronously, in registration order, as soon as the
slot is filled, and a trio task can block on it with `await`.

"""
from __future__ import annotations
from outcome import Outcome, Value, Error
import logging
import trio
import typing as t

logger = logging.getLogger(__name__)

T = t.TypeVar('T')

class ResultSlot(t.Generic[T]):
    __slots__ = ('outcome',)
    def __init__(self) -> None:
        self.outcome: t.Optional[Outcome] = None

    def fill(self, result: Outcome) -> bool:
        "Store this result if nothing has been stored yet; return whether we stored it."
        if self.outcome is not None:
            return False
        self.outcome = result
        return True

    def set_value(self, value: T) -> bool:
        return self.fill(Value(value))

    def set_error(self, exn: BaseException) -> bool:
        return self.fill(Error(exn))

    def done(self) -> bool:
        return self.outcome is not None

    def get(self) -> T:
        """Return the stored value or raise the stored error.

        Unlike `Outcome.unwrap`, this can be called any number of times.

        """
        if self.outcome is None:
            raise RuntimeError("result slot was read before it was filled")
        if isinstance(self.outcome, Error):
            raise self.outcome.error
        return self.outcome.value

class Future(ResultSlot[T]):
    """The settles-later handle returned by `Operation.future`.

    This has the same `add_done_callback`/`result`/`exception` shape as
    `concurrent.futures.Future` and `asyncio.Future`, so it can be returned
    directly from a `future=` handler of another Operation.

    """
    __slots__ = ('_callbacks',)
    def __init__(self) -> None:
        super().__init__()
        self._callbacks: t.List[t.Callable[[Future[T]], None]] = []

    def fill(self, result: Outcome) -> bool:
        if not super().fill(result):
            return False
        callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            cb(self)
        return True

    def add_done_callback(self, cb: t.Callable[[Future[T]], None]) -> None:
        if self.done():
            cb(self)
        else:
            self._callbacks.append(cb)

    def result(self) -> T:
        return self.get()

    def exception(self) -> t.Optional[BaseException]:
        if self.outcome is None:
            raise RuntimeError("future has not settled yet")
        if isinstance(self.outcome, Error):
            return self.outcome.error
        return None

    async def wait(self) -> T:
        """Block the current trio task until this future settles, then return its result.

        Cancelling the waiting task only stops the wait; whatever is going to
        fill this future keeps running.

        """
        if not self.done():
            task = trio.lowlevel.current_task()
            token = trio.lowlevel.current_trio_token()
            waiting = True
            def reschedule() -> None:
                if waiting:
                    trio.lowlevel.reschedule(task)
            def wake(fut: Future[T]) -> None:
                if not waiting:
                    return
                # The filler may not be running on the trio thread, so we go
                # through the token rather than rescheduling directly.
                try:
                    token.run_sync_soon(reschedule)
                except trio.RunFinishedError:
                    logger.debug("Future(%s).wait: settled after trio.run exited", self)
            def abort(raise_cancel: t.Any) -> trio.lowlevel.Abort:
                nonlocal waiting
                logger.debug("Future(%s).wait: cancelled", self)
                waiting = False
                if wake in self._callbacks:
                    self._callbacks.remove(wake)
                return trio.lowlevel.Abort.SUCCEEDED
            self.add_done_callback(wake)
            await trio.lowlevel.wait_task_rescheduled(abort)
            waiting = False
        return self.get()

    def __await__(self) -> t.Generator[t.Any, None, T]:
        return self.wait().__await__()

    def __repr__(self) -> str:
        if self.outcome is None:
            return "<Future pending>"
        return f"<Future {self.outcome!r}>"
