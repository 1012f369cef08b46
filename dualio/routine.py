"One suspendable execution of an Operation"
from __future__ import annotations
from dualio.protocol import Signal
import enum
import typing as t

T = t.TypeVar('T')

class RoutineState(enum.Enum):
    NOT_STARTED = "not_started"
    AWAITING_RESUME_DECISION = "awaiting_resume_decision"
    SUSPENDED = "suspended"
    DONE = "done"

class Routine(t.Generic[T]):
    """A generator, plus an explicit record of where it is in the handshake.

    A Routine is an iterator with `send` and `throw`, so a routine body can
    delegate to one with `yield from`, and the evaluators can drive one
    directly.  `state` follows the sentinels the routine yields: START puts
    it in AWAITING_RESUME_DECISION, SUSPEND in SUSPENDED, and returning or
    raising in DONE.  A routine built from several Operations passes through
    START and SUSPEND once per Operation.

    """
    __slots__ = ('name', 'state', '_gen')
    def __init__(self, gen: t.Generator[t.Any, t.Any, T], name: t.Optional[str]=None) -> None:
        self.name = name
        self.state = RoutineState.NOT_STARTED
        self._gen = gen

    def _track(self, yielded: t.Any) -> t.Any:
        if yielded is Signal.START:
            self.state = RoutineState.AWAITING_RESUME_DECISION
        elif yielded is Signal.SUSPEND:
            self.state = RoutineState.SUSPENDED
        return yielded

    def send(self, value: t.Any) -> t.Any:
        try:
            return self._track(self._gen.send(value))
        except BaseException:
            self.state = RoutineState.DONE
            raise

    def throw(self, exn: BaseException) -> t.Any:
        try:
            return self._track(self._gen.throw(exn))
        except BaseException:
            self.state = RoutineState.DONE
            raise

    def close(self) -> None:
        self._gen.close()
        self.state = RoutineState.DONE

    def __iter__(self) -> Routine[T]:
        return self

    def __next__(self) -> t.Any:
        return self.send(None)

    def __repr__(self) -> str:
        return f"<Routine {self.name or '?'} {self.state.value}>"
