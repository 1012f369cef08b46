"""Operations: the blocking/non-blocking handler pairs that routines are built from

An Operation is an immutable factory for routines, carrying a name and an
arity as plain fields. There are two ways to make one:

- `operation(sync=..., future=... | errback=...)` pairs a blocking handler
  with an optional non-blocking one. This is how leaf operations, which
  actually touch the outside world, are written.
- `dual(genfn)` wraps a generator function whose body is built out of other
  routines with `yield from`. This is how an algorithm is written once and
  then run under every calling convention.

Either way, the resulting Operation can be called with `op.sync(...)`,
`op.future(...)`, or `op.errback(..., callback)`, or called directly to get a
Routine for use with `yield from` inside another routine body.

"""
from __future__ import annotations
from dataclasses import dataclass
from dualio.errors import OptionsError, ErrbackNoCallbackError
from dualio.evaluate import evaluate_sync, evaluate_async, ResumeToken
from dualio.future import ResultSlot, Future
from dualio.protocol import Signal
from dualio.routine import Routine
import functools
import inspect
import re
import typing as t

T = t.TypeVar('T')

OnValue = t.Callable[[t.Any], None]
OnError = t.Callable[[BaseException], None]
RoutineBody = t.Generator[t.Any, t.Any, T]

@dataclass(frozen=True)
class Operation(t.Generic[T]):
    name: t.Optional[str]
    arity: int
    factory: t.Callable[..., RoutineBody[T]]

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> Routine[T]:
        return Routine(self.factory(*args, **kwargs), self.name)

    def sync(self, *args: t.Any, **kwargs: t.Any) -> T:
        "Run to completion on the blocking path and return the value, or raise."
        return evaluate_sync(self(*args, **kwargs))

    def future(self, *args: t.Any, **kwargs: t.Any) -> Future[T]:
        "Start on the non-blocking path and return a Future for the eventual result."
        fut: Future[T] = Future()
        try:
            routine = self(*args, **kwargs)
        except Exception as e:
            fut.set_error(e)
            return fut
        evaluate_async(routine, fut.set_value, fut.set_error)
        return fut

    def errback(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Start on the non-blocking path; the last positional argument is the completion callback.

        The callback is called exactly once, as `callback(None, value)` on
        success or `callback(error, None)` on failure.

        """
        if not args or not callable(args[-1]):
            raise ErrbackNoCallbackError("Asynchronous function called without callback")
        *call_args, cb = args
        try:
            routine = self(*call_args, **kwargs)
        except Exception as e:
            cb(e, None)
            return
        evaluate_async(routine, lambda value: cb(None, value), lambda err: cb(err, None))

    def __repr__(self) -> str:
        return f"<Operation {self.name or '?'}/{self.arity}>"

def build_operation(
        name: t.Optional[str],
        arity: int,
        sync: t.Callable[..., T],
        nonblocking: t.Callable[..., None],
) -> Operation[T]:
    """Make an Operation whose routines dispatch to `sync` or `nonblocking` depending on how they're driven.

    `sync(*args, **kwargs)` computes the result directly.
    `nonblocking(on_value, on_error, *args, **kwargs)` starts the work and
    arranges for one of the callbacks to be called later, or immediately.

    """
    def body(*args: t.Any, **kwargs: t.Any) -> RoutineBody[T]:
        resume: t.Optional[ResumeToken] = yield Signal.START
        if not resume:
            return sync(*args, **kwargs)

        slot: ResultSlot[T] = ResultSlot()
        def on_value(value: T) -> None:
            if slot.set_value(value):
                resume()
        def on_error(exn: BaseException) -> None:
            if slot.set_error(exn):
                resume()
        try:
            nonblocking(on_value, on_error, *args, **kwargs)
        except Exception as e:
            on_error(e)
        # Suspend until one of the callbacks runs; if one already has, our
        # driver resumes us immediately.
        yield Signal.SUSPEND
        return slot.get()
    return Operation(name, arity, body)

def _handler_name(handler: t.Optional[t.Callable], generic: str, suffix: t.Optional[str]=None) -> t.Optional[str]:
    name = getattr(handler, '__name__', None)
    if not isinstance(name, str) or not name or name in (generic, '<lambda>'):
        return None
    if suffix:
        name = re.sub(f"(_{suffix.lower()}|{suffix})$", "", name) or name
    return name

def positional_arity(func: t.Callable) -> int:
    "The number of leading positional parameters `func` declares without a default."
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return 0
    count = 0
    for param in sig.parameters.values():
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            break
        if param.default is not param.empty:
            break
        count += 1
    return count

@dataclass
class OperationOptions:
    """The configuration record for an Operation built from handlers.

    `sync` is the blocking implementation. At most one of `future` (returns a
    future-like object with `add_done_callback` and `result`) or `errback`
    (takes a trailing `callback(error, value)`) supplies the non-blocking
    implementation; with neither, the non-blocking path just calls `sync`.

    """
    sync: t.Callable[..., t.Any]
    name: t.Optional[str] = None
    arity: t.Optional[int] = None
    future: t.Optional[t.Callable[..., t.Any]] = None
    errback: t.Optional[t.Callable[..., None]] = None

    def validate(self) -> None:
        "Raise OptionsError if these options can't be built into an Operation."
        if not callable(self.sync):
            raise OptionsError("Expected opts.sync to be a function.")
        if self.name is not None and not isinstance(self.name, str):
            raise OptionsError("Expected opts.name to be either a string, or None.")
        if self.arity is not None and (isinstance(self.arity, bool) or not isinstance(self.arity, int)):
            raise OptionsError("Expected opts.arity to be either an int, or None.")
        if self.future is not None and not callable(self.future):
            raise OptionsError("Expected opts.future to be either a function, or None.")
        if self.errback is not None and not callable(self.errback):
            raise OptionsError("Expected opts.errback to be either a function, or None.")
        if self.future is not None and self.errback is not None:
            raise OptionsError("Expected one of either opts.future or opts.errback, but got _both_.")
        if self.resolved_name() is None:
            raise OptionsError("Expected opts.name, or a handler with a usable __name__ to infer it from.")

    def resolved_name(self) -> t.Optional[str]:
        if self.name is not None:
            return self.name
        return (_handler_name(self.sync, 'sync', 'Sync')
                or _handler_name(self.future, 'future', 'Async')
                or _handler_name(self.errback, 'errback'))

    def resolved_arity(self) -> int:
        if self.arity is not None:
            return self.arity
        return positional_arity(self.sync)

    def build(self) -> Operation:
        self.validate()
        sync, future, errback = self.sync, self.future, self.errback
        def nonblocking(on_value: OnValue, on_error: OnError, *args: t.Any, **kwargs: t.Any) -> None:
            if future is not None:
                fut = future(*args, **kwargs)
                if not hasattr(fut, 'add_done_callback'):
                    raise TypeError(f"future handler returned {fut!r}, which has no add_done_callback")
                def on_done(fut: t.Any) -> None:
                    try:
                        value = fut.result()
                    except BaseException as e:
                        on_error(e)
                    else:
                        on_value(value)
                fut.add_done_callback(on_done)
            elif errback is not None:
                def callback(err: t.Optional[BaseException], value: t.Any=None) -> None:
                    if err is None:
                        on_value(value)
                    else:
                        on_error(err)
                errback(*args, callback, **kwargs)
            else:
                on_value(sync(*args, **kwargs))
        return build_operation(self.resolved_name(), self.resolved_arity(), sync, nonblocking)

def operation(
        sync: t.Callable[..., T], *,
        name: t.Optional[str]=None,
        arity: t.Optional[int]=None,
        future: t.Optional[t.Callable[..., t.Any]]=None,
        errback: t.Optional[t.Callable[..., None]]=None,
) -> Operation[T]:
    "Build an Operation out of a blocking handler and an optional non-blocking one; see OperationOptions."
    return OperationOptions(sync=sync, name=name, arity=arity, future=future, errback=errback).build()

def dual(genfn: t.Callable[..., RoutineBody[T]]) -> Operation[T]:
    """Turn a generator function built from other routines into an Operation.

    Usable as a decorator:

    ```
    @dual
    def load(path):
        text = yield from read(path)
        return parse(text)

    load.sync("config.toml")
    ```

    """
    if not callable(genfn):
        raise OptionsError(f"Expected a generator function, got {genfn!r}.")
    @functools.wraps(genfn)
    def factory(*args: t.Any, **kwargs: t.Any) -> RoutineBody[T]:
        return (yield from genfn(*args, **kwargs))
    return Operation(getattr(genfn, '__name__', None), positional_arity(genfn), factory)
