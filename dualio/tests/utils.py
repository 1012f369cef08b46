import dualio
import typing as t

import logging
logger = logging.getLogger(__name__)
# logging.basicConfig(level=logging.DEBUG)

class MyException(Exception):
    pass

class Deferred:
    """A leaf operation whose non-blocking completions are held until the test fires them.

    `lookup(key)` returns `f"sync:{key}"` on the blocking path. On the
    non-blocking path it records `key` in `started` and parks its callback
    until `succeed(key, value)` or `fail(key, exn)` is called, which lets a
    test choose exactly which item settles when.

    """
    def __init__(self) -> None:
        self.started: t.List[t.Any] = []
        self.sync_calls: t.List[t.Any] = []
        self._callbacks: t.Dict[t.Any, t.Callable[..., None]] = {}
        def lookup_sync(key: t.Any) -> str:
            self.sync_calls.append(key)
            return f"sync:{key}"
        def lookup_cb(key: t.Any, callback: t.Callable[..., None]) -> None:
            self.started.append(key)
            self._callbacks[key] = callback
        self.lookup = dualio.operation(lookup_sync, errback=lookup_cb)

    def pending(self) -> t.List[t.Any]:
        return list(self._callbacks)

    def succeed(self, key: t.Any, value: t.Any) -> None:
        logger.debug("Deferred: succeeding %s with %s", key, value)
        self._callbacks.pop(key)(None, value)

    def fail(self, key: t.Any, exn: BaseException) -> None:
        logger.debug("Deferred: failing %s with %s", key, exn)
        self._callbacks.pop(key)(exn)

class Collector:
    "Gathers every call made to an errback-style completion callback."
    def __init__(self) -> None:
        self.calls: t.List[t.Tuple[t.Optional[BaseException], t.Any]] = []

    def __call__(self, err: t.Optional[BaseException], value: t.Any) -> None:
        self.calls.append((err, value))

def increment_cb(x: int, callback: t.Callable[..., None]) -> None:
    "A non-blocking handler whose result is always available immediately."
    callback(None, x + 1)

increment = dualio.operation(lambda x: x + 1, name="increment", errback=increment_cb)

@dualio.dual
def count_up(n: int) -> t.Generator[t.Any, t.Any, int]:
    x = 0
    for _ in range(n):
        x = yield from increment(x)
    return x
