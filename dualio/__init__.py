"""Write an algorithm once; run it blocking, with a future, or with a callback

Code that does I/O usually gets written twice: once blocking, for callers who
just want an answer, and once non-blocking, for callers running an event loop.
The two copies then drift apart. dualio lets the algorithm be written once, as
a generator function that delegates to other operations with `yield from`:

```
read = dualio.operation(sync=read_sync, errback=read_cb)

@dualio.dual
def load(path):
    text = yield from read(path)
    parts = yield from dualio.wait_all([read(p) for p in includes(text)])
    return combine(text, parts)
```

and then run it under whichever calling convention the caller wants:

```
load.sync(path)                    # returns the value, or raises
await load.future(path)            # inside trio; or use add_done_callback
load.errback(path, callback)       # callback(error, value), exactly once
```

The body of `load` is the same code in all three cases. Only the leaf
operations, built with `dualio.operation`, know how to do their work both
ways; everything above them just passes the handshake through.

## The handshake

Every leaf routine first yields `Signal.START`, and is resumed with a resume
indicator. `None` means "compute your result right now with the blocking
handler". A callable `ResumeToken` means "start the non-blocking handler,
yield `Signal.SUSPEND`, and call the token when your result is ready". So each
leaf suspends at most once, always at the same point, and blocking callers
never see any suspension at all.

The token may be called before the driver gets control back (the data was
already available) or at any later time. The driver, `evaluate_async`, is a
trampoline: an inline firing is noticed and turned into a loop iteration
rather than a recursive call, so long chains of operations which complete
immediately don't grow the stack.

Asynchrony comes only from whatever eventually calls the callbacks passed to
non-blocking handlers; there are no threads, no timeouts, and no cancellation
of work once it has started.

"""
from dualio.errors import (
    ErrorCode,
    DualioError,
    OptionsError,
    ProtocolError,
    ExpectedStartError,
    ExpectedSuspendError,
    RaceNonEmptyError,
    ErrbackNoCallbackError,
)
from dualio.protocol import Signal
from dualio.routine import Routine, RoutineState
from dualio.future import ResultSlot, Future
from dualio.evaluate import evaluate_sync, evaluate_async
from dualio.operation import Operation, OperationOptions, build_operation, operation, dual
from dualio.combinators import wait_all, race
