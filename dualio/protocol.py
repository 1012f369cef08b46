"""The START/SUSPEND handshake between a routine and whatever is driving it

Every Operation's routine yields exactly `Signal.START` first. The driver
answers with a resume indicator: `None` means "finish synchronously, right
now", while a callable `ResumeToken` means "start your non-blocking work, yield
`Signal.SUSPEND`, and call the token once your result is ready".

Routine bodies written by users never yield these values themselves; they only
pass them through with `yield from`. So any other yielded value means someone
wrote `yield` where they meant `yield from`, and the assertions in this module
turn that into a ProtocolError.

"""
from dualio.errors import ExpectedStartError, ExpectedSuspendError
import enum
import typing as t

class Signal(enum.Enum):
    # The version tag in the values lets a future incompatible handshake
    # coexist with this one.
    START = "dualio:v1:start"
    SUSPEND = "dualio:v1:suspend"

class Throwable(t.Protocol):
    def throw(self, exn: BaseException) -> t.Any: ...

def throw_into(routine: Throwable, exn: BaseException) -> t.NoReturn:
    """Raise `exn` at the routine's current `yield`, then raise it here too.

    Throwing into the routine first means the traceback (and a debugger
    stepping through) shows exactly which `yield` produced the bad value.  If
    the routine catches the exception instead of letting it propagate, we
    still raise it, so that user try/excepts can't swallow a protocol bug.

    """
    try:
        routine.throw(exn)
    except StopIteration:
        pass
    raise exn

def assert_start(value: t.Any, routine: Throwable) -> None:
    if value is Signal.START:
        return
    throw_into(routine, ExpectedStartError(
        f"Got unexpected yielded value in dualio routine: {value!r}. "
        "Did you perhaps mean to use 'yield from' instead of 'yield'?"))

def assert_suspend(value: t.Any, routine: Throwable, done: bool=False) -> None:
    if not done and value is Signal.SUSPEND:
        return
    if done:
        msg = "Unexpected routine completion. If you get this, it is probably a dualio bug."
    else:
        msg = f"Expected {Signal.SUSPEND}, got {value!r}. If you get this, it is probably a dualio bug."
    throw_into(routine, ExpectedSuspendError(msg))
