"Exceptions raised by dualio itself, as opposed to failures coming out of handler code"
import enum

class ErrorCode(str, enum.Enum):
    "Stable identifiers for each kind of dualio error, for callers matching on `DualioError.code`"
    OPTIONS_ERROR = "DUALIO_OPTIONS_ERROR"
    EXPECTED_START = "DUALIO_EXPECTED_START"
    EXPECTED_SUSPEND = "DUALIO_EXPECTED_SUSPEND"
    RACE_NONEMPTY = "DUALIO_RACE_NONEMPTY"
    ERRBACK_NO_CALLBACK = "DUALIO_ERRBACK_NO_CALLBACK"

class DualioError(Exception):
    "Base class for every error dualio raises on its own behalf"
    code: ErrorCode

class OptionsError(DualioError, TypeError):
    """The configuration passed when building an Operation is malformed.

    This is raised at construction time, before any Routine exists, so it
    never travels through a Result Slot.

    """
    code = ErrorCode.OPTIONS_ERROR

class ProtocolError(DualioError):
    """A routine broke the START/SUSPEND handshake.

    This is always a bug in the routine body (typically a bare `yield` where
    `yield from` was meant), never a domain failure; callers shouldn't try to
    recover from it.

    """
    pass

class ExpectedStartError(ProtocolError):
    code = ErrorCode.EXPECTED_START

class ExpectedSuspendError(ProtocolError):
    code = ErrorCode.EXPECTED_SUSPEND

class RaceNonEmptyError(DualioError, ValueError):
    "`race` was given no routines, so there is nothing to win."
    code = ErrorCode.RACE_NONEMPTY

class ErrbackNoCallbackError(DualioError, TypeError):
    "The callback convention was invoked without a trailing callable."
    code = ErrorCode.ERRBACK_NO_CALLBACK
