"""
Optargs faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every error the package
  can produce. Codes are grouped by domain to keep logs/searches predictable.
- OptargsError: base type that carries message + context options and knows how
  to render itself through rich.
- emit(): structured logging of scan-time faults (ERROR severity).
- report(): print a fault on a stderr rich console, for consumers that treat
  the first error as fatal.

Propagation
- Construction faults (InvalidOptstringError, InvalidLongOptionError) are raised
  by the entry points and prevent a Parser from being created.
- Scan faults (InvalidOptionError, UnknownOptionError, MissingArgumentError,
  InvalidArgTypeError, HandlerError) are never raised by the scan loop: they are
  yielded next to a placeholder Option so the consumer keeps full control.
- Registry faults (UnknownCommandError) are raised by the command API.
"""
import logging
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - construction (21xxx)
      • INVALID_OPTSTRING, INVALID_LONG_OPTION
    - scanning (22xxx)
      • INVALID_OPTION, UNKNOWN_OPTION, MISSING_ARGUMENT, INVALID_ARG_TYPE,
        HANDLER_ERROR
    - commands (23xxx)
      • UNKNOWN_COMMAND
    """
    # --- construction errors (21xxx) ---
    INVALID_OPTSTRING   = 21101
    INVALID_LONG_OPTION = 21102

    # --- scan errors (22xxx) ---
    INVALID_OPTION      = 22101
    UNKNOWN_OPTION      = 22102
    MISSING_ARGUMENT    = 22103
    INVALID_ARG_TYPE    = 22104
    HANDLER_ERROR       = 22111

    # --- command errors (23xxx) ---
    UNKNOWN_COMMAND     = 23101


class OptargsError(Exception):
    """
    base type for every fault raised or yielded by optargs.

    attributes
    - message: the one-line description (also str(fault)).
    - options: read-only mapping of context (e.g. input, argv, optstring).
    - code / title / hint: class-level defaults, overridable per instance through
      options of the same name.
    """
    code = None
    title = "error"
    hint = None

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        for name in ("code", "title", "hint"):
            if name in options:
                setattr(self, name, options.pop(name))
        self.options = MappingProxyType(options)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.message == other.message and self.code == other.code

    def __hash__(self):
        return hash((type(self), self.message, self.code))

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        prog = getattr(main, "__prog__", self.options.get("prog", "optargs"))

        header = Text.assemble(
            "[ ",
            Text(str(prog), styles["prog-name"]),
            " — ",
            Text(str(int(self.code)) if self.code is not None else "-", styles["code"]),
            " | ",
            Text(self.title.title(), styles["error-title"]),
            " ]"
        )
        renders = [header, Text(self.message, styles["error-message"])]
        if self.hint:
            renders.append(Text.assemble(Text(" → ", styles["hint-arrow"]), Text(self.hint, styles["hint"])))
        return Group(*renders)


class InvalidOptstringError(OptargsError, ValueError):
    code = FaultCode.INVALID_OPTSTRING
    title = "invalid optstring"
    hint = "option characters must be printable and cannot be ':', ';' or '-'"


class InvalidLongOptionError(OptargsError, ValueError):
    code = FaultCode.INVALID_LONG_OPTION
    title = "invalid long option"
    hint = "long option names must be printable and cannot contain whitespace"


class InvalidOptionError(OptargsError):
    code = FaultCode.INVALID_OPTION
    title = "invalid option"


class UnknownOptionError(OptargsError):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class MissingArgumentError(OptargsError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class InvalidArgTypeError(OptargsError):
    code = FaultCode.INVALID_ARG_TYPE
    title = "invalid argument type"


class HandlerError(OptargsError):
    """
    wraps the failure reported by an option handler.

    the original failure is kept as `error` (and as __cause__ when it was raised).
    """
    code = FaultCode.HANDLER_ERROR
    title = "handler failed"

    def __init__(self, message, /, error=None, **options):
        super().__init__(message, **options)
        self.error = error


class UnknownCommandError(OptargsError, LookupError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


# attributes a LogRecord already owns; extra keys must not collide with them
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def emit(fault, /):
    """
    log a scan-time fault at ERROR severity with structured context.

    the record carries `code` and every context option of the fault as extra
    attributes, so handlers/formatters can pick them up without parsing text.
    """
    extra = {"code": int(fault.code)} | {
        name: value for name, value in fault.options.items() if name not in _RESERVED
    }
    logger.error(fault.message, extra=extra)
    return fault


def report(fault, /, *, console=None):
    """
    print a fault through rich (on stderr unless a console is given).
    """
    if not isinstance(fault, OptargsError):
        raise TypeError("report() argument must be an optargs error")
    (console or Console(stderr=True)).print(fault)


__all__ = (
    "FaultCode",
    "OptargsError",
    "InvalidOptstringError",
    "InvalidLongOptionError",
    "InvalidOptionError",
    "UnknownOptionError",
    "MissingArgumentError",
    "InvalidArgTypeError",
    "HandlerError",
    "UnknownCommandError",
    "emit",
    "report",
)
