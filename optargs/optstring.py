"""
Optargs entry points: optstring compilation and the getopt family.

Optstring grammar
- Prefix bytes, each honoured once and only before the first option byte:
  • ':'  silence error logging (faults are still yielded)
  • '+'  ParseMode.POSIXLY_CORRECT (stop at the first non-option)
  • '-'  ParseMode.IN_ORDER (non-options yielded as NONOPT options)
  • ';'  long options match ignoring ASCII case
  • '!'  short options match ignoring ASCII case
- Body: "x" (no argument), "x:" (required), "x::" (optional), "W;" (the GNU
  word extension: "-W name" behaves like "--name").
- ':', ';' and '-' are reserved as option bytes; whitespace and non-printable
  characters are rejected. A later definition of a byte replaces an earlier one.

Environment
- POSIXLY_CORRECT (non-empty) selects POSIXLY_CORRECT unless the '-' prefix asks
  for IN_ORDER. It is read once, at compilation, from the `environ` mapping
  (os.environ unless one is given).

Example:
    >>> parser = getopt_long(["-v", "--output=out.txt", "input"], "vo:", [("output", ArgType.REQUIRED)])
    >>> [option for option, fault in parser]
    [Option(name='v', has_arg=False, arg=''), Option(name='output', has_arg=True, arg='out.txt')]
    >>> parser.argv
    ['input']
"""
import logging
import os

from .arguments import ArgType, Flag
from .faults import InvalidOptstringError
from .parser import ParseMode, ParserConfig, Parser, build_long_table
from .utils import *

logger = logging.getLogger(__name__)

PREFIXES = ":+-;!"
RESERVED = ":;-"


def compile_optstring(optstring, /, *, long_only=False, environ=Unset):
    """
    decode an optstring into a ParserConfig and a short option table.

    returns
    - (ParserConfig, dict[str, Flag])

    errors
    - InvalidOptstringError for a reserved or non-printable option byte, a ':'
      without an option before it, or a third ':'.
    """
    if not isinstance(optstring, str):
        raise TypeError("optstring must be a string")
    environ = coalesce(environ, os.environ)

    errors = True
    mode = ParseMode.POSIXLY_CORRECT if environ.get("POSIXLY_CORRECT") else ParseMode.PERMUTE
    short_case_insensitive = long_case_insensitive = gnu_words = False

    seen = set()
    index = 0
    while index < len(optstring) and (c := optstring[index]) in PREFIXES and c not in seen:
        seen.add(c)
        match c:
            case ":":
                errors = False
            case "+":
                mode = ParseMode.POSIXLY_CORRECT
            case "-":
                mode = ParseMode.IN_ORDER
            case ";":
                long_case_insensitive = True
            case "!":
                short_case_insensitive = True
        index += 1

    shorts = {}
    body = optstring[index:]
    while body:
        c, body = body[0], body[1:]
        if not isgraph(c):
            raise InvalidOptstringError(f"invalid option character: {c!r}", input=c, optstring=optstring)
        if c in RESERVED:
            raise InvalidOptstringError(f"invalid option character: {c}", input=c, optstring=optstring)

        if body.startswith("::"):
            has_arg, body = ArgType.OPTIONAL, body[2:]
        elif body.startswith(":"):
            has_arg, body = ArgType.REQUIRED, body[1:]
        elif c == "W" and body.startswith(";"):
            has_arg, body = ArgType.REQUIRED, body[1:]
            gnu_words = True
        else:
            has_arg = ArgType.NONE
        logger.debug("option %r takes %s argument", c, has_arg.name.lower())
        shorts[c] = Flag(c, has_arg)

    config = ParserConfig(
        errors=errors,
        mode=mode,
        short_case_insensitive=short_case_insensitive,
        long_case_insensitive=long_case_insensitive,
        gnu_words=gnu_words,
        long_only=long_only,
    )
    logger.debug("compiled %r into %r", optstring, config)
    return config, shorts


def _getopt(argv, optstring, longopts, /, *, long_only, long_case_insensitive=False,
            command_case_insensitive=False, optional_lookahead=True, environ=Unset):
    config, shorts = compile_optstring(optstring, long_only=long_only, environ=environ)
    config = config.replace(
        long_case_insensitive=config.long_case_insensitive or bool(long_case_insensitive),
        command_case_insensitive=bool(command_case_insensitive),
        optional_lookahead=bool(optional_lookahead),
    )
    return Parser(config, shorts, build_long_table(longopts), argv)


def getopt(argv, optstring, /, **options):
    """
    build a Parser for short options only (POSIX getopt(3)).

    keyword options are those of getopt_long().
    """
    return _getopt(argv, optstring, (), long_only=False, **options)


def getopt_long(argv, optstring, longopts=(), /, **options):
    """
    build a Parser for short and long options (GNU getopt_long(3)).

    parameters
    - argv: Iterable[str], without the program name unless the caller wants it parsed.
    - optstring: str, see the module documentation.
    - longopts: Iterable of Flag | str | (name, has_arg[, handle]).

    keyword options
    - long_case_insensitive: bool, same as the ';' prefix.
    - command_case_insensitive: bool, subcommand lookup ignores ASCII case.
    - optional_lookahead: bool (default True), optional arguments may be taken
      from the next argv element.
    - environ: Mapping consulted for POSIXLY_CORRECT (defaults to os.environ).

    errors
    - InvalidOptstringError / InvalidLongOptionError; no Parser is created.
    """
    return _getopt(argv, optstring, longopts, long_only=False, **options)


def getopt_long_only(argv, optstring, longopts=(), /, **options):
    """
    like getopt_long(), but "-name" is tried as a long option first
    (GNU getopt_long_only(3)); when no long option matches and short options
    are defined on the parser or an ancestor, the word is parsed as a short
    option cluster.
    """
    return _getopt(argv, optstring, longopts, long_only=True, **options)


__all__ = (
    "compile_optstring",
    "getopt",
    "getopt_long",
    "getopt_long_only",
)
