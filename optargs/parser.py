"""
Optargs parsing engine: tables, resolvers and the scan loop.

What this module provides
- ParseMode / ParserConfig: the behavior switches decoded from an optstring
  prefix (or chosen by the caller).
- build_long_table(): validates long option descriptors and indexes them by name.
- Parser: the mutable scan state. It owns the residual argument vector, the
  short (character → Flag) and long (name → Flag) tables, the configuration, a
  weak back reference to the parser it is registered under, and its subcommand
  registry.

Scanning
- Parser.options() is a lazy, single-use generator of (Option, fault) pairs:
  • "--" stops option parsing; everything after it is positional.
  • "--name", "--name=value", "--name value" go through the long resolver.
  • "-abc" is a cluster of short options; an option taking an argument
    consumes the rest of the cluster ("-ovalue") or the next element ("-o value").
  • in long-only mode "-name" is first probed as a long option.
  • anything else is a non-option: a registered subcommand takes over the rest
    of argv, otherwise the ParseMode decides (stage, yield as NONOPT, or stop).
- Faults never escape the generator; they are yielded next to Option().
- Whatever way the generator ends (exhausted, closed, or garbage collected) the
  parser's argv becomes: staged non-options + unconsumed elements, exactly once.

Inheritance
- Both resolvers walk self → parent → grandparent..., so options registered on
  a parent are available inside its subcommands. The child's own definitions
  shadow the parent's.
"""
import logging
import weakref
from collections.abc import Mapping
from enum import IntEnum
from typing import NamedTuple

from .arguments import ArgType, Flag, Option, NONOPT
from .commands import CommandRegistry
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class ParseMode(IntEnum):
    """
    how non-option arguments are handled.

    - PERMUTE: stage them and keep scanning; they end up in front of argv.
    - IN_ORDER: yield each one as Option(NONOPT, False, arg).
    - POSIXLY_CORRECT: stop scanning at the first one.
    """
    PERMUTE = 0
    IN_ORDER = 1
    POSIXLY_CORRECT = 2


class ParserConfig(NamedTuple):
    """
    immutable behavior switches of a Parser.

    - errors: log scan faults at ERROR severity (cleared by a leading ':').
    - mode: ParseMode ('+' → POSIXLY_CORRECT, '-' → IN_ORDER).
    - short_case_insensitive: '!' prefix; short lookups also try the other ASCII case.
    - long_case_insensitive: ';' prefix; long names compare ignoring ASCII case.
    - gnu_words: 'W;' in the optstring; "-W name" behaves like "--name".
    - long_only: set by getopt_long_only(); "-name" is probed as a long option.
    - command_case_insensitive: subcommand lookup ignores ASCII case.
    - optional_lookahead: optional arguments may come from the next argv element.
    """
    errors: bool = True
    mode: ParseMode = ParseMode.PERMUTE
    short_case_insensitive: bool = False
    long_case_insensitive: bool = False
    gnu_words: bool = False
    long_only: bool = False
    command_case_insensitive: bool = False
    optional_lookahead: bool = True

    def replace(self, /, **changes):
        """
        return a copy with the given fields changed.
        """
        return self._replace(**changes)


def _as_flag(descriptor):
    # accepted shapes: Flag, "name", (name, has_arg) or (name, has_arg, handle)
    if isinstance(descriptor, Flag):
        return descriptor
    if isinstance(descriptor, str):
        return Flag(descriptor)
    if isinstance(descriptor, tuple) and 1 <= len(descriptor) <= 3:
        return Flag(*descriptor)
    raise TypeError("long option descriptor must be a flag, a name or a (name, has_arg) tuple")


def _check_short_name(c):
    if not isinstance(c, str) or len(c) != 1:
        raise InvalidOptstringError(f"invalid short option: {c!r}", input=c)
    if not isgraph(c):
        raise InvalidOptstringError(f"invalid short option: {c!r}", input=c)
    if c in ":;-":
        raise InvalidOptstringError(f"prohibited short option: {c}", input=c)


def _check_long_name(name):
    if not isinstance(name, str):
        raise TypeError("long option name must be a string")
    if not name or not isgraph(name):
        raise InvalidLongOptionError(f"invalid long option: {name!r}", input=name)


def build_long_table(longopts, /):
    """
    validate long option descriptors and index them by name.

    parameters
    - longopts: Iterable of Flag | str | (name, has_arg[, handle]).

    errors
    - InvalidLongOptionError for an empty name, a name containing whitespace or a
      non-printable character, or a name given twice.
    """
    table = {}
    for descriptor in longopts:
        flag = _as_flag(descriptor)
        _check_long_name(flag.name)
        if flag.name in table:
            raise InvalidLongOptionError(f"duplicate long option: {flag.name}", input=flag.name)
        table[flag.name] = flag
    return table


class Parser:
    """
    Scan state for one argument vector.

    Lifecycle
    - Built by getopt()/getopt_long()/getopt_long_only() from an optstring, or
      directly from pre-built tables (subcommand wiring, handler-carrying flags).
    - Drained once through options(); argv then holds the positional residue.
      Subcommands are re-armed through reset() (see execute_command()).

    Parameters
    - config: ParserConfig | Unset (defaults to ParserConfig()).
    - shorts: Mapping[str, Flag] keyed by option character.
    - longs: Mapping[str, Flag] keyed by name, or an iterable of long descriptors
      (see build_long_table()).
    - argv: Iterable[str], copied into a fresh list.

    Errors
    - InvalidOptstringError for a short key that is not a single printable
      character, or is one of ':', ';', '-'.
    - InvalidLongOptionError for an invalid long name.
    """
    config = mirror("config")
    shorts = mirror("shorts")
    longs = mirror("longs")
    commands = mirror("commands")
    dispatched = mirror("dispatched")

    def __init__(self, config=Unset, shorts=Unset, longs=Unset, argv=()):
        config = coalesce(config, ParserConfig())
        if not isinstance(config, ParserConfig):
            raise TypeError("parser 'config' must be a parser-config")

        self._shorts = {}
        for c, flag in dict(coalesce(shorts, {})).items():
            _check_short_name(c)
            if not isinstance(flag, Flag):
                raise TypeError(f"short option {c!r} must map to a flag")
            self._shorts[c] = flag

        longs = coalesce(longs, {})
        if isinstance(longs, Mapping):
            for name, flag in longs.items():
                _check_long_name(name)
                if not isinstance(flag, Flag):
                    raise TypeError(f"long option {name!r} must map to a flag")
            self._longs = dict(longs)
        else:
            self._longs = build_long_table(longs)

        if isinstance(argv, str):
            raise TypeError("parser 'argv' must be an iterable of strings, not a string")
        self._config = config
        self._parent = None
        self._commands = CommandRegistry()
        self.reset(argv)

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())

    def __rich_repr__(self):
        yield "argv", self.argv
        yield "shorts", "".join(self._shorts)
        yield "longs", tuple(self._longs)
        yield "commands", tuple(self._commands)
        yield "config", self._config

    def __iter__(self):
        return self.options()

    @property
    def non_opts(self):
        """
        the non-options staged so far (PERMUTE mode), before they are moved
        in front of argv at the end of the scan.
        """
        return tuple(self._non_opts)

    @property
    def parent(self):
        """
        the parser this one is registered under, or None.

        the reference is weak: a parent is only consulted during option lookup.
        """
        return self._parent() if self._parent is not None else None

    @property
    def lineage(self):
        """
        self followed by every ancestor, nearest first (the lookup order).
        """
        lineage = [parser := self]
        while parser := parser.parent:
            lineage.append(parser)
        return tuple(lineage)

    @property
    def root(self):
        """
        the topmost parser of the command hierarchy.
        """
        return self.lineage[-1]

    def reset(self, argv, /):
        """
        replace the argument vector and forget any staged non-options.
        """
        self.argv = list(argv)
        self._non_opts = []
        self._dispatched = None

    def _fault(self, kind, message, /, *, log=True, **options):
        fault = kind(message, **options)
        if log and self._config.errors:
            emit(fault)
        return fault

    # ── Resolvers ─────────────────────────────────────────────────────────────

    def _find_short(self, c, rest, argv, /, *, log=True):
        """
        resolve the option character `c` taken from a scan word.

        purpose
        - look `c` up in self, then in each ancestor; a parser with
          short_case_insensitive also tries the opposite ASCII case.
        - take the option's argument according to its arity:
          • REQUIRED: the rest of the word, else argv[0] (popped), else a fault.
          • OPTIONAL: the rest of the word, else argv[0] when lookahead is on.

        returns
        - (flag, option, rest, fault): rest replaces the scan word; argv is
          consumed in place.
        """
        if c == "-":
            return None, Option(), rest, self._fault(InvalidOptionError, f"invalid option: {c}", log=log, input=c)

        for parser in self.lineage:
            name = c
            flag = parser._shorts.get(name)
            if flag is None and parser._config.short_case_insensitive:
                flag = parser._shorts.get(name := swapcase(c))
            if flag is not None:
                break
        else:
            return None, Option(), rest, self._fault(UnknownOptionError, f"unknown option: {c}", log=log, input=c)

        match flag.has_arg:
            case ArgType.NONE:
                return flag, Option(name), rest, None
            case ArgType.REQUIRED:
                if rest:
                    return flag, Option(name, True, rest), "", None
                if argv:
                    return flag, Option(name, True, argv.pop(0)), rest, None
                return flag, Option(), rest, self._fault(
                    MissingArgumentError, f"option requires an argument: {c}", log=log, input=c
                )
            case ArgType.OPTIONAL:
                if rest:
                    return flag, Option(name, True, rest), "", None
                if argv and self._config.optional_lookahead:
                    return flag, Option(name, True, argv.pop(0)), rest, None
                return flag, Option(name), rest, None
            case _:
                return flag, Option(), rest, self._fault(
                    InvalidArgTypeError, f"unknown argument type: {flag.has_arg!r}", log=log, input=c
                )

    def _find_long(self, name, argv, /, *, log=True):
        """
        resolve a long option spelled `name` (the text after the dashes).

        purpose
        - collect every registered name, in self and its ancestors, that is a
          prefix of `name` (ASCII case-insensitive per that parser's config).
        - try them longest first (self before ancestors on equal length):
          • an exact match takes its argument per arity, from argv when needed.
          • a strict prefix followed by '=' splits there: the tail is the
            argument; a NONE-arity candidate cannot split and is skipped.
          • a strict prefix followed by anything else does not match.

        returns
        - (flag, option, fault); argv is consumed in place on success only.

        notes
        - '=' may be part of a registered name, which is why candidates are
          prefix-matched instead of splitting the input at its first '='.
        """
        candidates = []
        for parser in self.lineage:
            fold = parser._config.long_case_insensitive
            for registered, flag in parser._longs.items():
                if len(registered) <= len(name) and hasprefix(name, registered, fold):
                    candidates.append((registered, flag))
        candidates.sort(key=lambda candidate: len(candidate[0]), reverse=True)

        for registered, flag in candidates:
            if len(registered) == len(name):
                match flag.has_arg:
                    case ArgType.NONE:
                        return flag, Option(registered), None
                    case ArgType.REQUIRED:
                        if argv:
                            return flag, Option(registered, True, argv.pop(0)), None
                        return flag, Option(), self._fault(
                            MissingArgumentError, f"option requires an argument: {name}", log=log, input=name
                        )
                    case ArgType.OPTIONAL:
                        if argv and self._config.optional_lookahead:
                            return flag, Option(registered, True, argv.pop(0)), None
                        return flag, Option(registered), None
                    case _:
                        return flag, Option(), self._fault(
                            InvalidArgTypeError, f"unknown argument type: {flag.has_arg!r}", log=log, input=name
                        )
            elif name[len(registered)] == "=":
                if flag.has_arg == ArgType.NONE:
                    continue
                if flag.has_arg not in (ArgType.REQUIRED, ArgType.OPTIONAL):
                    return flag, Option(), self._fault(
                        InvalidArgTypeError, f"unknown argument type: {flag.has_arg!r}", log=log, input=name
                    )
                return flag, Option(registered, True, name[len(registered) + 1:]), None

        if name.startswith("-"):
            # "---..." with no registered name to explain it
            return None, Option(), self._fault(InvalidOptionError, f"invalid option: -{name}", log=log, input=name)
        return None, Option(), self._fault(UnknownOptionError, f"unknown option: {name}", log=log, input=name)

    def _find_word(self, word, argv, /):
        """
        resolve the argument of "-W word" as if "--word" had been given.

        when no long option matches, the word itself becomes the option name.
        """
        flag, option, fault = self._find_long(word, argv, log=False)
        if isinstance(fault, UnknownOptionError):
            return None, Option(word), None
        if fault is not None and self._config.errors:
            emit(fault)
        return flag, option, fault

    # ── Handlers ──────────────────────────────────────────────────────────────

    def _invoke(self, flag, option, /):
        """
        call the flag's handler; return None on success or the fault to yield.

        a handler fails by raising, or by returning anything but None. optargs
        errors pass through as-is; everything else is wrapped in HandlerError.
        """
        try:
            result = flag.handle(option.name, option.arg)
        except OptargsError as error:
            fault = error
        except Exception as error:
            fault = HandlerError(str(error) or f"handler for option {option.name} failed", error, input=option.name)
            fault.__cause__ = error
        else:
            if result is None:
                return None
            if isinstance(result, OptargsError):
                fault = result
            else:
                fault = HandlerError(str(result) or f"handler for option {option.name} failed", result, input=option.name)
        if self._config.errors:
            emit(fault)
        return fault

    def _replace_flag(self, table, key, handle, /):
        # a flag object shared between tables is the same option: rebind every occurrence
        previous = table[key]
        bound = previous.bind(handle)
        for other in (self._shorts, self._longs):
            for name, flag in other.items():
                if flag is previous:
                    other[name] = bound
        return bound

    def set_short_handler(self, c, handle, /):
        """
        attach `handle` to the short option `c` of this parser (not its ancestors).

        errors
        - UnknownOptionError when `c` is not registered here.
        """
        if c not in self._shorts:
            raise UnknownOptionError(f"unknown short option: {c}", input=c)
        return self._replace_flag(self._shorts, c, handle)

    def set_long_handler(self, name, handle, /):
        """
        attach `handle` to the long option `name` of this parser (not its ancestors).

        errors
        - UnknownOptionError when `name` is not registered here.
        """
        if name not in self._longs:
            raise UnknownOptionError(f"unknown long option: {name}", input=name)
        return self._replace_flag(self._longs, name, handle)

    def set_handler(self, spelling, handle, /):
        """
        attach `handle` using the command-line spelling: "--name" or "-c".

        errors
        - ValueError for a spelling without a dash prefix.
        - UnknownOptionError when the option is not registered here.
        """
        if not isinstance(spelling, str):
            raise TypeError("set_handler() first argument must be a string")
        if spelling.startswith("--") and len(spelling) > 2:
            return self.set_long_handler(spelling[2:], handle)
        if spelling.startswith("-") and len(spelling) == 2 and spelling != "--":
            return self.set_short_handler(spelling[1], handle)
        raise ValueError(f"set_handler() expects '-c' or '--name', got {spelling!r}")

    # ── Commands ──────────────────────────────────────────────────────────────

    def add_command(self, name, parser, /):
        """
        register `parser` as the subcommand `name` and make self its parent.

        errors
        - ValueError when `parser` is self or one of self's ancestors.
        """
        if not isinstance(parser, Parser):
            raise TypeError("add_command() second argument must be a parser")
        if any(parser is ancestor for ancestor in self.lineage):
            raise ValueError("a parser cannot be registered under itself or its descendants")
        parser._parent = weakref.ref(self)
        return self._commands.add(name, parser)

    def add_alias(self, alias, existing, /):
        """
        make `alias` another name of the registered command `existing`.
        """
        return self._commands.alias(alias, existing)

    def get_command(self, name, /):
        """
        look a subcommand up (honours command_case_insensitive); None on a miss.
        """
        return self._commands.get(name, fold=self._config.command_case_insensitive)

    def has_commands(self):
        return len(self._commands) > 0

    def aliases_of(self, parser, /):
        """
        every name (canonical and aliases) under which `parser` is registered.
        """
        return self._commands.names(parser)

    def execute_command(self, name, argv, /):
        """
        prepare the subcommand `name` to scan `argv` and return it.

        the child's argv is replaced, its staged non-options are cleared and its
        parent is (re)wired to self. the child is not iterated.
        """
        parser = self._commands.execute(name, argv, fold=self._config.command_case_insensitive)
        parser._parent = weakref.ref(self)
        return parser

    # ── Scan loop ─────────────────────────────────────────────────────────────

    def _dispatch(self, flag, option, fault, /):
        # yield form of a resolution: (option, fault), or None when a handler consumed it
        if fault is not None:
            return Option(), fault
        if flag is not None and flag.handle is not None:
            if (fault := self._invoke(flag, option)) is not None:
                return Option(), fault
            return None
        return option, None

    def options(self):
        """
        scan argv and yield (Option, fault) pairs lazily.

        phases
        - per element
          • "--": popped; scanning ends.
          • "--name...": long resolver.
          • "-x..." (two or more characters): long probe when long_only, then
            short cluster expansion.
          • other: subcommand dispatch, else the ParseMode policy.
        - cleanup (finally): argv = staged non-options + unconsumed elements.

        yielding
        - recognized options: (Option(...), None).
        - faults: (Option(), fault), scanning continues with the next element.
        - options whose flag carries a handler are not yielded; the handler runs
          instead and only its failure is yielded.
        - a subcommand's stream is yielded in place, then scanning stops.

        invariants
        - options come out in argv order, cluster characters left to right.
        - a handler failure inside a cluster is yielded; the cluster goes on.
        """
        logger.debug("scanning %r", self.argv)
        try:
            while self.argv:
                arg = self.argv[0]
                logger.debug("element %r", arg)

                if arg == "--":
                    del self.argv[0]
                    break

                if arg.startswith("--"):
                    del self.argv[0]
                    if (result := self._dispatch(*self._find_long(arg[2:], self.argv))) is not None:
                        yield result
                    continue

                if arg.startswith("-") and len(arg) > 1:
                    del self.argv[0]

                    if self._config.long_only:
                        flag, option, fault = self._find_long(arg[1:], self.argv, log=False)
                        if not isinstance(fault, UnknownOptionError) or not any(p._shorts for p in self.lineage):
                            if fault is not None and self._config.errors:
                                emit(fault)
                            if (result := self._dispatch(flag, option, fault)) is not None:
                                yield result
                            continue

                    word = arg[1:]
                    while word:
                        flag, option, word, fault = self._find_short(word[0], word[1:], self.argv)
                        if fault is None and self._config.gnu_words and option.name == "W" and option.has_arg:
                            flag, option, fault = self._find_word(option.arg, self.argv)
                        if fault is None and flag is not None and flag.handle is not None:
                            if (fault := self._invoke(flag, option)) is not None:
                                yield Option(), fault
                            continue
                        yield (Option(), fault) if fault is not None else (option, None)
                    continue

                if self._commands and self.get_command(arg) is not None:
                    del self.argv[0]
                    child = self.execute_command(arg, self.argv)
                    self.argv = []
                    self._dispatched = child
                    logger.debug("dispatching %r to subcommand", child.argv)
                    yield from child.options()
                    break

                match self._config.mode:
                    case ParseMode.PERMUTE:
                        self._non_opts.append(self.argv.pop(0))
                    case ParseMode.IN_ORDER:
                        yield Option(NONOPT, False, self.argv.pop(0)), None
                    case ParseMode.POSIXLY_CORRECT:
                        break
        finally:
            self.argv = [*self._non_opts, *self.argv]
            self._non_opts = []


__all__ = (
    "ParseMode",
    "ParserConfig",
    "Parser",
    "build_long_table",
)
