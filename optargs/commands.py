"""
Optargs command layer: the subcommand registry.

What this module provides
- CommandRegistry: a name → Parser mapping with aliases and optional
  case-insensitive lookup. A Parser owns one registry (Parser.commands) and
  delegates its command API to it.

Core ideas
- Aliases are extra keys pointing at the same child parser; the registry keeps
  a parallel alias → canonical-name table so aliases can be listed and told apart.
- Lookups try the exact spelling first; only on a miss, and only when asked to,
  they fall back to ASCII case-insensitive comparison.
- The registry never walks parents and never iterates children: preparing a
  command only resets the child's argument buffer (see execute()).
"""
from collections.abc import Mapping

from .faults import UnknownCommandError
from .utils import *


class CommandRegistry(Mapping):
    """
    name → Parser mapping for subcommands.

    Behavior
    - registry[name] is an exact lookup (KeyError on a miss), like any mapping.
    - get(name, fold=True) adds the case-insensitive fallback.
    - Iteration yields canonical names and aliases alike, in registration order.
    """

    def __init__(self):
        self._commands = {}
        self._aliases = {}

    def __getitem__(self, name, /):
        return self._commands[name]

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"command-registry({', '.join(map(repr, self._commands))})"

    # read-only alias → canonical-name view
    aliases = mirror("aliases")

    def add(self, name, parser, /):
        """
        register `parser` under `name` and return it (for chaining).

        re-registering a name replaces the previous parser; an alias of the same
        spelling is turned into a canonical name.
        """
        if not isinstance(name, str):
            raise TypeError("command name must be a string")
        if not name:
            raise ValueError("command name cannot be empty")
        self._aliases.pop(name, None)
        self._commands[name] = parser
        return parser

    def alias(self, alias, existing, /):
        """
        make `alias` resolve to the parser registered as `existing`.

        errors
        - UnknownCommandError when `existing` is not registered.
        """
        if not isinstance(alias, str):
            raise TypeError("command alias must be a string")
        if not alias:
            raise ValueError("command alias cannot be empty")
        try:
            parser = self._commands[existing]
        except KeyError:
            raise UnknownCommandError(f"command {existing} does not exist", input=existing) from None
        self._commands[alias] = parser
        self._aliases[alias] = self._aliases.get(existing, existing)
        return parser

    def get(self, name, default=None, /, fold=False):
        """
        look a command up, optionally ignoring ASCII case.

        the exact spelling always wins over a case-insensitive match.
        """
        try:
            return self._commands[name]
        except KeyError:
            pass
        if fold:
            for key, parser in self._commands.items():
                if equalfold(key, name):
                    return parser
        return default

    def names(self, parser, /):
        """
        every key (canonical name and aliases) bound to `parser`.
        """
        return [name for name, registered in self._commands.items() if registered is parser]

    def execute(self, name, argv, /, fold=False):
        """
        prepare the command `name` to scan `argv` and return its parser.

        behavior
        - resets the child's argument buffer to a copy of `argv` and clears its
          staged non-options; the child is not iterated here.

        errors
        - UnknownCommandError when no command matches.
        """
        parser = self.get(name, fold=fold)
        if parser is None:
            raise UnknownCommandError(f"unknown command: {name}", input=name)
        parser.reset(argv)
        return parser


__all__ = (
    "CommandRegistry",
)
