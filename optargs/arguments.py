r"""
Optargs option descriptors and yield records.

Overview
- ArgType: arity of an option (NONE, REQUIRED, OPTIONAL), the `:`/`::` markers
  of an optstring.
- Flag: immutable descriptor for one option (short byte or long name), with an
  optional handler callback.
- Option: the record yielded by the scan loop for every recognized option.
- NONOPT: the synthetic option name ("\x01") used for non-options in in-order mode.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields listed in __introspectable__ as read-only properties.

Quick example:
    >>> from optargs.arguments import ArgType, Flag
    >>> verbose = Flag("verbose")
    >>> output = Flag("output", ArgType.REQUIRED)
    >>> traced = output.bind(lambda name, arg: print(name, arg))
"""
import functools
import operator
import re
from enum import IntEnum
from typing import NamedTuple

from .utils import *


class ArgType(IntEnum):
    """
    arity of an option.

    - NONE: the option never takes an argument (`a` in an optstring).
    - REQUIRED: an argument must follow, inline or as the next element (`a:`).
    - OPTIONAL: an argument may follow (`a::`).
    """
    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


NONOPT = "\x01"


class ArgumentType(type):
    """
    Metaclass that turns descriptor classes into introspectable, read-only shapes.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ implementations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Flag(metaclass=ArgumentType):
    """
    Immutable descriptor for one option.

    Fields
    - name: str
      a single character for short options, any non-space printable string for
      long options. Validation against the short/long rules happens when the
      descriptor is installed in a parser table.
    - has_arg: ArgType
      the arity. Values outside ArgType are kept verbatim so the resolvers can
      report them as InvalidArgTypeError instead of failing at construction.
    - handle: callable(name, arg) | None
      invoked in place of yielding the option; see Parser.set_handler().

    Identity
    - Two Flag objects are equal only if they are the same object. A flag shared
      between the short and long tables is the same semantic option.
    """
    __introspectable__ = (
        "name",
        "has_arg",
        "handle",
    )
    __slots__ = ("_name", "_has_arg", "_handle")

    def __init__(self, name, has_arg=ArgType.NONE, handle=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        if not isinstance(has_arg, int):
            raise TypeError(f"{type(self).__typename__} 'has_arg' must be an arg-type")
        if handle is not Unset and handle is not None and not callable(handle):
            raise TypeError(f"{type(self).__typename__} 'handle' must be callable")
        try:
            has_arg = ArgType(has_arg)
        except ValueError:
            pass  # kept raw, reported by the resolvers
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_has_arg", has_arg)
        object.__setattr__(self, "_handle", coalesce(handle))

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def bind(self, handle, /):
        """
        return a copy of this flag carrying `handle` (None detaches it).
        """
        return type(self)(self.name, self.has_arg, handle)


class Option(NamedTuple):
    """
    one recognized option, as yielded by Parser.options().

    - name: the canonical name (the registered long name, the short character,
      or NONOPT for in-order non-options).
    - has_arg: whether an argument was attached.
    - arg: the attached argument text ("" when absent).

    Option() is the placeholder yielded next to an error.
    """
    name: str = ""
    has_arg: bool = False
    arg: str = ""


__all__ = (
    "ArgType",
    "Flag",
    "Option",
    "NONOPT",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
