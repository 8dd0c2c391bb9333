"""
Optargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the descriptor, parser and compiler layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level getopt entry points.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- Character predicates
  • isgraph(c): printable, non-space character (the getopt notion of a valid option byte).
  • hasprefix(s, prefix, fold) / trimprefix(s, prefix, fold): prefix tests with optional
    ASCII-only case folding.
  • swapcase(c): the opposite-case ASCII letter, or the character itself.

Case folding
- Only ASCII letters are folded. Non-ASCII code points compare verbatim, so a
  case-insensitive parser never matches 'É' against 'é'.
"""
import builtins
import functools
from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" from the instance. Mappings are exposed as
    MappingProxyType and sets as frozenset, so the public surface cannot be used
    to mutate parser tables behind the parser's back.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


def isgraph(c, /):
    """
    Return True when every character of `c` is printable and not whitespace.

    Mirrors C isgraph() for ASCII and extends it to printable Unicode code
    points, which long option names are allowed to contain.
    """
    return bool(c) and all(char.isprintable() and not char.isspace() for char in c)


def _fold(s):
    # ASCII-only lowering; str.lower() would also fold non-ASCII letters
    return s.translate(_ASCII_LOWER)


_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def hasprefix(s, prefix, /, fold=False):
    """
    Test whether `s` starts with `prefix`, optionally ignoring ASCII case.
    """
    if fold:
        return _fold(s).startswith(_fold(prefix))
    return s.startswith(prefix)


def trimprefix(s, prefix, /, fold=False):
    """
    Remove `prefix` from the start of `s` when present; return `s` unchanged otherwise.

    With fold=True the comparison ignores ASCII case, but the returned tail keeps
    the original casing of `s`.
    """
    if hasprefix(s, prefix, fold):
        return s[len(prefix):]
    return s


def equalfold(a, b, /):
    """
    Compare two strings ignoring ASCII case only.
    """
    return _fold(a) == _fold(b)


def swapcase(c, /):
    """
    Return the opposite-case ASCII letter of a single character, or `c` itself.
    """
    if len(c) == 1 and c.isascii() and c.isalpha():
        return c.swapcase()
    return c


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "isgraph",
    "hasprefix",
    "trimprefix",
    "equalfold",
    "swapcase",
)
