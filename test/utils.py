"""
Tests for the utility layer (sentinel, property helpers, character predicates).

Scope
- Unset: singleton identity, falsy semantics, copying and pickling.
- coalesce/mirror: Unset resolution and read-only views.
- Character predicates: isgraph, hasprefix, trimprefix, equalfold, swapcase,
  including the ASCII-only case folding rule.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from optargs.utils import *


class UnsetTest(TestCase):
    """Semantic guarantees of the Unset sentinel."""

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPickle(self) -> None:
        """
        copy(), deepcopy() and pickle round-trips preserve identity.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # noqa: F811
                pass


class HelpersTest(TestCase):
    """coalesce() and mirror()."""

    def testCoalesceReplacesOnlyUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testMirrorExposesReadOnlyViews(self) -> None:
        class Holder:
            table = mirror("table")
            names = mirror("names")
            value = mirror("value")

            def __init__(self):
                self._table = {"a": 1}
                self._names = {"x"}
                self._value = 3

        holder = Holder()
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertIsInstance(holder.names, frozenset)
        self.assertEqual(holder.value, 3)
        with self.assertRaises(TypeError):
            holder.table["b"] = 2  # type: ignore[index]
        with self.assertRaises(AttributeError):
            holder.value = 4  # type: ignore[misc]

    def testRenameForms(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename()


class PredicatesTest(TestCase):
    """Character predicates and ASCII-only case folding."""

    def testIsGraph(self) -> None:
        for text in ("a", "Z", "0", "!", "+", "é", "long-name", "a=b"):
            with self.subTest(text=text):
                self.assertTrue(isgraph(text))
        for text in ("", " ", "\t", "\n", "\x01", "\x7f", "a b", "tab\there"):
            with self.subTest(text=text):
                self.assertFalse(isgraph(text))

    def testHasPrefix(self) -> None:
        self.assertTrue(hasprefix("verbose", "verb"))
        self.assertFalse(hasprefix("VERBOSE", "verb"))
        self.assertTrue(hasprefix("VERBOSE", "verb", fold=True))
        self.assertTrue(hasprefix("anything", ""))

    def testTrimPrefixKeepsTailCasing(self) -> None:
        self.assertEqual(trimprefix("Output=File", "output", fold=True), "=File")
        self.assertEqual(trimprefix("Output=File", "output"), "Output=File")
        self.assertEqual(trimprefix("output=File", "output"), "=File")

    def testEqualFoldIsAsciiOnly(self) -> None:
        self.assertTrue(equalfold("Remote", "rEMOTE"))
        self.assertFalse(equalfold("ÉTÉ", "été"))
        self.assertTrue(equalfold("ÉtÉ", "ÉTÉ"))

    def testSwapCase(self) -> None:
        self.assertEqual(swapcase("a"), "A")
        self.assertEqual(swapcase("Q"), "q")
        self.assertEqual(swapcase("1"), "1")
        self.assertEqual(swapcase("é"), "é")
        self.assertEqual(swapcase("?"), "?")


if __name__ == "__main__":
    unittest.main()
