"""
Faults module behavioral tests (codes, hierarchy, rendering, logging).

Scope
- Validate the stable fault codes and the exception hierarchy.
- Validate rich rendering through __rich__ and report().
- Validate structured ERROR records produced by emit().

Conventions
- Test method names follow CamelCase per project convention.
- Console output is captured with color disabled for deterministic comparison.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from optargs.faults import *


class TestFaultHierarchy(TestCase):
    """Codes, base classes and value semantics."""

    def testCodesAreStable(self):
        self.assertEqual(InvalidOptstringError.code, 21101)
        self.assertEqual(InvalidLongOptionError.code, 21102)
        self.assertEqual(InvalidOptionError.code, 22101)
        self.assertEqual(UnknownOptionError.code, 22102)
        self.assertEqual(MissingArgumentError.code, 22103)
        self.assertEqual(InvalidArgTypeError.code, 22104)
        self.assertEqual(HandlerError.code, 22111)
        self.assertEqual(UnknownCommandError.code, 23101)

    def testConstructionFaultsAreValueErrors(self):
        self.assertTrue(issubclass(InvalidOptstringError, ValueError))
        self.assertTrue(issubclass(InvalidLongOptionError, ValueError))
        self.assertTrue(issubclass(UnknownCommandError, LookupError))
        for kind in (InvalidOptionError, UnknownOptionError, MissingArgumentError, InvalidArgTypeError, HandlerError):
            with self.subTest(kind=kind.__name__):
                self.assertTrue(issubclass(kind, OptargsError))
                self.assertFalse(issubclass(kind, ValueError))

    def testMessageAndOptions(self):
        fault = UnknownOptionError("unknown option: x", input="x")
        self.assertEqual(str(fault), "unknown option: x")
        self.assertEqual(fault.message, "unknown option: x")
        self.assertEqual(fault.options["input"], "x")
        with self.assertRaises(TypeError):
            fault.options["input"] = "y"  # type: ignore[index]

    def testClassDefaultsCanBeOverridden(self):
        fault = UnknownOptionError("unknown option: x", title="nope", hint="try --help")
        self.assertEqual(fault.title, "nope")
        self.assertEqual(fault.hint, "try --help")
        self.assertNotIn("title", fault.options)
        self.assertEqual(UnknownOptionError.title, "unknown option")

    def testEqualityByKindAndMessage(self):
        self.assertEqual(UnknownOptionError("unknown option: x"), UnknownOptionError("unknown option: x"))
        self.assertNotEqual(UnknownOptionError("unknown option: x"), UnknownOptionError("unknown option: y"))
        self.assertNotEqual(UnknownOptionError("m"), MissingArgumentError("m"))
        self.assertEqual(len({UnknownOptionError("m"), UnknownOptionError("m")}), 1)

    def testHandlerErrorKeepsOriginal(self):
        original = ValueError("bad")
        fault = HandlerError("bad", original)
        self.assertIs(fault.error, original)


class TestFaultRendering(TestCase):
    """rich integration."""

    def render(self, fault):
        console = Console(file=io.StringIO(), color_system=None, force_terminal=False, width=120)
        report(fault, console=console)
        return console.file.getvalue()

    def testRenderHeaderMessageAndHint(self):
        output = self.render(InvalidOptstringError("invalid option character: ;"))
        self.assertIn("21101", output)
        self.assertIn("Invalid Optstring", output)
        self.assertIn("invalid option character: ;", output)
        self.assertIn("cannot be ':', ';' or '-'", output)

    def testRenderWithoutHint(self):
        output = self.render(UnknownOptionError("unknown option: z"))
        self.assertIn("22102", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("unknown option: z", output)
        self.assertNotIn("→", output)

    def testReportRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            report(ValueError("x"))  # type: ignore[arg-type]


class TestFaultLogging(TestCase):
    """emit() produces structured ERROR records."""

    def testEmitCarriesCodeAndContext(self):
        fault = MissingArgumentError("option requires an argument: o", input="o")
        with self.assertLogs("optargs", level="ERROR") as logs:
            self.assertIs(emit(fault), fault)
        record, = logs.records
        self.assertEqual(record.getMessage(), "option requires an argument: o")
        self.assertEqual(record.code, 22103)
        self.assertEqual(record.input, "o")

    def testEmitSkipsReservedRecordAttributes(self):
        fault = UnknownOptionError("unknown option: q", args=("x",), name="clash")
        with self.assertLogs("optargs", level="ERROR") as logs:
            emit(fault)
        record, = logs.records
        self.assertEqual(record.name, "optargs.faults")
        self.assertEqual(record.getMessage(), "unknown option: q")


if __name__ == "__main__":
    unittest.main()
